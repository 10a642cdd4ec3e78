"""
Battle session storage.

FirestoreBattleStore 用 Firestore 事务实现 commit_if（冲突时由客户端库自动重试）；
InMemoryBattleStore 用版本号 + asyncio.Lock 实现同样的比较并交换语义。
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.field_path import FieldPath

from arena.combat.models.battle_session import BattleSession
from arena.combat.ports import CommitResult, Mutator, Precondition
from arena.config import settings

logger = logging.getLogger(__name__)


class FirestoreBattleStore:
    """Firestore-backed battle session store."""

    def __init__(
        self,
        firestore_client: Optional[firestore.Client] = None,
        collection: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        self.db = firestore_client or firestore.Client(database=settings.firestore_database)
        self.collection = collection or settings.battles_collection
        self.max_attempts = max_attempts or settings.firestore_max_attempts

    def _battle_ref(self, session_id: str) -> firestore.DocumentReference:
        return self.db.collection(self.collection).document(session_id)

    async def create_session(self, session: BattleSession) -> None:
        self._battle_ref(session.session_id).set(session.to_firestore())

    async def read_session(self, session_id: str) -> Optional[BattleSession]:
        doc = self._battle_ref(session_id).get()
        if not doc.exists:
            return None
        return BattleSession.from_firestore(doc.to_dict() or {})

    async def commit_if(
        self,
        session_id: str,
        precondition: Precondition,
        mutator: Mutator,
    ) -> CommitResult:
        battle_ref = self._battle_ref(session_id)
        transaction = self.db.transaction(max_attempts=self.max_attempts)

        @firestore.transactional
        def _apply(transaction: firestore.Transaction) -> CommitResult:
            snapshot = battle_ref.get(transaction=transaction)
            state = BattleSession.from_firestore(snapshot.to_dict() or {}) if snapshot.exists else None
            if not precondition(state):
                return CommitResult(committed=False, state=state)
            mutator(state)
            transaction.set(battle_ref, state.to_firestore())
            return CommitResult(committed=True, state=state)

        try:
            return _apply(transaction)
        except (gcp_exceptions.Aborted, gcp_exceptions.Conflict) as exc:
            logger.warning("[BattleStore] commit contention for %s: %s", session_id, exc)
        except ValueError as exc:
            # 重试次数耗尽时客户端库抛出 ValueError，原因链上是 Aborted
            if not isinstance(exc.__cause__, gcp_exceptions.Aborted):
                raise
            logger.warning("[BattleStore] commit gave up for %s: %s", session_id, exc)
        return CommitResult(committed=False, state=await self.read_session(session_id))

    async def set_online(self, session_id: str, participant_id: str, online: bool) -> bool:
        battle_ref = self._battle_ref(session_id)
        doc = battle_ref.get()
        if not doc.exists:
            return False
        participants = (doc.to_dict() or {}).get("participants") or {}
        if participant_id not in participants:
            return False
        field_path = FieldPath("participants", participant_id, "online").to_api_repr()
        battle_ref.update({field_path: online})
        return True


class InMemoryBattleStore:
    """
    In-memory battle session store.

    每个会话保存 (版本号, 序列化数据)。commit_if 在锁外读取并执行 mutator，
    持锁时版本号未变才写回，否则基于最新状态重试。
    """

    def __init__(self, max_attempts: int = 5) -> None:
        self.max_attempts = max_attempts
        self._records: Dict[str, Tuple[int, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def create_session(self, session: BattleSession) -> None:
        async with self._lock:
            if session.session_id in self._records:
                raise ValueError(f"session_id '{session.session_id}' already exists")
            self._records[session.session_id] = (0, session.to_firestore())

    async def read_session(self, session_id: str) -> Optional[BattleSession]:
        record = self._records.get(session_id)
        if record is None:
            return None
        return BattleSession.from_firestore(record[1])

    def version_of(self, session_id: str) -> Optional[int]:
        record = self._records.get(session_id)
        return record[0] if record else None

    async def commit_if(
        self,
        session_id: str,
        precondition: Precondition,
        mutator: Mutator,
    ) -> CommitResult:
        state: Optional[BattleSession] = None
        for attempt in range(1, self.max_attempts + 1):
            record = self._records.get(session_id)
            version = record[0] if record else None
            state = BattleSession.from_firestore(record[1]) if record else None

            # 让出控制权，使并发提交在此交错
            await asyncio.sleep(0)

            if not precondition(state):
                return CommitResult(committed=False, state=state)
            mutator(state)

            async with self._lock:
                current = self._records.get(session_id)
                if current is not None and current[0] == version:
                    self._records[session_id] = (version + 1, state.to_firestore())
                    return CommitResult(committed=True, state=state)

            logger.debug("[BattleStore] version conflict on %s (attempt %s)", session_id, attempt)

        logger.warning("[BattleStore] commit gave up after %s attempts: %s", self.max_attempts, session_id)
        return CommitResult(committed=False, state=await self.read_session(session_id))

    async def set_online(self, session_id: str, participant_id: str, online: bool) -> bool:
        async with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return False
            version, data = record
            participant = (data.get("participants") or {}).get(participant_id)
            if participant is None:
                return False
            participant["online"] = online
            self._records[session_id] = (version + 1, data)
            return True
