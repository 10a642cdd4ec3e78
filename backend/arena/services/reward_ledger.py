"""
Reward ledger (Firestore).

余额与排行榜分数保存在 players/{player_id}：
{"currencies": {"PS": 1000, "BT": 50}, "rankings": {"points_ranking": 1000}}
"""
import logging
from typing import Optional

from google.cloud import firestore

from arena.config import settings

logger = logging.getLogger(__name__)


class FirestoreRewardLedger:
    """Firestore-backed currency balances and ranking scores."""

    def __init__(
        self,
        firestore_client: Optional[firestore.Client] = None,
        collection: Optional[str] = None,
    ) -> None:
        self.db = firestore_client or firestore.Client(database=settings.firestore_database)
        self.collection = collection or settings.players_collection

    def _player_ref(self, player_id: str) -> firestore.DocumentReference:
        return self.db.collection(self.collection).document(player_id)

    async def get_balance(self, player_id: str, currency: str) -> int:
        doc = self._player_ref(player_id).get()
        if not doc.exists:
            return 0
        currencies = (doc.to_dict() or {}).get("currencies") or {}
        return int(currencies.get(currency, 0) or 0)

    async def transfer_currency(
        self,
        from_id: str,
        to_id: str,
        amount: int,
        debit_currency: str,
        credit_currency: str,
    ) -> None:
        """从 from_id 扣除 debit_currency，给 to_id 增加同额 credit_currency（单次批量写入）"""
        batch = self.db.batch()
        batch.set(
            self._player_ref(from_id),
            {"currencies": {debit_currency: firestore.Increment(-amount)}},
            merge=True,
        )
        batch.set(
            self._player_ref(to_id),
            {"currencies": {credit_currency: firestore.Increment(amount)}},
            merge=True,
        )
        batch.commit()
        logger.info(
            "[Ledger] %s -%s%s, %s +%s%s",
            from_id,
            amount,
            debit_currency,
            to_id,
            amount,
            credit_currency,
        )

    async def update_ranking(self, player_id: str, metric: str, value: int) -> None:
        self._player_ref(player_id).set({"rankings": {metric: value}}, merge=True)
