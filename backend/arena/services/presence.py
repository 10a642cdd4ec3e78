"""
Presence source backed by the battle session record.

在线标记保存在 battles/{id}.participants.{player_id}.online，
由断线检测机制通过 set_online 写入。
"""
import logging

from arena.combat.ports import SessionStore

logger = logging.getLogger(__name__)


class SessionPresenceSource:
    """从会话记录读取参战方在线状态"""

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    async def is_online(self, session_id: str, participant_id: str) -> bool:
        session = await self.store.read_session(session_id)
        if session is None:
            return False
        participant = session.get_participant(participant_id)
        if participant is None:
            logger.debug("presence lookup for unknown participant %s/%s", session_id, participant_id)
            return False
        return participant.online
