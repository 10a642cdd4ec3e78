"""
Combatant profile provider (Firestore).

玩家档案文档 players/{player_id}：
{
    "display_name": "...",
    "level": 5,
    "hp": 120, "max_hp": 150,
    "strength": 30, "defense": 10, "speed": 12, "critical_rate": 0.1,
    "equipment": {"RightHand": "item_sword_01"},
    "equipment_stats": {"power": 40, "defense": 15},
    "equipped_symbol": {"id": "fire_slash", "kind": "physics", "element": "fire", ...},
    "armor_tags": ["armor_type_light", "element_wind"]
}
"""
import logging
from typing import Optional

from google.cloud import firestore

from arena.combat.errors import ProfileNotFoundError
from arena.combat.models.combatant import CombatantProfile
from arena.config import settings

logger = logging.getLogger(__name__)


class FirestoreProfileProvider:
    """Reads combatant profiles from the players collection."""

    def __init__(
        self,
        firestore_client: Optional[firestore.Client] = None,
        collection: Optional[str] = None,
    ) -> None:
        self.db = firestore_client or firestore.Client(database=settings.firestore_database)
        self.collection = collection or settings.players_collection

    async def get_combatant_profile(self, combatant_id: str) -> CombatantProfile:
        doc = self.db.collection(self.collection).document(combatant_id).get()
        if not doc.exists:
            raise ProfileNotFoundError(combatant_id)
        data = doc.to_dict() or {}
        data["player_id"] = combatant_id
        return CombatantProfile(**data)
