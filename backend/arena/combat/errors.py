"""Combat error types."""


class CombatError(Exception):
    """Base class for combat engine errors."""


class InvalidSymbolError(CombatError, ValueError):
    """Raised when a combat symbol is constructed from invalid data."""


class InvalidSlotError(CombatError, ValueError):
    """Raised when an equipment slot is constructed from invalid data."""


class SlotLockedError(CombatError):
    """Raised on any write to a fixed or penalty slot.

    This is a programming error, callers must not catch it to recover.
    """


class ProfileNotFoundError(CombatError):
    """Raised when the profile provider has no record for a combatant."""

    def __init__(self, combatant_id: str) -> None:
        self.combatant_id = combatant_id
        super().__init__(f"combatant profile not found: {combatant_id}")


class InvalidBattleError(CombatError, ValueError):
    """Raised when a battle cannot be started between the given combatants."""
