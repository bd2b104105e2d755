from dataclasses import dataclass, field
from enum import Enum

from prism.models.processed import MarkSlot


class ChangeAction(str, Enum):
    """What happened to a card between two processed states."""

    NEW = "NEW"
    UPDATE = "UPDATE"
    REMOVE = "REMOVE"

    @property
    def priority(self) -> int:
        """Sort priority: NEW < UPDATE < REMOVE."""
        return _ACTION_PRIORITY[self]


_ACTION_PRIORITY = {
    ChangeAction.NEW: 0,
    ChangeAction.UPDATE: 1,
    ChangeAction.REMOVE: 2,
}


@dataclass(frozen=True)
class CardChange:
    """
    A change to one card's marks.

    Attributes:
        card_name: Canonical display name
        action: NEW, UPDATE or REMOVE
        old_mark_summary: Summary before the change ("" for NEW)
        new_mark_summary: Summary after the change ("" for REMOVE)
        physical_action: Instruction for the player
        old_slots: Slots before the change
        new_slots: Slots after the change
    """

    card_name: str
    action: ChangeAction
    old_mark_summary: str
    new_mark_summary: str
    physical_action: str
    old_slots: tuple[MarkSlot, ...] = ()
    new_slots: tuple[MarkSlot, ...] = ()


@dataclass(frozen=True, slots=True)
class DeltaSummary:
    new_cards: int = 0
    updated_cards: int = 0
    removed_cards: int = 0

    @property
    def total(self) -> int:
        return self.new_cards + self.updated_cards + self.removed_cards


@dataclass(frozen=True)
class PrismDelta:
    """All changes between two processed states."""

    changes: tuple[CardChange, ...] = ()
    summary: DeltaSummary = field(default_factory=DeltaSummary)

    @property
    def is_empty(self) -> bool:
        return not self.changes
