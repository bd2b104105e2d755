"""
Derived structures produced by the card processor.

These are values recomputed on every processing pass. None of them hold
references back to the collection they were computed from.
"""

from dataclasses import dataclass, field

from prism.models.deck import Deck


@dataclass(frozen=True, slots=True)
class MarkSlot:
    """One deck's stripe on a card's sleeve."""

    position: int  # Fixed 1-based stripe slot of the deck
    color: str
    deck_name: str
    deck_id: str
    bracket: int


@dataclass(frozen=True)
class ProcessedCard:
    """
    A unique card across all decks with its marking instructions.

    Attributes:
        canonical_name: First-seen display spelling
        normalized_key: Case/whitespace-insensitive dedup key
        is_basic_land: Whether the card is a basic land
        total_quantity: Physical copies needed (max across decks for basics, else 1)
        deck_count: Number of decks containing the card
        mark_slots: Stripes to paint, ordered by position
        mark_summary: Human-readable slot list, e.g. "Yellow (1), Blue (3)"
    """

    canonical_name: str
    normalized_key: str
    is_basic_land: bool
    total_quantity: int
    deck_count: int
    mark_slots: tuple[MarkSlot, ...] = ()
    mark_summary: str = ""

    @property
    def deck_ids(self) -> list[str]:
        """Ids of decks containing the card, in stripe order."""
        return [slot.deck_id for slot in self.mark_slots]

    @property
    def deck_names(self) -> list[str]:
        return [slot.deck_name for slot in self.mark_slots]

    @property
    def is_shared(self) -> bool:
        return self.deck_count > 1


@dataclass(frozen=True, slots=True)
class SharedCardSummary:
    """Entry in the most-shared-cards list."""

    name: str
    count: int
    decks: tuple[str, ...]


@dataclass(frozen=True)
class Statistics:
    """Summary statistics for a processed collection."""

    total_decks: int = 0
    total_unique_cards: int = 0
    total_card_slots: int = 0  # Physical cards needed if nothing were shared
    shared_cards: int = 0  # Cards appearing in 2+ decks
    most_shared_cards: tuple[SharedCardSummary, ...] = ()

    @property
    def cards_saved(self) -> int:
        """Physical cards saved by sharing instead of owning full copies."""
        return max(self.total_card_slots - self.total_unique_cards, 0)


@dataclass(frozen=True)
class ProcessedData:
    """
    Complete result of one processing pass.

    Attributes:
        decks: Copies of the input decks carrying assigned colors and positions
        cards: Unique cards, most shared first
        color_palette: Deck id -> assigned color
        stats: Summary statistics
    """

    decks: tuple[Deck, ...] = ()
    cards: tuple[ProcessedCard, ...] = ()
    color_palette: dict[str, str] = field(default_factory=dict)
    stats: Statistics = field(default_factory=Statistics)

    def get_card(self, card_key: str) -> ProcessedCard | None:
        """Look up a processed card by normalized key."""
        return next((card for card in self.cards if card.normalized_key == card_key), None)

    def live_keys(self) -> set[str]:
        return {card.normalized_key for card in self.cards}
