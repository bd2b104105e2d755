from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DeckOverlap:
    """Number of cards two decks have in common."""

    deck1: str
    deck2: str
    overlap_count: int


@dataclass(frozen=True)
class OverlapReport:
    """Collection-wide sharing summary."""

    total_unique_cards: int
    shared_card_count: int
    unique_card_count: int  # Cards used by exactly one deck
    pairwise: tuple[DeckOverlap, ...] = ()
    most_shared: tuple[str, ...] = ()
