"""
Collection (a "prism") and its editing operations.

A collection is the unit of persistence: an ordered list of decks plus the
set of cards the player has already marked. Every editing helper returns a
new Collection; the input is never mutated.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from prism.models.deck import Deck, generate_id


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


@dataclass
class Collection:
    """
    A set of decks sharing one pool of physical cards.

    Attributes:
        id: Opaque identifier
        name: Display name
        decks: Decks in stripe order (index 0 is stripe position 1)
        marked_cards: Normalized card keys the player has physically marked
        created_at: Creation timestamp
        updated_at: Last modification timestamp
    """

    id: str
    name: str
    decks: list[Deck] = field(default_factory=list)
    marked_cards: set[str] = field(default_factory=set)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def get_deck(self, deck_id: str) -> Deck | None:
        """Find a deck by id."""
        return next((deck for deck in self.decks if deck.id == deck_id), None)

    def deck_count(self) -> int:
        return len(self.decks)


def create_collection(name: str = "") -> Collection:
    """Create an empty collection. Blank names default to 'PRISM <date>'."""
    now = utc_now()
    return Collection(
        id=generate_id(),
        name=name.strip() or f"PRISM {now.date().isoformat()}",
        created_at=now,
        updated_at=now,
    )


def add_deck(collection: Collection, deck: Deck) -> Collection:
    """Append a deck. It takes the next stripe position."""
    return replace(collection, decks=[*collection.decks, deck], updated_at=utc_now())


def remove_deck(collection: Collection, deck_id: str) -> Collection:
    """Remove a deck by id. Unknown ids leave the deck list unchanged."""
    return replace(
        collection,
        decks=[deck for deck in collection.decks if deck.id != deck_id],
        updated_at=utc_now(),
    )


def update_deck(collection: Collection, deck_id: str, **changes: object) -> Collection:
    """
    Replace fields of one deck (name, commander, bracket, cards, color).

    Raises:
        KeyError: If no deck has the given id
    """
    if collection.get_deck(deck_id) is None:
        raise KeyError(deck_id)

    decks = [
        replace(deck, **changes) if deck.id == deck_id else deck  # type: ignore[arg-type]
        for deck in collection.decks
    ]
    return replace(collection, decks=decks, updated_at=utc_now())


def mark_card(collection: Collection, card_key: str) -> Collection:
    """Record that a card's sleeve has been physically marked."""
    return replace(
        collection,
        marked_cards=collection.marked_cards | {card_key},
        updated_at=utc_now(),
    )


def unmark_card(collection: Collection, card_key: str) -> Collection:
    """Clear the marked flag for a card."""
    return replace(
        collection,
        marked_cards=collection.marked_cards - {card_key},
        updated_at=utc_now(),
    )


def prune_marked_cards(collection: Collection, live_keys: set[str]) -> Collection:
    """Drop marked flags for cards no longer present in any deck."""
    return replace(collection, marked_cards=collection.marked_cards & live_keys)
