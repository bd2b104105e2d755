import uuid
from dataclasses import dataclass, field

from prism.models.card import Card


def generate_id() -> str:
    """Generate an opaque unique identifier for a deck or collection."""
    return str(uuid.uuid4())


@dataclass
class Deck:
    """
    A Commander deck inside a collection.

    Attributes:
        id: Opaque identifier, unique within the collection
        name: Deck name (unique case-insensitively, enforced by the caller)
        commander: Commander card name
        bracket: Commander power bracket (1-4), carried as metadata
        cards: Mainboard cards in decklist order
        assigned_color: Stripe color, empty until assigned
        stripe_position: Fixed 1-based stripe slot, set when processed
    """

    id: str
    name: str
    commander: str
    bracket: int
    cards: list[Card] = field(default_factory=list)
    assigned_color: str = ""
    stripe_position: int | None = None

    def card_count(self) -> int:
        """Total physical cards in the deck (sum of quantities)."""
        return sum(card.quantity for card in self.cards)


def create_deck(
    name: str,
    commander: str,
    bracket: int,
    cards: list[Card],
    color: str = "",
    stripe_position: int | None = None,
) -> Deck:
    """
    Create a new deck with a generated id.

    Hex colors are stored upper-cased so color comparisons are stable.
    """
    return Deck(
        id=generate_id(),
        name=name.strip(),
        commander=commander.strip(),
        bracket=int(bracket),
        cards=list(cards),
        assigned_color=normalize_color(color),
        stripe_position=stripe_position,
    )


def normalize_color(color: str) -> str:
    """Trim a color and upper-case it if it is a hex value."""
    color = color.strip()
    return color.upper() if color.startswith("#") else color
