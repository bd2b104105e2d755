import pytest

from prism.models.card import Card
from prism.models.deck import Deck


def build_deck(
    name: str,
    cards: list[tuple[str, int]],
    *,
    commander: str = "Atraxa, Praetors' Voice",
    bracket: int = 2,
    color: str = "",
    deck_id: str | None = None,
) -> Deck:
    """Deck with a readable id derived from its name."""
    return Deck(
        id=deck_id or name.lower().replace(" ", "-"),
        name=name,
        commander=commander,
        bracket=bracket,
        cards=[Card(name=card_name, quantity=quantity) for card_name, quantity in cards],
        assigned_color=color,
    )


@pytest.fixture
def deck_a() -> Deck:
    return build_deck("Deck A", [("Sol Ring", 1), ("Island", 10)])


@pytest.fixture
def deck_b() -> Deck:
    return build_deck("Deck B", [("Sol Ring", 1), ("Island", 12), ("Lightning Bolt", 1)])


@pytest.fixture
def sample_decklist() -> str:
    """Decklist export as copied from Moxfield."""
    return """Commander
1 Atraxa, Praetors' Voice

Deck
1 Sol Ring
1x Arcane Signet (CMR) 297
// Lands
10 Island
1 Command Tower

SIDEBOARD:
1 Swords to Plowshares"""
