import pytest

from prism.config import DEFAULT_PALETTE
from prism.core.processor import build_mark_summary, process_decks
from prism.models.card import Card
from prism.models.deck import Deck
from prism.models.failure import TooManyDecksError
from prism.models.processed import MarkSlot
from prism.parsers.decklist import parse_decklist


def _deck(name: str, cards: list[tuple[str, int]], color: str = "") -> Deck:
    return Deck(
        id=name.lower().replace(" ", "-"),
        name=name,
        commander="Kenrith, the Returned King",
        bracket=3,
        cards=[Card(name=n, quantity=q) for n, q in cards],
        assigned_color=color,
    )


class TestScenario:
    def test_two_deck_scenario(self, deck_a: Deck, deck_b: Deck) -> None:
        """Sol Ring and Island are shared, Lightning Bolt is unique to deck B."""
        data = process_decks([deck_a, deck_b])

        assert data.stats.total_unique_cards == 3
        assert data.stats.shared_cards == 2

        sol_ring = data.get_card("sol ring")
        island = data.get_card("island")
        bolt = data.get_card("lightning bolt")
        assert sol_ring is not None and island is not None and bolt is not None

        assert sol_ring.deck_count == 2
        assert island.deck_count == 2
        assert island.total_quantity == 12
        assert bolt.deck_count == 1

    def test_statistics(self, deck_a: Deck, deck_b: Deck) -> None:
        data = process_decks([deck_a, deck_b])

        assert data.stats.total_decks == 2
        assert data.stats.total_card_slots == 25
        assert data.stats.cards_saved == 22
        assert [entry.name for entry in data.stats.most_shared_cards] == ["Island", "Sol Ring"]

    def test_mark_slots(self, deck_a: Deck, deck_b: Deck) -> None:
        data = process_decks([deck_a, deck_b])

        sol_ring = data.get_card("sol ring")
        assert sol_ring is not None
        assert [slot.position for slot in sol_ring.mark_slots] == [1, 2]
        assert [slot.color for slot in sol_ring.mark_slots] == list(DEFAULT_PALETTE[:2])
        assert sol_ring.deck_names == ["Deck A", "Deck B"]
        assert sol_ring.mark_summary == "Yellow (1), Blue (2)"

    def test_fixed_positions(self, deck_a: Deck, deck_b: Deck) -> None:
        """A card only in the second deck still uses slot 2."""
        data = process_decks([deck_a, deck_b])

        bolt = data.get_card("lightning bolt")
        assert bolt is not None
        assert [slot.position for slot in bolt.mark_slots] == [2]
        assert bolt.mark_summary == "Blue (2)"


class TestProcessDecks:
    def test_empty_input(self) -> None:
        """Zero decks is a valid, empty result."""
        data = process_decks([])

        assert data.cards == ()
        assert data.decks == ()
        assert data.stats.total_decks == 0
        assert data.stats.total_unique_cards == 0

    def test_deck_without_cards(self) -> None:
        data = process_decks([_deck("Empty", [])])

        assert len(data.decks) == 1
        assert data.cards == ()

    def test_input_not_mutated(self, deck_a: Deck) -> None:
        process_decks([deck_a])

        assert deck_a.assigned_color == ""
        assert deck_a.stripe_position is None

    def test_decks_carry_color_and_position(self, deck_a: Deck, deck_b: Deck) -> None:
        data = process_decks([deck_a, deck_b])

        assert [deck.stripe_position for deck in data.decks] == [1, 2]
        assert data.decks[0].assigned_color == DEFAULT_PALETTE[0]
        assert data.color_palette == {"deck-a": DEFAULT_PALETTE[0], "deck-b": DEFAULT_PALETTE[1]}

    def test_existing_colors_kept(self) -> None:
        decks = [_deck("One", [("Sol Ring", 1)], color="#C73D2B"), _deck("Two", [("Sol Ring", 1)])]

        data = process_decks(decks)

        assert data.decks[0].assigned_color == "#C73D2B"
        assert data.decks[1].assigned_color == DEFAULT_PALETTE[0]

    def test_deterministic(self, deck_a: Deck, deck_b: Deck) -> None:
        """Processing the same decks twice gives equal results."""
        assert process_decks([deck_a, deck_b]) == process_decks([deck_a, deck_b])

    def test_dedup_by_normalized_key(self) -> None:
        decks = [
            _deck("One", [("Sol Ring", 1)]),
            _deck("Two", [("  SOL   ring ", 1)]),
        ]

        data = process_decks(decks)

        assert len(data.cards) == 1
        card = data.cards[0]
        assert card.deck_count == 2
        assert card.deck_ids == ["one", "two"]

    def test_canonical_name_is_first_seen(self) -> None:
        decks = [_deck("One", [("sol ring", 1)]), _deck("Two", [("Sol Ring", 1)])]

        data = process_decks(decks)

        assert data.cards[0].canonical_name == "sol ring"

    def test_repeated_lines_in_one_deck(self) -> None:
        """Repeated lines count as one deck for the card."""
        data = process_decks([_deck("One", [("Island", 5), ("island", 5)])])

        island = data.get_card("island")
        assert island is not None
        assert island.deck_count == 1
        assert island.total_quantity == 10

    def test_non_basic_quantity_is_one(self) -> None:
        data = process_decks([_deck("One", [("Sol Ring", 3)])])

        sol_ring = data.get_card("sol ring")
        assert sol_ring is not None
        assert sol_ring.total_quantity == 1

    def test_blank_card_names_skipped(self) -> None:
        data = process_decks([_deck("One", [("  ", 1), ("Sol Ring", 1)])])

        assert [card.canonical_name for card in data.cards] == ["Sol Ring"]

    def test_sort_order(self) -> None:
        """Most shared first, then case-insensitive by name."""
        decks = [
            _deck("One", [("zebra", 1), ("Apple", 1), ("Mango", 1)]),
            _deck("Two", [("Mango", 1), ("banana", 1)]),
            _deck("Three", [("Mango", 1), ("zebra", 1)]),
        ]

        data = process_decks(decks)

        names = [card.canonical_name for card in data.cards]
        assert names == ["Mango", "zebra", "Apple", "banana"]
        for a, b in zip(data.cards, data.cards[1:], strict=False):
            assert a.deck_count >= b.deck_count

    def test_max_decks(self, deck_a: Deck, deck_b: Deck) -> None:
        with pytest.raises(TooManyDecksError) as exc_info:
            process_decks([deck_a, deck_b], max_decks=1)

        assert exc_info.value.max_decks == 1
        assert exc_info.value.palette_size == len(DEFAULT_PALETTE)
        assert "limited to 1 decks" in exc_info.value.message

    def test_parsed_export_counts_commander_once(self) -> None:
        parsed = parse_decklist(
            "Commander\n1 Atraxa, Praetors' Voice\n\nDeck\n1 Atraxa, Praetors' Voice\n1 Sol Ring"
        )
        deck = Deck(id="atraxa", name="Atraxa", commander="Atraxa", bracket=3, cards=parsed.cards)

        data = process_decks([deck])

        assert data.stats.total_card_slots == 2
        assert data.stats.total_unique_cards == 2

    def test_palette_exhaustion(self) -> None:
        decks = [_deck(f"Deck {i}", []) for i in range(16)]

        with pytest.raises(TooManyDecksError):
            process_decks(decks, palette=DEFAULT_PALETTE[:15])

    def test_live_keys(self, deck_a: Deck, deck_b: Deck) -> None:
        data = process_decks([deck_a, deck_b])
        assert data.live_keys() == {"sol ring", "island", "lightning bolt"}


class TestBuildMarkSummary:
    def test_named_colors(self) -> None:
        slots = [
            MarkSlot(position=1, color="Red", deck_name="One", deck_id="1", bracket=2),
            MarkSlot(position=4, color="#558cc1", deck_name="Four", deck_id="4", bracket=2),
        ]
        assert build_mark_summary(slots) == "Red (1), Blue (4)"

    def test_no_slots(self) -> None:
        assert build_mark_summary([]) == ""
