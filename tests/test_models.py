import pytest

from prism.models.card import Card
from prism.models.collection import (
    add_deck,
    create_collection,
    mark_card,
    prune_marked_cards,
    remove_deck,
    unmark_card,
    update_deck,
)
from prism.models.deck import Deck, create_deck
from prism.models.delta import ChangeAction
from prism.models.failure import (
    ColorConflictError,
    FailureKind,
    InvalidOrderError,
    TooManyDecksError,
)


@pytest.fixture
def atraxa() -> Deck:
    return create_deck("  Atraxa  ", " Atraxa, Praetors' Voice ", 3, [Card("Sol Ring")])


class TestDeck:
    def test_create_deck_trims_fields(self, atraxa: Deck) -> None:
        assert atraxa.name == "Atraxa"
        assert atraxa.commander == "Atraxa, Praetors' Voice"
        assert atraxa.assigned_color == ""
        assert atraxa.id

    def test_hex_color_upper_cased(self) -> None:
        deck = create_deck("Deck", "Commander", 2, [], color=" #ecc933 ")
        assert deck.assigned_color == "#ECC933"

    def test_named_color_kept(self) -> None:
        deck = create_deck("Deck", "Commander", 2, [], color="Red")
        assert deck.assigned_color == "Red"

    def test_card_count(self) -> None:
        deck = create_deck("Deck", "Commander", 2, [Card("Sol Ring"), Card("Island", 30)])
        assert deck.card_count() == 31

    def test_unique_ids(self) -> None:
        assert create_deck("A", "C", 1, []).id != create_deck("A", "C", 1, []).id


class TestCollection:
    def test_default_name(self) -> None:
        collection = create_collection()
        assert collection.name.startswith("PRISM ")

    def test_add_deck_returns_new_collection(self, atraxa: Deck) -> None:
        empty = create_collection("Decks")

        collection = add_deck(empty, atraxa)

        assert empty.decks == []
        assert collection.deck_count() == 1
        assert collection.get_deck(atraxa.id) == atraxa

    def test_remove_deck(self, atraxa: Deck) -> None:
        collection = remove_deck(add_deck(create_collection(), atraxa), atraxa.id)
        assert collection.decks == []

    def test_remove_unknown_deck(self, atraxa: Deck) -> None:
        collection = add_deck(create_collection(), atraxa)
        assert remove_deck(collection, "missing").decks == [atraxa]

    def test_update_deck(self, atraxa: Deck) -> None:
        collection = add_deck(create_collection(), atraxa)

        updated = update_deck(collection, atraxa.id, bracket=4, cards=[Card("Opt")])

        deck = updated.get_deck(atraxa.id)
        assert deck is not None
        assert deck.bracket == 4
        assert deck.cards == [Card("Opt")]
        assert atraxa.bracket == 3

    def test_update_unknown_deck(self) -> None:
        with pytest.raises(KeyError):
            update_deck(create_collection(), "missing", bracket=1)

    def test_mark_and_unmark(self) -> None:
        collection = mark_card(create_collection(), "sol ring")
        assert collection.marked_cards == {"sol ring"}

        collection = unmark_card(collection, "sol ring")
        assert collection.marked_cards == set()

    def test_prune_marked_cards(self) -> None:
        collection = mark_card(mark_card(create_collection(), "sol ring"), "opt")

        pruned = prune_marked_cards(collection, {"sol ring", "island"})

        assert pruned.marked_cards == {"sol ring"}


class TestChangeAction:
    def test_priority(self) -> None:
        ordered = sorted(ChangeAction, key=lambda action: action.priority)
        assert ordered == [ChangeAction.NEW, ChangeAction.UPDATE, ChangeAction.REMOVE]


class TestKnownErrors:
    def test_too_many_decks_message(self) -> None:
        error = TooManyDecksError(16, 15)

        assert error.message == "Too many decks (16). Only 15 distinct stripe colors are available."
        assert error.status_code == 400

    def test_too_many_decks_limit_message(self) -> None:
        error = TooManyDecksError(16, 22, max_decks=15)

        assert error.message == "Too many decks (16). Collections are limited to 15 decks."
        assert error.palette_size == 22
        assert error.suggestion == "Remove a deck or raise the deck limit."

    def test_to_dict(self) -> None:
        error = InvalidOrderError("duplicate index: 0")

        assert error.to_dict() == {
            "kind": "invalid_order",
            "message": "Invalid deck order: duplicate index: 0",
            "detail": None,
            "suggestion": "Provide every deck exactly once.",
        }

    def test_color_conflict(self) -> None:
        error = ColorConflictError("#ECC933", ["One", "Two"])

        assert error.kind == FailureKind.COLOR_CONFLICT
        assert "One, Two" in error.message
