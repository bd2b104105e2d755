import pytest

from prism.config import DEFAULT_PALETTE
from prism.core.colors import (
    assign_colors,
    color_label,
    find_color_owner,
    get_next_color,
    get_next_stripe_position,
)
from prism.models.deck import Deck
from prism.models.failure import ColorConflictError, FailureKind, TooManyDecksError


def _deck(name: str, color: str = "", deck_id: str | None = None) -> Deck:
    return Deck(
        id=deck_id or name.lower().replace(" ", "-"),
        name=name,
        commander="Kenrith, the Returned King",
        bracket=2,
        assigned_color=color,
    )


class TestAssignColors:
    def test_assigns_palette_in_order(self) -> None:
        decks = [_deck("One"), _deck("Two")]

        result = assign_colors(decks, DEFAULT_PALETTE)

        assert result == {"one": DEFAULT_PALETTE[0], "two": DEFAULT_PALETTE[1]}

    def test_keeps_existing_colors(self) -> None:
        """Decks with a color keep it; the rest take the earliest unused colors."""
        decks = [
            _deck("One"),
            _deck("Two", color=DEFAULT_PALETTE[0]),
        ]

        result = assign_colors(decks, DEFAULT_PALETTE)

        assert result["two"] == DEFAULT_PALETTE[0]
        assert result["one"] == DEFAULT_PALETTE[1]

    def test_mapping_follows_deck_order(self) -> None:
        decks = [_deck("One", color="#C73D2B"), _deck("Two")]

        result = assign_colors(decks, DEFAULT_PALETTE)

        assert list(result) == ["one", "two"]

    def test_idempotent(self) -> None:
        """Assigning twice, keeping the first result, yields the same mapping."""
        decks = [_deck(f"Deck {i}") for i in range(5)]

        first = assign_colors(decks, DEFAULT_PALETTE)
        colored = [
            _deck(deck.name, color=first[deck.id], deck_id=deck.id) for deck in decks
        ]
        second = assign_colors(colored, DEFAULT_PALETTE)

        assert first == second

    def test_palette_exhaustion(self) -> None:
        """15 colors cannot cover 16 decks."""
        palette = DEFAULT_PALETTE[:15]
        decks = [_deck(f"Deck {i}") for i in range(16)]

        with pytest.raises(TooManyDecksError) as exc_info:
            assign_colors(decks, palette)

        assert exc_info.value.kind == FailureKind.TOO_MANY_DECKS
        assert exc_info.value.deck_count == 16
        assert exc_info.value.palette_size == 15

    def test_exact_palette_fits(self) -> None:
        palette = DEFAULT_PALETTE[:3]
        decks = [_deck(f"Deck {i}") for i in range(3)]

        assert len(set(assign_colors(decks, palette).values())) == 3

    def test_preassigned_colors_reduce_remaining_slots(self) -> None:
        palette = DEFAULT_PALETTE[:2]
        decks = [
            _deck("One", color="#000000"),
            _deck("Two"),
            _deck("Three"),
        ]

        assert len(assign_colors(decks, palette)) == 3

    def test_duplicate_existing_color_conflicts(self) -> None:
        decks = [
            _deck("One", color="#ecc933"),
            _deck("Two", color="#ECC933"),
        ]

        with pytest.raises(ColorConflictError) as exc_info:
            assign_colors(decks, DEFAULT_PALETTE)

        assert exc_info.value.deck_names == ["One", "Two"]
        assert exc_info.value.status_code == 409

    def test_empty_deck_list(self) -> None:
        assert assign_colors([], DEFAULT_PALETTE) == {}

    def test_named_palette(self) -> None:
        """Palettes of named colors work the same as hex palettes."""
        decks = [_deck("One"), _deck("Two")]

        assert assign_colors(decks, ["Red", "Blue"]) == {"one": "Red", "two": "Blue"}


class TestColorHelpers:
    def test_color_label_known_hex(self) -> None:
        assert color_label("#ecc933") == "Yellow"

    def test_color_label_unknown(self) -> None:
        assert color_label("Red") == "Red"
        assert color_label("#123456") == "#123456"

    def test_get_next_color(self) -> None:
        decks = [_deck("One", color=DEFAULT_PALETTE[0])]
        assert get_next_color(decks, DEFAULT_PALETTE) == DEFAULT_PALETTE[1]

    def test_get_next_color_exhausted(self) -> None:
        decks = [_deck("One", color="Red")]
        assert get_next_color(decks, ["Red"]) is None

    def test_find_color_owner(self) -> None:
        decks = [_deck("One", color="#ECC933"), _deck("Two")]

        owner = find_color_owner(decks, "#ecc933")

        assert owner is not None
        assert owner.name == "One"

    def test_find_color_owner_excludes_edited_deck(self) -> None:
        decks = [_deck("One", color="#ECC933")]
        assert find_color_owner(decks, "#ECC933", exclude_deck_id="one") is None

    def test_next_stripe_position(self) -> None:
        decks = [_deck("One"), _deck("Two")]
        assert get_next_stripe_position(decks) == 3
