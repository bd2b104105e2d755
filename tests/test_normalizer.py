from prism.core.normalizer import (
    card_names_equal,
    get_card_key,
    is_basic_land,
    name_sort_key,
    normalize_card_name,
)


class TestNormalizeCardName:
    def test_trims_whitespace(self) -> None:
        assert normalize_card_name("  Sol Ring  ") == "Sol Ring"

    def test_collapses_internal_whitespace(self) -> None:
        assert normalize_card_name("Niv-Mizzet,   Parun") == "Niv-Mizzet, Parun"

    def test_collapses_tabs(self) -> None:
        assert normalize_card_name("Sol\t Ring") == "Sol Ring"

    def test_preserves_case_and_punctuation(self) -> None:
        """Apostrophes, commas and hyphens are part of the name."""
        assert normalize_card_name("Atraxa, Praetors' Voice") == "Atraxa, Praetors' Voice"

    def test_empty_input(self) -> None:
        assert normalize_card_name("   ") == ""


class TestCardKey:
    def test_case_insensitive(self) -> None:
        assert get_card_key("SOL RING") == "sol ring"

    def test_whitespace_insensitive(self) -> None:
        assert get_card_key(" sol   ring ") == get_card_key("Sol Ring")

    def test_punctuation_significant(self) -> None:
        """Otherwise-exact comparison: punctuation differences are different cards."""
        assert not card_names_equal("Praetors' Voice", "Praetors Voice")

    def test_names_equal(self) -> None:
        assert card_names_equal("lightning bolt", "Lightning  Bolt")


class TestIsBasicLand:
    def test_basic_lands(self) -> None:
        for name in ["Island", "Mountain", "Plains", "Forest", "Swamp", "Wastes"]:
            assert is_basic_land(name)

    def test_case_insensitive(self) -> None:
        assert is_basic_land("ISLAND")
        assert is_basic_land(" island ")

    def test_snow_basics_are_not_basic(self) -> None:
        assert not is_basic_land("Snow-Covered Island")

    def test_non_land(self) -> None:
        assert not is_basic_land("Sol Ring")


class TestNameSortKey:
    def test_case_insensitive_order(self) -> None:
        names = ["bolt", "Arcane Signet", "Counterspell"]
        assert sorted(names, key=name_sort_key) == ["Arcane Signet", "bolt", "Counterspell"]

    def test_total_order_for_case_variants(self) -> None:
        """Spellings differing only in case still sort deterministically."""
        assert sorted(["sol ring", "Sol Ring"], key=name_sort_key) == ["Sol Ring", "sol ring"]
