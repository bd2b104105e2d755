"""
Card name normalization.

Card names are compared case-insensitively and whitespace-insensitively,
but otherwise exactly: apostrophes, commas and hyphens are significant.
The display form keeps the original casing.

Examples:
    "  Sol Ring  "          -> "Sol Ring"
    "Niv-Mizzet,   Parun"   -> "Niv-Mizzet, Parun"
    get_card_key("SOL RING") -> "sol ring"
"""

import re

_WHITESPACE_RUN = re.compile(r"\s+")

BASIC_LAND_NAMES = frozenset({"island", "mountain", "plains", "forest", "swamp", "wastes"})


def normalize_card_name(name: str) -> str:
    """Trim and collapse internal whitespace, preserving case and punctuation."""
    return _WHITESPACE_RUN.sub(" ", name.strip())


def get_card_key(name: str) -> str:
    """Equality key used for deduplication."""
    return normalize_card_name(name).lower()


def card_names_equal(name1: str, name2: str) -> bool:
    return get_card_key(name1) == get_card_key(name2)


def is_basic_land(name: str) -> bool:
    """True for Island, Mountain, Plains, Forest, Swamp and Wastes (any case)."""
    return get_card_key(name) in BASIC_LAND_NAMES


def name_sort_key(name: str) -> tuple[str, str]:
    """
    Sort key for card names: case-insensitive first, exact spelling second.

    The second element keeps the order total so sorting is deterministic.
    """
    return (name.casefold(), name)
