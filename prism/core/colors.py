"""
Stripe color assignment.

Each deck gets one color from the palette. Colors already assigned are kept
so re-running after edits never repaints existing sleeves; only decks
without a color take the earliest unused palette entries, in deck order.
"""

import logging
from collections.abc import Sequence

from prism.models.deck import Deck
from prism.models.failure import ColorConflictError, TooManyDecksError

logger = logging.getLogger(__name__)

# Display names for the default palette (hex keys upper-cased)
COLOR_NAMES: dict[str, str] = {
    "#ECC933": "Yellow",
    "#558CC1": "Blue",
    "#6B5597": "Purple",
    "#C73D2B": "Red",
    "#70AF63": "Green",
    "#EEEEEE": "White",
    "#7A5E68": "Brown",
    "#3C5890": "Navy",
    "#C76B61": "Salmon",
    "#A3C569": "Light-Green",
    "#D69F5D": "Gold",
    "#5A9FD7": "Light-Blue",
    "#F5F4CF": "Cream",
    "#AC638C": "Maroon",
    "#CFD964": "Lime",
    "#746BA9": "Grape",
    "#D388B2": "Pink",
    "#D4BC2E": "Dark Yellow",
    "#569899": "Teal",
    "#ECCAD7": "Pale-Pink",
    "#CCA427": "Straw",
    "#C2CCD2": "Silver",
}


def color_key(color: str) -> str:
    """Comparison key for colors (hex codes compare case-insensitively)."""
    return color.strip().upper()


def color_label(color: str) -> str:
    """
    Human-readable name for a color.

    Known palette hex codes map to their name; anything else (a named
    color such as "Red", or a custom hex) is returned as given.
    """
    return COLOR_NAMES.get(color_key(color), color)


def assign_colors(decks: Sequence[Deck], palette: Sequence[str]) -> dict[str, str]:
    """
    Map every deck id to a distinct stripe color.

    Args:
        decks: Decks in collection order
        palette: Ordered candidate colors

    Returns:
        Dict mapping deck id to color, in deck order

    Raises:
        ColorConflictError: If two decks already carry the same color
        TooManyDecksError: If the unused palette entries cannot cover
            the decks still needing a color
    """
    assignment: dict[str, str] = {}
    owners: dict[str, Deck] = {}

    # Keep existing colors
    for deck in decks:
        if not deck.assigned_color:
            continue
        key = color_key(deck.assigned_color)
        if key in owners:
            raise ColorConflictError(deck.assigned_color, [owners[key].name, deck.name])
        owners[key] = deck
        assignment[deck.id] = deck.assigned_color

    unassigned = [deck for deck in decks if not deck.assigned_color]
    if not unassigned:
        return {deck.id: assignment[deck.id] for deck in decks}

    available = _unused_colors(palette, set(owners))
    if len(unassigned) > len(available):
        raise TooManyDecksError(
            deck_count=len(decks),
            palette_size=len(palette),
            detail=(
                f"{len(unassigned)} decks need a color but only "
                f"{len(available)} palette colors are unused"
            ),
        )

    for deck, color in zip(unassigned, available, strict=False):
        assignment[deck.id] = color
        logger.debug("Assigned %s to deck %s", color, deck.name)

    return {deck.id: assignment[deck.id] for deck in decks}


def _unused_colors(palette: Sequence[str], used_keys: set[str]) -> list[str]:
    """Palette entries not yet used, in palette order, without duplicates."""
    available: list[str] = []
    seen = set(used_keys)
    for color in palette:
        key = color_key(color)
        if key in seen:
            continue
        seen.add(key)
        available.append(color)
    return available


def get_next_color(decks: Sequence[Deck], palette: Sequence[str]) -> str | None:
    """First palette color no deck uses, or None when the palette is exhausted."""
    used = {color_key(deck.assigned_color) for deck in decks if deck.assigned_color}
    available = _unused_colors(palette, used)
    return available[0] if available else None


def find_color_owner(
    decks: Sequence[Deck],
    color: str,
    exclude_deck_id: str | None = None,
) -> Deck | None:
    """
    Find the deck already using a color.

    Args:
        decks: Decks to search
        color: Color to look for
        exclude_deck_id: Deck to ignore (the one being edited)

    Returns:
        The deck using the color, or None if it is free
    """
    key = color_key(color)
    for deck in decks:
        if exclude_deck_id and deck.id == exclude_deck_id:
            continue
        if deck.assigned_color and color_key(deck.assigned_color) == key:
            return deck
    return None


def get_next_stripe_position(decks: Sequence[Deck]) -> int:
    """Stripe position a newly appended deck will take."""
    return len(decks) + 1
