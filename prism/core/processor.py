"""
Card processor.

Deduplicates cards across every deck in a collection and produces the
marking instructions for each unique card.

Stripe positions are fixed per deck: a deck's position is its 1-based index
in the collection and is the same on every card it contains, so a player can
learn "deck 3 is always slot 3". Cards lacking a deck simply have no slot at
that position.

Everything here is recomputed from scratch on every call; the input decks
are never mutated.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from prism.config import DEFAULT_PALETTE, MOST_SHARED_LIMIT
from prism.core.colors import assign_colors, color_label
from prism.core.normalizer import get_card_key, is_basic_land, name_sort_key, normalize_card_name
from prism.models.deck import Deck
from prism.models.failure import TooManyDecksError
from prism.models.processed import (
    MarkSlot,
    ProcessedCard,
    ProcessedData,
    SharedCardSummary,
    Statistics,
)

logger = logging.getLogger(__name__)


@dataclass
class _CardEntry:
    """Accumulator for one normalized key while scanning decks."""

    display_name: str
    quantities: dict[str, int] = field(default_factory=dict)  # deck id -> quantity


def process_decks(
    decks: Sequence[Deck],
    palette: Sequence[str] = DEFAULT_PALETTE,
    max_decks: int | None = None,
) -> ProcessedData:
    """
    Process all decks and generate card marking data.

    Args:
        decks: Decks in collection (stripe) order
        palette: Candidate stripe colors
        max_decks: Optional hard limit on the number of decks

    Returns:
        ProcessedData with unique cards sorted most-shared first

    Raises:
        TooManyDecksError: If max_decks is exceeded or the palette runs out
        ColorConflictError: If two decks carry the same color
    """
    if max_decks is not None and len(decks) > max_decks:
        raise TooManyDecksError(
            deck_count=len(decks),
            palette_size=len(palette),
            max_decks=max_decks,
        )

    color_palette = assign_colors(decks, palette)

    positioned = tuple(
        replace(
            deck,
            cards=list(deck.cards),
            assigned_color=color_palette[deck.id],
            stripe_position=position,
        )
        for position, deck in enumerate(decks, start=1)
    )

    card_index = _build_card_index(positioned)
    cards = [_build_processed_card(key, entry, positioned) for key, entry in card_index.items()]
    cards.sort(key=card_sort_key)

    stats = calculate_statistics(positioned, cards)

    logger.info(
        "Processed %d decks: %d unique cards, %d shared",
        stats.total_decks,
        stats.total_unique_cards,
        stats.shared_cards,
    )

    return ProcessedData(
        decks=positioned,
        cards=tuple(cards),
        color_palette=color_palette,
        stats=stats,
    )


def card_sort_key(card: ProcessedCard) -> tuple[int, tuple[str, str]]:
    """Most shared first, then by canonical name."""
    return (-card.deck_count, name_sort_key(card.canonical_name))


def _build_card_index(decks: Sequence[Deck]) -> dict[str, _CardEntry]:
    """
    Index normalized card key -> first display name and per-deck quantity.

    Insertion order follows the first occurrence, so the display name comes
    from the earliest deck (and earliest line within it) containing the card.
    Repeated lines within one deck are summed.
    """
    index: dict[str, _CardEntry] = {}

    for deck in decks:
        for card in deck.cards:
            display_name = normalize_card_name(card.name)
            if not display_name:
                logger.warning("Skipping blank card name in deck %s", deck.name)
                continue

            key = get_card_key(display_name)
            entry = index.get(key)
            if entry is None:
                entry = _CardEntry(display_name=display_name)
                index[key] = entry

            entry.quantities[deck.id] = entry.quantities.get(deck.id, 0) + card.quantity

    return index


def _build_processed_card(key: str, entry: _CardEntry, decks: Sequence[Deck]) -> ProcessedCard:
    basic = is_basic_land(entry.display_name)

    # Decks are already in position order, so slots come out sorted
    slots = tuple(
        MarkSlot(
            position=deck.stripe_position or 0,
            color=deck.assigned_color,
            deck_name=deck.name,
            deck_id=deck.id,
            bracket=deck.bracket,
        )
        for deck in decks
        if deck.id in entry.quantities
    )

    total_quantity = max(entry.quantities.values()) if basic else 1

    return ProcessedCard(
        canonical_name=entry.display_name,
        normalized_key=key,
        is_basic_land=basic,
        total_quantity=total_quantity,
        deck_count=len(slots),
        mark_slots=slots,
        mark_summary=build_mark_summary(slots),
    )


def build_mark_summary(slots: Sequence[MarkSlot]) -> str:
    """
    Render slots as "Yellow (1), Navy (8)".

    The position is included because a stripe that moves to another slot
    must be repainted even when the set of colors is unchanged.
    """
    return ", ".join(f"{color_label(slot.color)} ({slot.position})" for slot in slots)


def calculate_statistics(decks: Sequence[Deck], cards: Sequence[ProcessedCard]) -> Statistics:
    """
    Calculate summary statistics.

    Args:
        decks: All decks
        cards: Processed cards, already sorted

    Returns:
        Statistics object
    """
    total_card_slots = sum(deck.card_count() for deck in decks)

    shared = [card for card in cards if card.is_shared]

    most_shared = tuple(
        SharedCardSummary(
            name=card.canonical_name,
            count=card.deck_count,
            decks=tuple(card.deck_names),
        )
        for card in shared[:MOST_SHARED_LIMIT]
    )

    return Statistics(
        total_decks=len(decks),
        total_unique_cards=len(cards),
        total_card_slots=total_card_slots,
        shared_cards=len(shared),
        most_shared_cards=most_shared,
    )
