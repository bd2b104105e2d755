"""
Deck reordering.

Deck order decides stripe positions, so reordering changes the slots on
every card. Callers must reprocess and show the full delta afterwards.
"""

from collections.abc import Sequence
from dataclasses import replace

from prism.core.overlap import build_shared_matrix
from prism.models.deck import Deck
from prism.models.failure import InvalidOrderError


def order_decks_by_sharing(decks: Sequence[Deck]) -> list[Deck]:
    """
    Order decks so that decks with the most card overlap sit next to each other.

    Greedy nearest-neighbor chain: start with the deck sharing the most
    cards with all others, then repeatedly append the remaining deck sharing
    the most with the last placed deck. Ties go to the deck that comes first
    in the original order.

    Returns:
        New list of decks with stripe positions renumbered 1..n
    """
    if len(decks) <= 1:
        return _renumber(decks)

    matrix = build_shared_matrix(decks)

    start = 0
    max_total = 0
    for i, row in enumerate(matrix):
        total = sum(row)
        if total > max_total:
            max_total = total
            start = i

    ordered = [start]
    used = {start}

    while len(ordered) < len(decks):
        last = ordered[-1]
        best = -1
        best_shared = -1
        for i in range(len(decks)):
            if i in used:
                continue
            if matrix[last][i] > best_shared:
                best_shared = matrix[last][i]
                best = i
        ordered.append(best)
        used.add(best)

    return _renumber([decks[i] for i in ordered])


def reorder_decks(decks: Sequence[Deck], new_order: Sequence[int]) -> list[Deck]:
    """
    Reorder decks by a 0-based index permutation.

    Args:
        decks: Decks in current order
        new_order: new_order[k] is the current index of the deck that goes to slot k

    Raises:
        InvalidOrderError: If new_order is not a permutation of range(len(decks))
    """
    if len(new_order) != len(decks):
        raise InvalidOrderError(f"expected {len(decks)} indices, got {len(new_order)}")

    seen: set[int] = set()
    for idx in new_order:
        if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0 or idx >= len(decks):
            raise InvalidOrderError(f"index out of range: {idx}")
        if idx in seen:
            raise InvalidOrderError(f"duplicate index: {idx}")
        seen.add(idx)

    return _renumber([decks[idx] for idx in new_order])


def reorder_decks_by_id(decks: Sequence[Deck], deck_ids: Sequence[str]) -> list[Deck]:
    """
    Reorder decks by listing their ids in the desired order.

    Raises:
        InvalidOrderError: On unknown, missing or duplicate ids
    """
    positions = {deck.id: i for i, deck in enumerate(decks)}

    order: list[int] = []
    for deck_id in deck_ids:
        if deck_id not in positions:
            raise InvalidOrderError(f"unknown deck id: {deck_id}")
        order.append(positions[deck_id])

    return reorder_decks(decks, order)


def _renumber(decks: Sequence[Deck]) -> list[Deck]:
    return [replace(deck, stripe_position=i) for i, deck in enumerate(decks, start=1)]
