"""
Deck overlap calculation.

Counts how many unique cards each pair of decks has in common. Used for
collection summaries and by the reorder heuristic.
"""

from collections.abc import Sequence

from prism.config import OVERLAP_MOST_SHARED_LIMIT
from prism.core.normalizer import get_card_key
from prism.models.deck import Deck
from prism.models.overlap import DeckOverlap, OverlapReport
from prism.models.processed import ProcessedData


def deck_card_keys(deck: Deck) -> set[str]:
    """Normalized keys of every card in a deck, blank names excluded."""
    return {key for key in (get_card_key(card.name) for card in deck.cards) if key}


def calculate_shared_cards(deck1: Deck, deck2: Deck) -> int:
    """Number of unique cards present in both decks."""
    return len(deck_card_keys(deck1) & deck_card_keys(deck2))


def build_shared_matrix(decks: Sequence[Deck]) -> list[list[int]]:
    """
    Symmetric matrix of shared card counts.

    matrix[i][j] is the overlap between decks i and j; the diagonal is 0.
    """
    keys = [deck_card_keys(deck) for deck in decks]
    size = len(decks)
    matrix = [[0] * size for _ in range(size)]

    for i in range(size):
        for j in range(i + 1, size):
            shared = len(keys[i] & keys[j])
            matrix[i][j] = shared
            matrix[j][i] = shared

    return matrix


def calculate_pairwise_overlap(decks: Sequence[Deck]) -> list[DeckOverlap]:
    """Overlap for every unordered pair of decks, in (i, j) index order with i < j."""
    matrix = build_shared_matrix(decks)
    return [
        DeckOverlap(deck1=decks[i].name, deck2=decks[j].name, overlap_count=matrix[i][j])
        for i in range(len(decks))
        for j in range(i + 1, len(decks))
    ]


def calculate_overlap(decks: Sequence[Deck], processed: ProcessedData) -> OverlapReport:
    """
    Build a collection-wide overlap report.

    Args:
        decks: Decks in collection order
        processed: Result of processing the same decks

    Returns:
        OverlapReport with counts, pairwise overlap and most shared card names
    """
    shared = [card for card in processed.cards if card.is_shared]

    return OverlapReport(
        total_unique_cards=len(processed.cards),
        shared_card_count=len(shared),
        unique_card_count=sum(1 for card in processed.cards if card.deck_count == 1),
        pairwise=tuple(calculate_pairwise_overlap(decks)),
        most_shared=tuple(card.canonical_name for card in shared[:OVERLAP_MOST_SHARED_LIMIT]),
    )
