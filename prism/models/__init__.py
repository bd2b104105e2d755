from prism.models.card import Card
from prism.models.collection import (
    Collection,
    add_deck,
    create_collection,
    mark_card,
    prune_marked_cards,
    remove_deck,
    unmark_card,
    update_deck,
)
from prism.models.deck import Deck, create_deck, generate_id
from prism.models.delta import CardChange, ChangeAction, DeltaSummary, PrismDelta
from prism.models.failure import (
    ColorConflictError,
    DeckValidationError,
    FailureDetail,
    FailureKind,
    InvalidOrderError,
    InvalidSnapshotError,
    KnownError,
    TooManyDecksError,
    UnsupportedVersionError,
)
from prism.models.overlap import DeckOverlap, OverlapReport
from prism.models.processed import (
    MarkSlot,
    ProcessedCard,
    ProcessedData,
    SharedCardSummary,
    Statistics,
)

__all__ = [
    "Card",
    "CardChange",
    "ChangeAction",
    "Collection",
    "ColorConflictError",
    "Deck",
    "DeckOverlap",
    "DeckValidationError",
    "DeltaSummary",
    "FailureDetail",
    "FailureKind",
    "InvalidOrderError",
    "InvalidSnapshotError",
    "KnownError",
    "MarkSlot",
    "OverlapReport",
    "PrismDelta",
    "ProcessedCard",
    "ProcessedData",
    "SharedCardSummary",
    "Statistics",
    "TooManyDecksError",
    "UnsupportedVersionError",
    "add_deck",
    "create_collection",
    "create_deck",
    "generate_id",
    "mark_card",
    "prune_marked_cards",
    "remove_deck",
    "unmark_card",
    "update_deck",
]
