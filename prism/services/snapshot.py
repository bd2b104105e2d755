"""
Versioned JSON snapshot of a processed collection.

The snapshot is both the export format for other tools and the file the
command line reads back to compute "what changed since last time". Field
names are camelCase and stable.

Version history:
    1.0 - initial format; decks carry their own card lists
"""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from prism.config import SNAPSHOT_VERSION
from prism.models.card import Card
from prism.models.deck import Deck
from prism.models.failure import InvalidSnapshotError, UnsupportedVersionError
from prism.models.processed import ProcessedData

logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnapshotCardEntry(_CamelModel):
    name: str
    quantity: int = 1


class SnapshotDeck(_CamelModel):
    id: str
    name: str
    commander: str = ""
    bracket: int = 1
    assigned_color: str = ""
    stripe_position: int | None = None
    card_count: int = 0
    cards: list[SnapshotCardEntry] | None = None


class SnapshotSlot(_CamelModel):
    position: int
    color: str
    deck_name: str
    deck_id: str
    bracket: int


class SnapshotCard(_CamelModel):
    name: str
    normalized_key: str = ""
    is_basic_land: bool = False
    total_quantity: int = 1
    total_decks: int
    deck_ids: list[str] = Field(default_factory=list)
    mark_summary: str = ""
    mark_slots: list[SnapshotSlot] = Field(default_factory=list)


class PrismSnapshot(_CamelModel):
    """Top-level JSON snapshot document."""

    version: str
    generated_at: datetime
    decks: list[SnapshotDeck]
    cards: list[SnapshotCard]
    color_palette: dict[str, str] = Field(default_factory=dict)


def build_snapshot(data: ProcessedData, generated_at: datetime | None = None) -> PrismSnapshot:
    """
    Build a snapshot from processed data.

    Args:
        data: Processed deck data
        generated_at: Timestamp to record (defaults to now, UTC)
    """
    return PrismSnapshot(
        version=SNAPSHOT_VERSION,
        generated_at=generated_at or datetime.now(UTC),
        decks=[
            SnapshotDeck(
                id=deck.id,
                name=deck.name,
                commander=deck.commander,
                bracket=deck.bracket,
                assigned_color=deck.assigned_color,
                stripe_position=deck.stripe_position,
                card_count=deck.card_count(),
                cards=[SnapshotCardEntry(name=c.name, quantity=c.quantity) for c in deck.cards],
            )
            for deck in data.decks
        ],
        cards=[
            SnapshotCard(
                name=card.canonical_name,
                normalized_key=card.normalized_key,
                is_basic_land=card.is_basic_land,
                total_quantity=card.total_quantity,
                total_decks=card.deck_count,
                deck_ids=card.deck_ids,
                mark_summary=card.mark_summary,
                mark_slots=[
                    SnapshotSlot(
                        position=slot.position,
                        color=slot.color,
                        deck_name=slot.deck_name,
                        deck_id=slot.deck_id,
                        bracket=slot.bracket,
                    )
                    for slot in card.mark_slots
                ],
            )
            for card in data.cards
        ],
        color_palette=dict(data.color_palette),
    )


def snapshot_to_dict(snapshot: PrismSnapshot) -> dict[str, Any]:
    """Serialize a snapshot to JSON-compatible data with camelCase keys."""
    return snapshot.model_dump(mode="json", by_alias=True)


def generate_json(data: ProcessedData, generated_at: datetime | None = None) -> dict[str, Any]:
    """Convenience: processed data straight to a JSON-compatible dict."""
    return snapshot_to_dict(build_snapshot(data, generated_at))


def parse_snapshot(raw: Any) -> PrismSnapshot:
    """
    Validate raw JSON data as a snapshot.

    Raises:
        InvalidSnapshotError: If required fields are missing or malformed
        UnsupportedVersionError: If the version is not one this code reads
    """
    if not isinstance(raw, dict):
        raise InvalidSnapshotError("expected a JSON object")

    if "version" not in raw:
        raise InvalidSnapshotError("missing version")

    if raw["version"] != SNAPSHOT_VERSION:
        raise UnsupportedVersionError(raw["version"])

    if not isinstance(raw.get("decks"), list):
        raise InvalidSnapshotError("missing decks")

    if not isinstance(raw.get("cards"), list):
        raise InvalidSnapshotError("missing cards")

    try:
        return PrismSnapshot.model_validate(raw)
    except ValidationError as e:
        raise InvalidSnapshotError(f"{e.error_count()} invalid fields") from e


def load_snapshot(raw: Any) -> list[Deck]:
    """
    Rebuild decks from a snapshot.

    Decks written with their own card lists are restored exactly. For
    snapshots without per-deck lists the deck contents are rebuilt from the
    card index: basic lands get the card's total quantity, everything else 1.

    Returns:
        Decks in snapshot order, with their assigned colors
    """
    snapshot = parse_snapshot(raw)
    decks: list[Deck] = []

    for deck_info in snapshot.decks:
        if deck_info.cards is not None:
            cards = [Card(name=c.name, quantity=c.quantity) for c in deck_info.cards]
        else:
            cards = [
                Card(
                    name=card.name,
                    quantity=card.total_quantity if card.is_basic_land else 1,
                )
                for card in snapshot.cards
                if deck_info.id in card.deck_ids
            ]

        decks.append(
            Deck(
                id=deck_info.id,
                name=deck_info.name,
                commander=deck_info.commander,
                bracket=deck_info.bracket,
                cards=cards,
                assigned_color=deck_info.assigned_color,
                stripe_position=deck_info.stripe_position,
            )
        )

    logger.info("Loaded %d decks from snapshot", len(decks))
    return decks
