"""
Storage document schema and migrations.

Collections are persisted (file backups, browser exports, imports) as one
documented schema:

    {
        "version": 1,
        "collection": {
            "id", "name", "created_at", "updated_at",
            "marked_cards": [card keys],
            "decks": [{"id", "name", "commander", "bracket",
                       "assigned_color", "stripe_position",
                       "cards": [{"name", "quantity"}]}]
        }
    }

Older exports were a bare collection object with camelCase keys and a
"color" field on decks. migrate_document() is the single entry point that
turns any supported input into the current schema.
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from prism.config import STORAGE_VERSION
from prism.models.card import Card
from prism.models.collection import Collection, utc_now
from prism.models.deck import Deck
from prism.models.failure import InvalidSnapshotError, UnsupportedVersionError

logger = logging.getLogger(__name__)


class StoredCard(BaseModel):
    name: str
    quantity: int = Field(default=1, ge=1)


class StoredDeck(BaseModel):
    id: str
    name: str
    commander: str = ""
    bracket: int = Field(default=1, ge=1, le=4)
    assigned_color: str = ""
    stripe_position: int | None = None
    cards: list[StoredCard] = Field(default_factory=list)


class StoredCollection(BaseModel):
    id: str
    name: str
    decks: list[StoredDeck] = Field(default_factory=list)
    marked_cards: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class CollectionDocument(BaseModel):
    """Current storage document."""

    version: int = STORAGE_VERSION
    collection: StoredCollection


# Legacy camelCase keys -> current snake_case keys
_LEGACY_COLLECTION_KEYS = {
    "markedCards": "marked_cards",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

_LEGACY_DECK_KEYS = {
    "color": "assigned_color",
    "assignedColor": "assigned_color",
    "stripePosition": "stripe_position",
}


def migrate_document(raw: Any) -> CollectionDocument:
    """
    Bring any supported stored document up to the current version.

    Accepts:
        - current documents ({"version": 1, "collection": {...}})
        - legacy unversioned bare collection objects

    Raises:
        InvalidSnapshotError: If the data is not a collection document
        UnsupportedVersionError: If the version is newer than this code knows
    """
    if not isinstance(raw, dict):
        raise InvalidSnapshotError("expected a JSON object")

    version = raw.get("version")

    if version is None:
        if "decks" not in raw:
            raise InvalidSnapshotError("missing decks")
        logger.info("Migrating unversioned collection document to version %d", STORAGE_VERSION)
        raw = {"version": STORAGE_VERSION, "collection": _migrate_legacy_collection(raw)}
        version = STORAGE_VERSION

    if version != STORAGE_VERSION:
        logger.warning("Refusing storage document with version %s", version)
        raise UnsupportedVersionError(version)

    if "collection" not in raw:
        raise InvalidSnapshotError("missing collection")

    try:
        return CollectionDocument.model_validate(raw)
    except ValidationError as e:
        raise InvalidSnapshotError(f"{e.error_count()} invalid fields") from e


def _migrate_legacy_collection(data: dict[str, Any]) -> dict[str, Any]:
    collection = {_LEGACY_COLLECTION_KEYS.get(k, k): v for k, v in data.items()}

    decks = []
    for deck in collection.get("decks") or []:
        migrated = {_LEGACY_DECK_KEYS.get(k, k): v for k, v in deck.items()}
        if isinstance(migrated.get("assigned_color"), str):
            color = migrated["assigned_color"].strip()
            migrated["assigned_color"] = color.upper() if color.startswith("#") else color
        decks.append(migrated)
    collection["decks"] = decks

    return collection


def document_to_collection(document: CollectionDocument) -> Collection:
    """Convert a storage document into a Collection."""
    stored = document.collection
    return Collection(
        id=stored.id,
        name=stored.name,
        decks=[
            Deck(
                id=deck.id,
                name=deck.name,
                commander=deck.commander,
                bracket=deck.bracket,
                cards=[Card(name=card.name, quantity=card.quantity) for card in deck.cards],
                assigned_color=deck.assigned_color,
                stripe_position=deck.stripe_position,
            )
            for deck in stored.decks
        ],
        marked_cards=set(stored.marked_cards),
        created_at=stored.created_at,
        updated_at=stored.updated_at,
    )


def collection_to_document(collection: Collection) -> CollectionDocument:
    """Convert a Collection into the current storage document."""
    return CollectionDocument(
        version=STORAGE_VERSION,
        collection=StoredCollection(
            id=collection.id,
            name=collection.name,
            decks=[
                StoredDeck(
                    id=deck.id,
                    name=deck.name,
                    commander=deck.commander,
                    bracket=deck.bracket,
                    assigned_color=deck.assigned_color,
                    stripe_position=deck.stripe_position,
                    cards=[StoredCard(name=c.name, quantity=c.quantity) for c in deck.cards],
                )
                for deck in collection.decks
            ],
            marked_cards=sorted(collection.marked_cards),
            created_at=collection.created_at,
            updated_at=collection.updated_at,
        ),
    )


def load_collection(raw: Any) -> Collection:
    """Migrate and convert raw stored data in one step."""
    return document_to_collection(migrate_document(raw))


def dump_collection(collection: Collection) -> dict[str, Any]:
    """Serialize a collection to JSON-compatible data in the current schema."""
    return collection_to_document(collection).model_dump(mode="json")
