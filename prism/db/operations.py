"""
Database CRUD operations.

Collections are edited as domain values (prism.models.collection) and
written back with save_collection(), which syncs deck rows in place. The
snapshot columns record the decks as they were when the player last
finished marking, so later changes can be diffed against them.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prism.models.card import Card
from prism.models.collection import Collection, utc_now
from prism.models.db import DeckDB, PrismDB
from prism.models.deck import Deck, generate_id
from prism.services.storage import StoredCard, StoredDeck

logger = logging.getLogger(__name__)


async def create_prism(session: AsyncSession, name: str, prism_id: str | None = None) -> PrismDB:
    """Create an empty prism."""
    prism = PrismDB(
        id=prism_id or generate_id(),
        name=name,
        marked_cards=[],
        snapshot=None,
        decks=[],
    )
    session.add(prism)
    await session.flush()
    logger.info("Created prism %s (%s)", prism.id, name)
    return prism


async def get_prism(session: AsyncSession, prism_id: str) -> PrismDB | None:
    """
    Get a prism with its decks.

    Returns None if no prism has this id.
    """
    result = await session.execute(
        select(PrismDB).where(PrismDB.id == prism_id).options(selectinload(PrismDB.decks))
    )
    return result.scalar_one_or_none()


async def list_prisms(session: AsyncSession) -> list[PrismDB]:
    """All prisms, most recently updated first."""
    result = await session.execute(
        select(PrismDB).options(selectinload(PrismDB.decks)).order_by(PrismDB.updated_at.desc())
    )
    return list(result.scalars().all())


async def delete_prism(session: AsyncSession, prism_id: str) -> bool:
    """
    Delete a prism and its decks.

    Returns True if deleted, False if not found.
    """
    prism = await get_prism(session, prism_id)
    if not prism:
        return False

    await session.delete(prism)
    await session.flush()
    return True


def _cards_to_json(cards: list[Card]) -> list[dict[str, object]]:
    return [{"name": card.name, "quantity": card.quantity} for card in cards]


async def save_collection(session: AsyncSession, prism: PrismDB, collection: Collection) -> PrismDB:
    """
    Write a collection's name, decks and marked cards to its prism row.

    Deck rows are updated in place, created for new decks and deleted for
    decks no longer present. Row positions follow the collection order.
    """
    existing = {deck.id: deck for deck in prism.decks}
    keep: list[DeckDB] = []

    for position, deck in enumerate(collection.decks, start=1):
        row = existing.pop(deck.id, None)
        if row is None:
            row = DeckDB(id=deck.id, prism_id=prism.id)
        row.position = position
        row.name = deck.name
        row.commander = deck.commander
        row.bracket = deck.bracket
        row.assigned_color = deck.assigned_color
        row.cards = _cards_to_json(deck.cards)
        keep.append(row)

    # Rows left in `existing` are dropped by the delete-orphan cascade
    prism.decks = keep
    prism.name = collection.name
    prism.marked_cards = sorted(collection.marked_cards)
    prism.updated_at = utc_now()

    await session.flush()
    return prism


def _row_to_deck(row: DeckDB) -> Deck:
    return Deck(
        id=row.id,
        name=row.name,
        commander=row.commander,
        bracket=row.bracket,
        cards=[Card(name=c["name"], quantity=int(c.get("quantity", 1))) for c in row.cards],
        assigned_color=row.assigned_color,
        stripe_position=row.position,
    )


def prism_to_model(prism: PrismDB) -> Collection:
    """Convert a database prism to a domain collection."""
    return Collection(
        id=prism.id,
        name=prism.name,
        decks=[_row_to_deck(row) for row in sorted(prism.decks, key=lambda r: r.position)],
        marked_cards=set(prism.marked_cards or []),
        created_at=prism.created_at,
        updated_at=prism.updated_at,
    )


async def save_snapshot(session: AsyncSession, prism: PrismDB, decks: list[Deck]) -> PrismDB:
    """
    Record the decks the player has finished marking.

    Decks should carry their assigned colors (i.e. come from a processing
    pass) so the baseline reproduces the same stripes.
    """
    prism.snapshot = [
        StoredDeck(
            id=deck.id,
            name=deck.name,
            commander=deck.commander,
            bracket=deck.bracket,
            assigned_color=deck.assigned_color,
            stripe_position=deck.stripe_position,
            cards=[StoredCard(name=c.name, quantity=c.quantity) for c in deck.cards],
        ).model_dump(mode="json")
        for deck in decks
    ]
    prism.snapshot_at = utc_now()
    await session.flush()
    logger.info("Saved snapshot of %d decks for prism %s", len(decks), prism.id)
    return prism


def snapshot_decks(prism: PrismDB) -> list[Deck] | None:
    """Decks from the last snapshot, or None if none was saved."""
    if prism.snapshot is None:
        return None

    decks: list[Deck] = []
    for raw in prism.snapshot:
        stored = StoredDeck.model_validate(raw)
        decks.append(
            Deck(
                id=stored.id,
                name=stored.name,
                commander=stored.commander,
                bracket=stored.bracket,
                cards=[Card(name=c.name, quantity=c.quantity) for c in stored.cards],
                assigned_color=stored.assigned_color,
                stripe_position=stored.stripe_position,
            )
        )
    return decks
