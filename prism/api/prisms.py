"""
Prism API endpoints.

CRUD for prisms (collections of decks) and the decks inside them. Every
write runs a processing pass before saving so newly added decks get their
stripe color fixed at creation time and limits are enforced up front.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from prism.config import settings
from prism.core.colors import find_color_owner
from prism.core.processor import process_decks
from prism.db import (
    create_prism,
    delete_prism,
    get_prism,
    list_prisms,
    prism_to_model,
    save_collection,
)
from prism.db.database import get_session
from prism.models.card import Card
from prism.models.collection import (
    Collection,
    add_deck,
    prune_marked_cards,
    remove_deck,
    update_deck,
)
from prism.models.db import PrismDB
from prism.models.deck import Deck, create_deck, normalize_color
from prism.models.failure import ColorConflictError, DeckValidationError
from prism.models.processed import ProcessedData
from prism.parsers.decklist import parse_decklist, validate_deck_size
from prism.scrapers.moxfield import import_moxfield_deck
from prism.services.validator import (
    ensure_valid,
    validate_bracket,
    validate_commander,
    validate_deck_count,
    validate_deck_input,
    validate_deck_name,
    validate_unique_deck_name,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prisms", tags=["prisms"])


class CardModel(BaseModel):
    """A card entry with quantity."""

    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: str
    name: str
    commander: str
    bracket: int
    assigned_color: str
    stripe_position: int | None = None
    card_count: int = 0
    cards: list[CardModel] = Field(default_factory=list)


class PrismResponse(BaseModel):
    """Response model for a prism with its decks."""

    id: str
    name: str
    decks: list[DeckResponse] = Field(default_factory=list)
    deck_count: int = 0
    marked_cards: list[str] = Field(default_factory=list)
    has_snapshot: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PrismSummary(BaseModel):
    id: str
    name: str
    deck_count: int


class PrismListResponse(BaseModel):
    prisms: list[PrismSummary]
    count: int


class PrismCreateRequest(BaseModel):
    name: str = Field(default="", max_length=255)


class PrismRenameRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class DeckCreateRequest(BaseModel):
    """Request model for adding a deck from pasted text or a card list."""

    name: str
    commander: str
    bracket: int = Field(default=2, description="Commander bracket, 1-4")
    decklist: str | None = Field(
        default=None,
        description="Raw decklist text, one '<qty> <card>' per line",
        examples=["1 Sol Ring\n1 Arcane Signet\n30 Island"],
    )
    cards: list[CardModel] | None = Field(
        default=None,
        description="Already parsed cards (used when decklist is omitted)",
    )
    color: str = Field(default="", description="Stripe color; blank picks the next free one")


class DeckUpdateRequest(BaseModel):
    """Full or partial replacement of a deck's fields."""

    name: str | None = None
    commander: str | None = None
    bracket: int | None = None
    decklist: str | None = None
    cards: list[CardModel] | None = None
    color: str | None = None


class MoxfieldImportRequest(BaseModel):
    url: str = Field(..., description="Moxfield deck URL or id")
    bracket: int = 2
    name: str | None = Field(default=None, description="Override the Moxfield deck name")
    color: str = ""


class ParseIssue(BaseModel):
    line: int
    text: str
    message: str


class DeckWriteResponse(BaseModel):
    """Response after adding or editing a deck."""

    prism: PrismResponse
    deck: DeckResponse
    parse_errors: list[ParseIssue] = Field(default_factory=list)
    parse_warnings: list[ParseIssue] = Field(default_factory=list)
    size_note: str | None = None


class DeleteResponse(BaseModel):
    id: str
    deleted: bool


def deck_to_response(deck: Deck) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        name=deck.name,
        commander=deck.commander,
        bracket=deck.bracket,
        assigned_color=deck.assigned_color,
        stripe_position=deck.stripe_position,
        card_count=deck.card_count(),
        cards=[CardModel(name=c.name, quantity=c.quantity) for c in deck.cards],
    )


def prism_to_response(prism: PrismDB) -> PrismResponse:
    model = prism_to_model(prism)
    return PrismResponse(
        id=model.id,
        name=model.name,
        decks=[deck_to_response(deck) for deck in model.decks],
        deck_count=model.deck_count(),
        marked_cards=sorted(model.marked_cards),
        has_snapshot=prism.snapshot is not None,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def find_deck(collection: Collection, deck_id: str, prism_id: str) -> Deck:
    """Get a deck from a collection or raise 404."""
    deck = collection.get_deck(deck_id)
    if deck is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck '{deck_id}' not found in prism '{prism_id}'",
        )
    return deck


async def load_prism(session: AsyncSession, prism_id: str) -> PrismDB:
    """Fetch a prism or raise 404."""
    prism = await get_prism(session, prism_id)
    if prism is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Prism '{prism_id}' not found",
        )
    return prism


def process_collection(collection: Collection) -> ProcessedData:
    """Run a processing pass with the configured palette and deck limit."""
    return process_decks(
        collection.decks,
        palette=settings.color_palette,
        max_decks=settings.max_decks,
    )


async def commit_collection(
    session: AsyncSession,
    prism: PrismDB,
    collection: Collection,
) -> tuple[Collection, ProcessedData]:
    """
    Process and save a collection.

    Assigned colors from the processing pass are persisted, and marked
    flags for cards no longer in any deck are dropped.
    """
    processed = process_collection(collection)
    collection = replace(collection, decks=list(processed.decks))
    collection = prune_marked_cards(collection, processed.live_keys())
    await save_collection(session, prism, collection)
    return collection, processed


def _cards_from_request(
    decklist: str | None,
    cards: list[CardModel] | None,
) -> tuple[list[Card], list[ParseIssue], list[ParseIssue]]:
    if decklist is not None:
        result = parse_decklist(decklist)
        errors = [ParseIssue(line=e.line, text=e.text, message=e.reason) for e in result.errors]
        warnings = [
            ParseIssue(line=w.line, text=w.text, message=w.message) for w in result.warnings
        ]
        return result.cards, errors, warnings

    return [Card(name=c.name, quantity=c.quantity) for c in cards or []], [], []


def _check_color(collection: Collection, color: str, exclude_deck_id: str | None = None) -> None:
    if not color:
        return
    owner = find_color_owner(collection.decks, color, exclude_deck_id)
    if owner is not None:
        raise ColorConflictError(color, [owner.name])


@router.post("", response_model=PrismResponse, status_code=status.HTTP_201_CREATED)
async def create_prism_endpoint(
    request: PrismCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PrismResponse:
    """Create an empty prism."""
    name = request.name.strip() or f"PRISM {datetime.now().date().isoformat()}"
    prism = await create_prism(session, name)
    return prism_to_response(prism)


@router.get("", response_model=PrismListResponse)
async def list_prisms_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PrismListResponse:
    """List all prisms, most recently updated first."""
    prisms = await list_prisms(session)
    summaries = [PrismSummary(id=p.id, name=p.name, deck_count=len(p.decks)) for p in prisms]
    return PrismListResponse(prisms=summaries, count=len(summaries))


@router.get("/{prism_id}", response_model=PrismResponse)
async def get_prism_endpoint(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PrismResponse:
    """Get a prism with all decks."""
    prism = await load_prism(session, prism_id)
    return prism_to_response(prism)


@router.patch("/{prism_id}", response_model=PrismResponse)
async def rename_prism_endpoint(
    prism_id: str,
    request: PrismRenameRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PrismResponse:
    """Rename a prism."""
    prism = await load_prism(session, prism_id)
    collection = replace(prism_to_model(prism), name=request.name.strip())
    await save_collection(session, prism, collection)
    return prism_to_response(prism)


@router.delete("/{prism_id}", response_model=DeleteResponse)
async def delete_prism_endpoint(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a prism and all its decks."""
    deleted = await delete_prism(session, prism_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Prism '{prism_id}' not found",
        )
    return DeleteResponse(id=prism_id, deleted=True)


@router.post(
    "/{prism_id}/decks",
    response_model=DeckWriteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_deck_endpoint(
    prism_id: str,
    request: DeckCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckWriteResponse:
    """
    Add a deck to a prism.

    The decklist is parsed; unparseable lines are reported but do not block
    the import. The deck takes the next stripe position.
    """
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)

    if request.decklist is None and request.cards is None:
        raise DeckValidationError(["Provide either decklist or cards"])

    ensure_valid(
        [
            *validate_deck_input(request.name, request.commander, request.bracket, request.decklist),
            *validate_unique_deck_name(collection.decks, request.name),
            *validate_deck_count(collection.deck_count() + 1, settings.max_decks),
        ]
    )
    _check_color(collection, request.color)

    cards, errors, warnings = _cards_from_request(request.decklist, request.cards)

    deck = create_deck(
        name=request.name,
        commander=request.commander,
        bracket=request.bracket,
        cards=cards,
        color=request.color,
    )
    collection, _ = await commit_collection(session, prism, add_deck(collection, deck))

    saved = find_deck(collection, deck.id, prism_id)
    logger.info("Added deck %s to prism %s (%d cards)", deck.name, prism_id, len(cards))

    return DeckWriteResponse(
        prism=prism_to_response(prism),
        deck=deck_to_response(saved),
        parse_errors=errors,
        parse_warnings=warnings,
        size_note=validate_deck_size(cards),
    )


@router.post(
    "/{prism_id}/decks/moxfield",
    response_model=DeckWriteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_moxfield_endpoint(
    prism_id: str,
    request: MoxfieldImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckWriteResponse:
    """Import a public Moxfield deck into a prism."""
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)

    ensure_valid(
        [
            *validate_bracket(request.bracket),
            *validate_deck_count(collection.deck_count() + 1, settings.max_decks),
        ]
    )
    _check_color(collection, request.color)

    imported = await import_moxfield_deck(request.url)
    name = (request.name or imported.name).strip()
    ensure_valid([*validate_deck_name(name), *validate_unique_deck_name(collection.decks, name)])

    deck = create_deck(
        name=name,
        commander=imported.commander,
        bracket=request.bracket,
        cards=imported.cards,
        color=request.color,
    )
    collection, _ = await commit_collection(session, prism, add_deck(collection, deck))

    saved = find_deck(collection, deck.id, prism_id)

    return DeckWriteResponse(
        prism=prism_to_response(prism),
        deck=deck_to_response(saved),
        size_note=validate_deck_size(imported.cards),
    )


@router.put("/{prism_id}/decks/{deck_id}", response_model=DeckWriteResponse)
async def update_deck_endpoint(
    prism_id: str,
    deck_id: str,
    request: DeckUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckWriteResponse:
    """
    Edit a deck.

    Omitted fields keep their value. Changing the card list or color shows
    up as changes against the last snapshot.
    """
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)

    find_deck(collection, deck_id, prism_id)

    changes: dict[str, object] = {}
    errors: list[str] = []

    if request.name is not None:
        errors += validate_deck_name(request.name)
        errors += validate_unique_deck_name(collection.decks, request.name, deck_id)
        changes["name"] = request.name.strip()
    if request.commander is not None:
        errors += validate_commander(request.commander)
        changes["commander"] = request.commander.strip()
    if request.bracket is not None:
        errors += validate_bracket(request.bracket)
        changes["bracket"] = request.bracket
    ensure_valid(errors)

    if request.color is not None:
        _check_color(collection, request.color, exclude_deck_id=deck_id)
        changes["assigned_color"] = normalize_color(request.color)

    parse_errors: list[ParseIssue] = []
    parse_warnings: list[ParseIssue] = []
    if request.decklist is not None or request.cards is not None:
        cards, parse_errors, parse_warnings = _cards_from_request(request.decklist, request.cards)
        changes["cards"] = cards

    collection, _ = await commit_collection(
        session, prism, update_deck(collection, deck_id, **changes)
    )

    saved = find_deck(collection, deck_id, prism_id)

    return DeckWriteResponse(
        prism=prism_to_response(prism),
        deck=deck_to_response(saved),
        parse_errors=parse_errors,
        parse_warnings=parse_warnings,
        size_note=validate_deck_size(saved.cards) if "cards" in changes else None,
    )


@router.delete("/{prism_id}/decks/{deck_id}", response_model=PrismResponse)
async def remove_deck_endpoint(
    prism_id: str,
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PrismResponse:
    """Remove a deck. Later decks move up one stripe position."""
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)

    find_deck(collection, deck_id, prism_id)

    await commit_collection(session, prism, remove_deck(collection, deck_id))
    logger.info("Removed deck %s from prism %s", deck_id, prism_id)
    return prism_to_response(prism)
