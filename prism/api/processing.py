"""
Processing API endpoints.

Read-only views computed from a prism's decks (processed cards, overlap,
changes since the last snapshot, exports) plus the operations that move
the marking baseline: saving a snapshot, reordering decks and toggling
marked cards.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from prism.api.prisms import (
    PrismResponse,
    commit_collection,
    load_prism,
    prism_to_response,
    process_collection,
)
from prism.config import settings
from prism.core.delta import calculate_delta
from prism.core.normalizer import get_card_key
from prism.core.overlap import calculate_overlap
from prism.core.processor import process_decks
from prism.core.reorder import order_decks_by_sharing, reorder_decks, reorder_decks_by_id
from prism.db import prism_to_model, save_collection, save_snapshot, snapshot_decks
from prism.db.database import get_session
from prism.models.collection import mark_card, unmark_card
from prism.models.db import PrismDB
from prism.models.delta import PrismDelta
from prism.models.failure import InvalidOrderError
from prism.models.processed import MarkSlot, ProcessedData
from prism.services.export import generate_changes_csv, generate_reference_csv
from prism.services.snapshot import PrismSnapshot, build_snapshot, generate_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prisms", tags=["processing"])

REFERENCE_CSV_FILENAME = "prism-output.csv"
CHANGES_CSV_FILENAME = "prism-changes.csv"
SNAPSHOT_FILENAME = "prism-output.json"


class SharedCardResponse(BaseModel):
    name: str
    count: int
    decks: list[str]


class StatisticsResponse(BaseModel):
    """Summary statistics of a processing pass."""

    total_decks: int
    total_unique_cards: int
    total_card_slots: int
    shared_cards: int
    cards_saved: int
    most_shared_cards: list[SharedCardResponse] = Field(default_factory=list)


class ProcessedResponse(BaseModel):
    """Processed cards in snapshot form plus statistics."""

    stats: StatisticsResponse
    snapshot: PrismSnapshot


class DeckOverlapResponse(BaseModel):
    deck1: str
    deck2: str
    overlap_count: int


class OverlapResponse(BaseModel):
    total_unique_cards: int
    shared_card_count: int
    unique_card_count: int
    pairwise: list[DeckOverlapResponse] = Field(default_factory=list)
    most_shared: list[str] = Field(default_factory=list)


class MarkSlotResponse(BaseModel):
    position: int
    color: str
    deck_name: str
    deck_id: str
    bracket: int


class CardChangeResponse(BaseModel):
    """One card whose marks changed."""

    card_name: str
    action: str
    old_mark_summary: str
    new_mark_summary: str
    physical_action: str
    old_slots: list[MarkSlotResponse] = Field(default_factory=list)
    new_slots: list[MarkSlotResponse] = Field(default_factory=list)


class DeltaSummaryResponse(BaseModel):
    new_cards: int
    updated_cards: int
    removed_cards: int
    total: int


class DeltaResponse(BaseModel):
    """
    Changes between the marking baseline and the current decks.

    baseline is "snapshot" when a snapshot exists, "previous" for a reorder,
    and "none" when nothing has been marked yet (every card is NEW).
    """

    baseline: Literal["snapshot", "previous", "none"]
    summary: DeltaSummaryResponse
    changes: list[CardChangeResponse] = Field(default_factory=list)


class SnapshotSavedResponse(BaseModel):
    id: str
    deck_count: int
    card_count: int
    snapshot_at: datetime | None = None


class ReorderRequest(BaseModel):
    """Reorder by sharing, by index permutation, or by deck ids."""

    mode: Literal["sharing"] | None = None
    order: list[int] | None = Field(
        default=None,
        description="order[k] is the current 0-based index of the deck for stripe k+1",
    )
    deck_ids: list[str] | None = None


class ReorderResponse(BaseModel):
    prism: PrismResponse
    delta: DeltaResponse


class MarkedResponse(BaseModel):
    marked_cards: list[str]
    marked_count: int
    total_cards: int


def _slots(slots: tuple[MarkSlot, ...]) -> list[MarkSlotResponse]:
    return [
        MarkSlotResponse(
            position=slot.position,
            color=slot.color,
            deck_name=slot.deck_name,
            deck_id=slot.deck_id,
            bracket=slot.bracket,
        )
        for slot in slots
    ]


def delta_to_response(
    delta: PrismDelta,
    baseline: Literal["snapshot", "previous", "none"],
) -> DeltaResponse:
    return DeltaResponse(
        baseline=baseline,
        summary=DeltaSummaryResponse(
            new_cards=delta.summary.new_cards,
            updated_cards=delta.summary.updated_cards,
            removed_cards=delta.summary.removed_cards,
            total=delta.summary.total,
        ),
        changes=[
            CardChangeResponse(
                card_name=change.card_name,
                action=change.action.value,
                old_mark_summary=change.old_mark_summary,
                new_mark_summary=change.new_mark_summary,
                physical_action=change.physical_action,
                old_slots=_slots(change.old_slots),
                new_slots=_slots(change.new_slots),
            )
            for change in delta.changes
        ],
    )


def _baseline(prism: PrismDB) -> ProcessedData | None:
    """Processed state of the last snapshot, or None before the first one."""
    decks = snapshot_decks(prism)
    if decks is None:
        return None
    # The snapshot was valid when saved; a later, smaller max_decks must not reject it
    return process_decks(decks, palette=settings.color_palette)


def _changes_since_snapshot(prism: PrismDB) -> tuple[PrismDelta, bool]:
    current = process_collection(prism_to_model(prism))
    baseline = _baseline(prism)
    return calculate_delta(baseline, current), baseline is not None


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/{prism_id}/processed", response_model=ProcessedResponse)
async def get_processed(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProcessedResponse:
    """Process a prism's decks into unique cards with marking instructions."""
    prism = await load_prism(session, prism_id)
    processed = process_collection(prism_to_model(prism))
    stats = processed.stats

    return ProcessedResponse(
        stats=StatisticsResponse(
            total_decks=stats.total_decks,
            total_unique_cards=stats.total_unique_cards,
            total_card_slots=stats.total_card_slots,
            shared_cards=stats.shared_cards,
            cards_saved=stats.cards_saved,
            most_shared_cards=[
                SharedCardResponse(name=entry.name, count=entry.count, decks=list(entry.decks))
                for entry in stats.most_shared_cards
            ],
        ),
        snapshot=build_snapshot(processed),
    )


@router.get("/{prism_id}/overlap", response_model=OverlapResponse)
async def get_overlap(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OverlapResponse:
    """Pairwise and collection-wide card sharing."""
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)
    report = calculate_overlap(collection.decks, process_collection(collection))

    return OverlapResponse(
        total_unique_cards=report.total_unique_cards,
        shared_card_count=report.shared_card_count,
        unique_card_count=report.unique_card_count,
        pairwise=[
            DeckOverlapResponse(deck1=o.deck1, deck2=o.deck2, overlap_count=o.overlap_count)
            for o in report.pairwise
        ],
        most_shared=list(report.most_shared),
    )


@router.get("/{prism_id}/changes", response_model=DeltaResponse)
async def get_changes(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeltaResponse:
    """
    Cards whose marks changed since the last snapshot.

    Before any snapshot is saved, every card is reported as NEW.
    """
    prism = await load_prism(session, prism_id)
    delta, has_baseline = _changes_since_snapshot(prism)
    return delta_to_response(delta, "snapshot" if has_baseline else "none")


@router.post("/{prism_id}/snapshot", response_model=SnapshotSavedResponse)
async def save_snapshot_endpoint(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SnapshotSavedResponse:
    """Record the current decks as the physically marked baseline."""
    prism = await load_prism(session, prism_id)
    processed = process_collection(prism_to_model(prism))
    await save_snapshot(session, prism, list(processed.decks))

    return SnapshotSavedResponse(
        id=prism.id,
        deck_count=len(processed.decks),
        card_count=len(processed.cards),
        snapshot_at=prism.snapshot_at,
    )


@router.post("/{prism_id}/reorder", response_model=ReorderResponse)
async def reorder_endpoint(
    prism_id: str,
    request: ReorderRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ReorderResponse:
    """
    Change deck order and with it every stripe position.

    Colors stay with their decks. The response lists every card whose
    marks moved so the player can re-mark them.
    """
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)
    before = process_collection(collection)

    if request.mode == "sharing":
        decks = order_decks_by_sharing(before.decks)
    elif request.order is not None:
        decks = reorder_decks(before.decks, request.order)
    elif request.deck_ids is not None:
        decks = reorder_decks_by_id(before.decks, request.deck_ids)
    else:
        raise InvalidOrderError("provide mode 'sharing', order or deck_ids")

    collection, after = await commit_collection(session, prism, replace(collection, decks=decks))
    delta = calculate_delta(before, after)
    logger.info("Reordered prism %s: %d cards changed", prism_id, delta.summary.total)

    return ReorderResponse(
        prism=prism_to_response(prism),
        delta=delta_to_response(delta, "previous"),
    )


async def _set_marked(
    session: AsyncSession,
    prism_id: str,
    card_key: str,
    marked: bool,
) -> MarkedResponse:
    prism = await load_prism(session, prism_id)
    collection = prism_to_model(prism)
    processed = process_collection(collection)

    key = get_card_key(card_key)
    if processed.get_card(key) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card '{card_key}' is not in any deck of prism '{prism_id}'",
        )

    collection = mark_card(collection, key) if marked else unmark_card(collection, key)
    await save_collection(session, prism, collection)

    return MarkedResponse(
        marked_cards=sorted(collection.marked_cards),
        marked_count=len(collection.marked_cards),
        total_cards=len(processed.cards),
    )


@router.put("/{prism_id}/marked/{card_key}", response_model=MarkedResponse)
async def mark_card_endpoint(
    prism_id: str,
    card_key: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MarkedResponse:
    """Flag a card as physically marked. Accepts any spelling of the name."""
    return await _set_marked(session, prism_id, card_key, marked=True)


@router.delete("/{prism_id}/marked/{card_key}", response_model=MarkedResponse)
async def unmark_card_endpoint(
    prism_id: str,
    card_key: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MarkedResponse:
    return await _set_marked(session, prism_id, card_key, marked=False)


@router.get("/{prism_id}/export.csv")
async def export_reference_csv(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Reference sheet: one row per unique card with its slots."""
    prism = await load_prism(session, prism_id)
    processed = process_collection(prism_to_model(prism))
    return Response(
        content=generate_reference_csv(processed),
        media_type="text/csv",
        headers=_attachment(REFERENCE_CSV_FILENAME),
    )


@router.get("/{prism_id}/export.json")
async def export_snapshot_json(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> JSONResponse:
    """Versioned JSON snapshot, readable by the prism-guide command."""
    prism = await load_prism(session, prism_id)
    processed = process_collection(prism_to_model(prism))
    return JSONResponse(
        content=generate_json(processed),
        headers=_attachment(SNAPSHOT_FILENAME),
    )


@router.get("/{prism_id}/changes.csv")
async def export_changes_csv(
    prism_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Changes since the last snapshot as CSV."""
    prism = await load_prism(session, prism_id)
    delta, _ = _changes_since_snapshot(prism)
    return Response(
        content=generate_changes_csv(delta),
        media_type="text/csv",
        headers=_attachment(CHANGES_CSV_FILENAME),
    )
