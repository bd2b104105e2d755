"""
Moxfield deck importer.

Fetches a public deck from Moxfield's JSON API and converts its mainboard
into PRISM cards. Both the older flat response shape
({"mainboard": {...}, "commanders": [...]}) and the current "boards" shape
({"boards": {"mainboard": {"cards": {...}}, "commanders": {...}}}) are read.

Note: this is an unofficial API. Response structure may change.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from prism.config import settings
from prism.core.normalizer import normalize_card_name
from prism.models.card import Card
from prism.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)

USER_AGENT = "PRISM/1.0"

# Deck URLs look like https://www.moxfield.com/decks/abc123_-XYZ
MOXFIELD_URL_PATTERN = re.compile(r"moxfield\.com/decks/([A-Za-z0-9_-]+)")
MOXFIELD_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

UNKNOWN_COMMANDER = "Unknown Commander"


class MoxfieldError(KnownError):
    """Raised when a Moxfield deck cannot be fetched or understood."""

    def __init__(self, message: str, detail: str | None = None, status_code: int = 502):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="Check that the deck is public, or paste the decklist instead.",
            status_code=status_code,
        )


@dataclass
class MoxfieldDeck:
    """The parts of a Moxfield deck PRISM needs."""

    deck_id: str
    name: str
    commander: str
    cards: list[Card] = field(default_factory=list)


def extract_moxfield_id(url_or_id: str) -> str:
    """
    Extract a deck id from a Moxfield URL, or accept a bare id.

    Raises:
        MoxfieldError: If the input is neither
    """
    value = url_or_id.strip()

    match = MOXFIELD_URL_PATTERN.search(value)
    if match:
        return match.group(1)

    if MOXFIELD_ID_PATTERN.match(value):
        return value

    raise MoxfieldError("Invalid Moxfield URL or ID", detail=value, status_code=400)


async def fetch_moxfield_json(
    deck_id: str,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    Fetch raw deck JSON from the Moxfield API.

    Args:
        deck_id: Moxfield deck id
        client: Optional httpx client for connection reuse

    Raises:
        httpx.HTTPError: If the request fails
    """
    url = f"{settings.moxfield_api_url}/{deck_id}"

    if client:
        response = await client.get(url)
    else:
        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=settings.request_timeout,
        ) as owned_client:
            response = await owned_client.get(url)

    response.raise_for_status()
    data: dict[str, Any] = response.json()
    return data


def _board_entries(data: dict[str, Any], board: str) -> list[dict[str, Any]]:
    """Card entries of a board in either response shape."""
    boards = data.get("boards")
    if isinstance(boards, dict):
        entries = (boards.get(board) or {}).get("cards") or {}
    else:
        entries = data.get(board) or {}

    if isinstance(entries, dict):
        return list(entries.values())
    return list(entries)


def get_commander_name(data: dict[str, Any]) -> str:
    """First commander's name, or 'Unknown Commander'."""
    for entry in _board_entries(data, "commanders"):
        name = (entry.get("card") or {}).get("name")
        if name:
            return normalize_card_name(name)
    return UNKNOWN_COMMANDER


def convert_mainboard(data: dict[str, Any]) -> list[Card]:
    """
    Convert the Moxfield mainboard to cards.

    Commanders and sideboard are not included, matching a pasted decklist.
    """
    cards: list[Card] = []
    for entry in _board_entries(data, "mainboard"):
        name = normalize_card_name((entry.get("card") or {}).get("name") or "")
        if not name:
            continue
        cards.append(Card(name=name, quantity=int(entry.get("quantity") or 1)))
    return cards


def parse_moxfield_deck(deck_id: str, data: dict[str, Any]) -> MoxfieldDeck:
    return MoxfieldDeck(
        deck_id=deck_id,
        name=str(data.get("name") or deck_id),
        commander=get_commander_name(data),
        cards=convert_mainboard(data),
    )


async def import_moxfield_deck(
    url_or_id: str,
    client: httpx.AsyncClient | None = None,
) -> MoxfieldDeck:
    """
    Fetch and convert a Moxfield deck.

    Raises:
        MoxfieldError: On an invalid id, HTTP failure or unreadable response
    """
    deck_id = extract_moxfield_id(url_or_id)

    try:
        data = await fetch_moxfield_json(deck_id, client)
    except httpx.HTTPStatusError as e:
        logger.error("Moxfield returned %s for deck %s", e.response.status_code, deck_id)
        raise MoxfieldError(
            f"Failed to fetch deck: {e.response.reason_phrase}",
            detail=f"HTTP {e.response.status_code}",
            status_code=404 if e.response.status_code == 404 else 502,
        ) from e
    except httpx.HTTPError as e:
        logger.error("Error fetching Moxfield deck %s: %s", deck_id, e)
        raise MoxfieldError("Failed to fetch deck", detail=type(e).__name__) from e
    except ValueError as e:
        raise MoxfieldError("Moxfield returned an unreadable response") from e

    deck = parse_moxfield_deck(deck_id, data)
    logger.info("Imported %d cards from Moxfield deck %s", len(deck.cards), deck_id)
    return deck
