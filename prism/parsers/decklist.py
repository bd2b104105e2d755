"""
Parser for MTGO / Moxfield / Archidekt style decklists.

Format:
    <quantity>[x] <card name> [(<set_code>) <collector_number>]

Example:
    1 Sol Ring
    12 Island
    1x Arcane Signet (CMR) 297

Sections:
    "Deck", "Mainboard", "Commander" and "Companion" cards are kept.
    "Sideboard", "SB:", "Maybeboard" and "Considering" cards are skipped
    until the next kept section header. A single "SB: 1 Card" line is
    skipped on its own.

Ignored:
    - Empty lines
    - Comment lines starting with "//" or "#"
"""

import logging
import re
from dataclasses import dataclass, field

from prism.core.normalizer import get_card_key, is_basic_land, normalize_card_name
from prism.models.card import Card

logger = logging.getLogger(__name__)

# Pattern: "1 Sol Ring" or "1x Sol Ring"
# Groups: (quantity, card_name)
LINE_PATTERN = re.compile(r"^(\d+)x?\s+(.+)$", re.IGNORECASE)

# Trailing set/collector info: " (CMR) 297", " (2XM) 290a", " [C21]"
SET_SUFFIX_PATTERN = re.compile(r"\s+(\([A-Za-z0-9]+\)(\s+\S+)?|\[[A-Za-z0-9]+\])$")

SECTION_MAIN = "main"
SECTION_COMMANDER = "commander"
SECTION_COMPANION = "companion"
SECTION_SIDEBOARD = "sideboard"
SECTION_MAYBEBOARD = "maybeboard"

INCLUDED_SECTIONS = frozenset({SECTION_MAIN, SECTION_COMMANDER, SECTION_COMPANION})

# Header prefix -> section. Headers may carry a count or colon ("Deck (99)", "Sideboard:").
SECTION_PREFIXES = (
    ("SIDEBOARD", SECTION_SIDEBOARD),
    ("SB:", SECTION_SIDEBOARD),
    ("COMMANDER", SECTION_COMMANDER),
    ("COMPANION", SECTION_COMPANION),
    ("MAYBEBOARD", SECTION_MAYBEBOARD),
    ("CONSIDERING", SECTION_MAYBEBOARD),
    ("DECK", SECTION_MAIN),
    ("MAINBOARD", SECTION_MAIN),
)


@dataclass(frozen=True, slots=True)
class ParseError:
    """A line that could not be parsed."""

    line: int
    text: str
    reason: str


@dataclass(frozen=True, slots=True)
class ParseWarning:
    """A line that parsed but looks suspicious."""

    line: int
    text: str
    message: str


@dataclass
class ParseResult:
    """Result of parsing a decklist."""

    cards: list[Card] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def total_cards(self) -> int:
        return sum(card.quantity for card in self.cards)


def section_for_header(line: str) -> str | None:
    """
    Return the section a header line starts, or None if it is not a header.

    Card lines start with a quantity, so they are never headers.
    """
    if line[:1].isdigit():
        return None

    upper = line.upper()
    if upper.rstrip(":") == "MAIN":
        return SECTION_MAIN
    for prefix, section in SECTION_PREFIXES:
        if upper.startswith(prefix):
            return section
    return None


def parse_decklist(text: str) -> ParseResult:
    """
    Parse a decklist into cards, errors and warnings.

    A non-basic card listed more than once is kept once. The repeat is
    silent when the card was listed under "Commander" (Moxfield exports the
    commander in both sections) and a singleton warning otherwise.

    Args:
        text: Raw decklist text

    Returns:
        ParseResult. Empty input yields an empty result, not an error.
    """
    result = ParseResult()
    seen: set[str] = set()
    commander_keys: set[str] = set()
    section = SECTION_MAIN

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        if not line:
            continue

        if line.startswith("//") or line.startswith("#"):
            continue

        if line.upper().startswith("SB:") and line[3:].strip():
            continue

        header = section_for_header(line)
        if header is not None:
            section = header
            continue

        if section not in INCLUDED_SECTIONS:
            continue

        match = LINE_PATTERN.match(line)
        if not match:
            result.errors.append(
                ParseError(
                    line=line_number,
                    text=line,
                    reason='Invalid format: Expected "quantity cardname" (e.g., "1 Sol Ring")',
                )
            )
            continue

        quantity = int(match.group(1))
        name = normalize_card_name(SET_SUFFIX_PATTERN.sub("", match.group(2).strip()))

        if not name:
            result.errors.append(
                ParseError(line=line_number, text=line, reason="Empty card name after parsing")
            )
            continue

        if quantity < 1:
            result.errors.append(
                ParseError(line=line_number, text=line, reason="Quantity must be at least 1")
            )
            continue

        key = get_card_key(name)
        if key in seen and not is_basic_land(name):
            if key not in commander_keys and section != SECTION_COMMANDER:
                result.warnings.append(
                    ParseWarning(
                        line=line_number,
                        text=line,
                        message=f'Duplicate card "{name}" (Commander is singleton format)',
                    )
                )
            logger.debug("Skipping repeated entry for %s on line %d", name, line_number)
            continue

        seen.add(key)
        if section == SECTION_COMMANDER:
            commander_keys.add(key)

        result.cards.append(Card(name=name, quantity=quantity))

    if result.errors:
        logger.debug("Decklist had %d unparseable lines", len(result.errors))

    return result


def validate_deck_size(cards: list[Card]) -> str | None:
    """
    Check that a parsed deck has a plausible Commander size.

    Returns:
        A message describing the problem, or None for exactly 100 cards
    """
    total = sum(card.quantity for card in cards)

    if total == 0:
        return "Deck is empty (0 cards)"

    if total < 50:
        return f"Deck only has {total} cards (Commander decks should have 100)"

    if total > 150:
        return f"Deck has {total} cards (Commander decks should have 100)"

    if total != 100:
        return f"Note: Deck has {total} cards (Commander format expects 100)"

    return None
