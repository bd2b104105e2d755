"""
Deck input validation.

Checks the user-entered fields of a deck before it is added to a
collection. Each validator returns the list of problems found; an empty
list means the input is valid.
"""

from collections.abc import Sequence

from prism.config import MAX_BRACKET, MIN_BRACKET
from prism.models.deck import Deck
from prism.models.failure import DeckValidationError

MAX_NAME_LENGTH = 100


def validate_deck_name(name: str) -> list[str]:
    errors: list[str] = []
    if not name or not name.strip():
        errors.append("Deck name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        errors.append(f"Deck name is too long (max {MAX_NAME_LENGTH} characters)")
    return errors


def validate_commander(commander: str) -> list[str]:
    errors: list[str] = []
    if not commander or not commander.strip():
        errors.append("Commander name cannot be empty")
    if len(commander) > MAX_NAME_LENGTH:
        errors.append(f"Commander name is too long (max {MAX_NAME_LENGTH} characters)")
    return errors


def validate_bracket(bracket: object) -> list[str]:
    if isinstance(bracket, bool) or not isinstance(bracket, int):
        return ["Bracket must be a whole number"]
    if bracket < MIN_BRACKET or bracket > MAX_BRACKET:
        return [f"Bracket must be between {MIN_BRACKET} and {MAX_BRACKET}"]
    return []


def validate_unique_deck_name(
    decks: Sequence[Deck],
    name: str,
    exclude_deck_id: str | None = None,
) -> list[str]:
    """Deck names must be unique within a collection, ignoring case."""
    wanted = name.strip().lower()
    for deck in decks:
        if exclude_deck_id and deck.id == exclude_deck_id:
            continue
        if deck.name.strip().lower() == wanted:
            return [f'A deck named "{deck.name}" already exists']
    return []


def validate_deck_count(count: int, max_decks: int) -> list[str]:
    """
    Check the number of decks a collection will hold.

    A single deck is allowed; sharing only pays off with two or more, but
    that is a hint for the UI, not an error.
    """
    errors: list[str] = []
    if count < 1:
        errors.append("Must process at least 1 deck")
    if count > max_decks:
        errors.append(f"Cannot process more than {max_decks} decks")
    return errors


def validate_deck_input(
    name: str,
    commander: str,
    bracket: object,
    decklist: str | None = None,
) -> list[str]:
    """Validate every field of a deck form."""
    errors = [
        *validate_deck_name(name),
        *validate_commander(commander),
        *validate_bracket(bracket),
    ]
    if decklist is not None and not decklist.strip():
        errors.append("Decklist cannot be empty")
    return errors


def ensure_valid(errors: list[str]) -> None:
    """
    Raise if any validation errors were collected.

    Raises:
        DeckValidationError: If errors is non-empty
    """
    if errors:
        raise DeckValidationError(errors)
