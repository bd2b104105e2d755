"""
Failure classification for PRISM.

Every error the system raises on purpose is a KnownError carrying a
FailureKind, a user-appropriate message and an HTTP status code. The API
layer converts these to a uniform JSON body; the command line prints the
message.

All of these are precondition violations surfaced synchronously. Nothing in
the core is transiently fallible, so nothing here is retried.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    VALIDATION_FAILED = "validation_failed"
    UNSUPPORTED_VERSION = "unsupported_version"

    # Resource failures
    NOT_FOUND = "not_found"

    # Constraint violations
    TOO_MANY_DECKS = "too_many_decks"
    COLOR_CONFLICT = "color_conflict"
    INVALID_ORDER = "invalid_order"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.to_detail().model_dump(mode="json")


class TooManyDecksError(KnownError):
    """
    Raised when decks exceed the deck limit or cannot each get a distinct
    stripe color.

    Reusing a color would silently merge two decks on physical sleeves,
    so the operation fails instead of truncating or wrapping around.
    """

    def __init__(
        self,
        deck_count: int,
        palette_size: int,
        detail: str | None = None,
        max_decks: int | None = None,
    ):
        self.deck_count = deck_count
        self.palette_size = palette_size
        self.max_decks = max_decks
        if max_decks is not None:
            message = (
                f"Too many decks ({deck_count}). Collections are limited to {max_decks} decks."
            )
            suggestion = "Remove a deck or raise the deck limit."
        else:
            message = (
                f"Too many decks ({deck_count}). "
                f"Only {palette_size} distinct stripe colors are available."
            )
            suggestion = "Remove a deck or add more colors to the palette."
        super().__init__(
            kind=FailureKind.TOO_MANY_DECKS,
            message=message,
            detail=detail,
            suggestion=suggestion,
            status_code=400,
        )


class ColorConflictError(KnownError):
    """Raised when two decks carry the same stripe color."""

    def __init__(self, color: str, deck_names: list[str]):
        self.color = color
        self.deck_names = deck_names
        super().__init__(
            kind=FailureKind.COLOR_CONFLICT,
            message=f"Color {color} is used by more than one deck: {', '.join(deck_names)}.",
            suggestion="Pick a different color for one of these decks.",
            status_code=409,
        )


class InvalidOrderError(KnownError):
    """Raised when a manual deck order is not a permutation of the decks."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVALID_ORDER,
            message=f"Invalid deck order: {reason}",
            suggestion="Provide every deck exactly once.",
            status_code=400,
        )


class DeckValidationError(KnownError):
    """Raised when deck form input fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            kind=FailureKind.VALIDATION_FAILED,
            message="Deck input is invalid.",
            detail="; ".join(errors),
            suggestion="Fix the listed problems and try again.",
            status_code=422,
        )


class InvalidSnapshotError(KnownError):
    """Raised when a JSON snapshot or storage document is malformed."""

    def __init__(self, reason: str):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Not a valid PRISM file ({reason})",
            status_code=400,
        )


class UnsupportedVersionError(KnownError):
    """Raised when a snapshot or storage document has an unknown version."""

    def __init__(self, version: object):
        self.version = version
        super().__init__(
            kind=FailureKind.UNSUPPORTED_VERSION,
            message=f"Unsupported PRISM version: {version}",
            suggestion="Upgrade PRISM to read this file.",
            status_code=400,
        )
