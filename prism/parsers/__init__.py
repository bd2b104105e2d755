from prism.parsers.decklist import (
    ParseError,
    ParseResult,
    ParseWarning,
    parse_decklist,
    validate_deck_size,
)

__all__ = [
    "ParseError",
    "ParseResult",
    "ParseWarning",
    "parse_decklist",
    "validate_deck_size",
]
