"""
Generate sleeve marking guides from decklist files.

Reads one decklist file per deck, assigns stripe colors and positions, and
writes the reference CSV and JSON snapshot. Pass the JSON written by a
previous run with --previous to also get a changes CSV listing only the
sleeves that need re-marking.

Example:
    prism-guide atraxa.txt edgar.txt --bracket 3
    prism-guide atraxa.txt --previous prism-output.json
"""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from prism.config import settings
from prism.core.delta import calculate_delta
from prism.core.processor import process_decks
from prism.core.reorder import order_decks_by_sharing
from prism.models.collection import Collection, add_deck, create_collection, prune_marked_cards
from prism.models.deck import Deck, create_deck
from prism.models.delta import PrismDelta
from prism.models.failure import KnownError
from prism.models.processed import ProcessedData
from prism.parsers.decklist import parse_decklist, validate_deck_size
from prism.services.export import generate_changes_csv, generate_reference_csv
from prism.services.snapshot import generate_json, load_snapshot
from prism.services.storage import dump_collection, load_collection
from prism.services.summary import render_decks, render_summary
from prism.services.validator import ensure_valid, validate_bracket

logger = logging.getLogger(__name__)

DEFAULT_CSV_PATH = Path("prism-output.csv")
DEFAULT_JSON_PATH = Path("prism-output.json")
DEFAULT_CHANGES_PATH = Path("prism-changes.csv")
DEFAULT_COMMANDER = "Unknown Commander"
DEFAULT_BRACKET = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prism-guide",
        description="Generate sleeve marking guides for Commander decks that share cards.",
    )
    parser.add_argument(
        "decklists",
        nargs="*",
        type=Path,
        help="Decklist files, one deck per file. The file name is the deck name.",
    )
    parser.add_argument(
        "--name",
        action="append",
        default=None,
        help="Deck name, once per decklist file in the same order",
    )
    parser.add_argument(
        "--commander",
        action="append",
        default=None,
        help="Commander, once per decklist file in the same order",
    )
    parser.add_argument("--bracket", type=int, default=DEFAULT_BRACKET, help="Bracket (1-4)")
    parser.add_argument(
        "--previous",
        type=Path,
        help="JSON snapshot from an earlier run; its decks are kept and changes are reported",
    )
    parser.add_argument(
        "--collection",
        type=Path,
        help="Collection file to start from and update (created if missing)",
    )
    parser.add_argument(
        "--reorder-by-sharing",
        action="store_true",
        help="Reorder decks so decks sharing the most cards get adjacent stripes",
    )
    parser.add_argument("--csv", type=Path, default=DEFAULT_CSV_PATH, help="Reference CSV output")
    parser.add_argument("--json", type=Path, default=DEFAULT_JSON_PATH, help="JSON output")
    parser.add_argument(
        "--changes",
        type=Path,
        default=DEFAULT_CHANGES_PATH,
        help="Changes CSV output (written only with --previous)",
    )
    return parser


def _per_file(values: list[str] | None, count: int, option: str) -> list[str | None]:
    if values is None:
        return [None] * count
    if len(values) != count:
        raise ValueError(f"{option} given {len(values)} times for {count} decklist files")
    return list(values)


def read_decks(
    paths: Sequence[Path],
    names: list[str] | None,
    commanders: list[str] | None,
    bracket: int,
) -> list[Deck]:
    """
    Parse decklist files into decks.

    Unparseable lines are logged and skipped.

    Raises:
        DeckValidationError: If the bracket is out of range
    """
    ensure_valid(validate_bracket(bracket))
    deck_names = _per_file(names, len(paths), "--name")
    deck_commanders = _per_file(commanders, len(paths), "--commander")

    decks: list[Deck] = []
    for path, name, commander in zip(paths, deck_names, deck_commanders, strict=True):
        result = parse_decklist(path.read_text(encoding="utf-8"))

        for error in result.errors:
            logger.warning("%s line %d: %s (%s)", path.name, error.line, error.reason, error.text)
        for warning in result.warnings:
            logger.warning("%s line %d: %s", path.name, warning.line, warning.message)

        size_note = validate_deck_size(result.cards)
        if size_note:
            logger.warning("%s: %s", path.name, size_note)

        decks.append(
            create_deck(
                name=name or path.stem,
                commander=commander or DEFAULT_COMMANDER,
                bracket=bracket,
                cards=result.cards,
            )
        )
        logger.info("Parsed %s: %d cards", path.name, result.total_cards())

    return decks


def merge_decks(collection: Collection, decks: Sequence[Deck]) -> Collection:
    """
    Add decks to a collection.

    A deck whose name matches an existing deck (ignoring case) replaces
    that deck's cards, commander and bracket; its color and position stay.
    """
    for deck in decks:
        wanted = deck.name.lower()
        existing = next((d for d in collection.decks if d.name.lower() == wanted), None)
        if existing is None:
            collection = add_deck(collection, deck)
            continue

        updated = replace(
            existing,
            commander=deck.commander,
            bracket=deck.bracket,
            cards=deck.cards,
        )
        collection = replace(
            collection,
            decks=[updated if d.id == existing.id else d for d in collection.decks],
        )
    return collection


def _load_json(path: Path) -> object:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _write(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote %s", path)


def generate_guide(args: argparse.Namespace) -> tuple[ProcessedData, PrismDelta | None]:
    """
    Run one guide generation.

    Returns:
        The processed data and, when --previous was given, the changes
        since that snapshot
    """
    if args.collection is not None and args.collection.exists():
        collection = load_collection(_load_json(args.collection))
    else:
        collection = create_collection()

    old_data: ProcessedData | None = None
    if args.previous is not None:
        previous_decks = load_snapshot(_load_json(args.previous))
        old_data = process_decks(previous_decks, palette=settings.color_palette)
        if not collection.decks:
            collection = replace(collection, decks=list(old_data.decks))

    new_decks = read_decks(args.decklists, args.name, args.commander, args.bracket)
    collection = merge_decks(collection, new_decks)

    if args.reorder_by_sharing:
        collection = replace(collection, decks=order_decks_by_sharing(collection.decks))

    new_data = process_decks(
        collection.decks,
        palette=settings.color_palette,
        max_decks=settings.max_decks,
    )

    _write(args.csv, generate_reference_csv(new_data))
    _write(args.json, json.dumps(generate_json(new_data), indent=2) + "\n")

    delta = None
    if old_data is not None:
        delta = calculate_delta(old_data, new_data)
        _write(args.changes, generate_changes_csv(delta))

    if args.collection is not None:
        collection = replace(collection, decks=list(new_data.decks))
        collection = prune_marked_cards(collection, new_data.live_keys())
        _write(args.collection, json.dumps(dump_collection(collection), indent=2) + "\n")

    return new_data, delta


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.decklists and args.previous is None and args.collection is None:
        parser.error("give at least one decklist file, --previous or --collection")

    try:
        data, delta = generate_guide(args)
    except KnownError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.detail:
            print(f"  {e.detail}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(render_decks(data))
    print(render_summary(data, delta))
    return 0


if __name__ == "__main__":
    sys.exit(main())
