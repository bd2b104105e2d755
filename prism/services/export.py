"""
CSV exports.

Two files are produced:
    - the reference CSV: one row per unique card with every stripe to paint
    - the changes CSV: one row per card whose marks changed since last time

Column names are stable; spreadsheets and print templates depend on them.
"""

import csv
from io import StringIO

from prism.core.colors import color_label
from prism.models.delta import PrismDelta
from prism.models.processed import ProcessedData

REFERENCE_HEADERS = ["Card Name", "Quantity", "Total Decks", "Mark Summary"]
CHANGES_HEADERS = ["Card Name", "Action", "Old Marks", "New Marks", "What to Do"]

EMPTY_MARKS = "(none)"


def _write_rows(rows: list[list[str | int]]) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def reference_headers(slot_count: int) -> list[str]:
    headers = list(REFERENCE_HEADERS)
    for i in range(1, slot_count + 1):
        headers.extend([f"Slot {i} Color", f"Slot {i} Deck", f"Slot {i} Bracket"])
    return headers


def generate_reference_csv(data: ProcessedData, slot_count: int | None = None) -> str:
    """
    Generate the sleeve marking reference CSV.

    Slot n holds the deck at fixed stripe position n; it is left empty on
    cards that deck does not use.

    Args:
        data: Processed deck data
        slot_count: Number of slot column triples (defaults to deck count)

    Returns:
        CSV text with every field quoted
    """
    if slot_count is None:
        slot_count = len(data.decks)

    rows: list[list[str | int]] = [reference_headers(slot_count)]

    for card in data.cards:
        row: list[str | int] = [
            card.canonical_name,
            card.total_quantity,
            card.deck_count,
            card.mark_summary,
        ]
        by_position = {slot.position: slot for slot in card.mark_slots}
        for position in range(1, slot_count + 1):
            slot = by_position.get(position)
            if slot is None:
                row.extend(["", "", ""])
            else:
                row.extend([color_label(slot.color), slot.deck_name, slot.bracket])
        rows.append(row)

    return _write_rows(rows)


def generate_changes_csv(delta: PrismDelta) -> str:
    """Generate the changes CSV from a delta."""
    rows: list[list[str | int]] = [list(CHANGES_HEADERS)]

    for change in delta.changes:
        rows.append(
            [
                change.card_name,
                change.action.value,
                change.old_mark_summary or EMPTY_MARKS,
                change.new_mark_summary or EMPTY_MARKS,
                change.physical_action,
            ]
        )

    return _write_rows(rows)
