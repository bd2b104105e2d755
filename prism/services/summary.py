"""
Plain-text summaries for the command line.
"""

from prism.core.colors import color_label
from prism.models.delta import PrismDelta
from prism.models.processed import ProcessedData


def render_decks(data: ProcessedData) -> str:
    """One block per deck: commander, bracket, color and sharing."""
    lines = ["=== YOUR DECKS ===", ""]

    for deck in data.decks:
        shared = sum(1 for card in data.cards if card.is_shared and deck.id in card.deck_ids)
        lines.append(f"{deck.stripe_position}. {deck.name}")
        lines.append(f"  Commander: {deck.commander}")
        lines.append(f"  Bracket: {deck.bracket}")
        lines.append(f"  Color: {color_label(deck.assigned_color)}")
        lines.append(f"  Cards: {deck.card_count()} ({shared} shared with other decks)")
        lines.append("")

    return "\n".join(lines)


def render_summary(data: ProcessedData, delta: PrismDelta | None = None) -> str:
    """
    Render the processing summary.

    Args:
        data: Processed deck data
        delta: Changes since the previous run, if one was loaded
    """
    stats = data.stats
    lines = [
        "=== PROCESSING ===",
        f"Analyzed {stats.total_decks} decks with {stats.total_card_slots} total card slots",
        f"Found {stats.total_unique_cards} unique cards",
        f"{stats.shared_cards} cards appear in multiple decks",
        f"You only need {stats.total_unique_cards} physical cards",
    ]

    if stats.cards_saved > 0:
        lines.append(
            f"  (That's {stats.cards_saved} fewer cards than owning complete copies of each deck)"
        )

    if stats.most_shared_cards:
        lines.append("")
        lines.append("Top shared cards:")
        for entry in stats.most_shared_cards:
            lines.append(f"  - {entry.name}: in {entry.count} decks ({', '.join(entry.decks)})")

    if delta is not None:
        lines.extend(
            [
                "",
                "=== CHANGES ===",
                f"New cards: {delta.summary.new_cards}",
                f"Updated cards: {delta.summary.updated_cards}",
                f"Removed cards: {delta.summary.removed_cards}",
            ]
        )

    return "\n".join(lines) + "\n"
