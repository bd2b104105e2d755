"""
Delta calculation between two processed states.

Tells the player exactly which sleeves to touch after decks were added,
edited, removed or reordered, so only changed cards are re-marked.

Every card key lands in exactly one bucket:
    only in new      -> NEW
    in both, marks differ -> UPDATE
    only in old      -> REMOVE
Cards whose marks are unchanged produce no change at all.
"""

import logging
from collections.abc import Sequence

from prism.core.colors import color_label
from prism.core.normalizer import name_sort_key
from prism.models.delta import CardChange, ChangeAction, DeltaSummary, PrismDelta
from prism.models.processed import MarkSlot, ProcessedCard, ProcessedData

logger = logging.getLogger(__name__)

REMOVE_INSTRUCTION = "Card no longer in any deck - remove from collection"
NO_CHANGE_INSTRUCTION = "No physical changes needed"


def calculate_delta(old_data: ProcessedData | None, new_data: ProcessedData) -> PrismDelta:
    """
    Calculate the delta between an old state and a new one.

    Args:
        old_data: Previous processed data, or None on the first run
        new_data: New processed data

    Returns:
        PrismDelta with changes sorted NEW, UPDATE, REMOVE then by name
    """
    if old_data is None:
        return _finalize([_new_change(card) for card in new_data.cards])

    old_cards = {card.normalized_key: card for card in old_data.cards}
    new_cards = {card.normalized_key: card for card in new_data.cards}

    changes: list[CardChange] = []

    for key, new_card in new_cards.items():
        old_card = old_cards.get(key)
        if old_card is None:
            changes.append(_new_change(new_card))
        elif old_card.mark_summary != new_card.mark_summary:
            changes.append(
                CardChange(
                    card_name=new_card.canonical_name,
                    action=ChangeAction.UPDATE,
                    old_mark_summary=old_card.mark_summary,
                    new_mark_summary=new_card.mark_summary,
                    physical_action=generate_update_instruction(
                        old_card.mark_slots, new_card.mark_slots
                    ),
                    old_slots=old_card.mark_slots,
                    new_slots=new_card.mark_slots,
                )
            )

    for key, old_card in old_cards.items():
        if key not in new_cards:
            changes.append(
                CardChange(
                    card_name=old_card.canonical_name,
                    action=ChangeAction.REMOVE,
                    old_mark_summary=old_card.mark_summary,
                    new_mark_summary="",
                    physical_action=REMOVE_INSTRUCTION,
                    old_slots=old_card.mark_slots,
                    new_slots=(),
                )
            )

    return _finalize(changes)


def _new_change(card: ProcessedCard) -> CardChange:
    return CardChange(
        card_name=card.canonical_name,
        action=ChangeAction.NEW,
        old_mark_summary="",
        new_mark_summary=card.mark_summary,
        physical_action=f"Mark new sleeve with: {card.mark_summary}",
        old_slots=(),
        new_slots=card.mark_slots,
    )


def _finalize(changes: list[CardChange]) -> PrismDelta:
    changes.sort(key=lambda change: (change.action.priority, name_sort_key(change.card_name)))

    summary = DeltaSummary(
        new_cards=sum(1 for c in changes if c.action is ChangeAction.NEW),
        updated_cards=sum(1 for c in changes if c.action is ChangeAction.UPDATE),
        removed_cards=sum(1 for c in changes if c.action is ChangeAction.REMOVE),
    )

    logger.info(
        "Delta: %d new, %d updated, %d removed",
        summary.new_cards,
        summary.updated_cards,
        summary.removed_cards,
    )

    return PrismDelta(changes=tuple(changes), summary=summary)


def generate_update_instruction(
    old_slots: Sequence[MarkSlot],
    new_slots: Sequence[MarkSlot],
) -> str:
    """
    Describe how to repaint a sleeve.

    Slots are compared as (position, color) pairs. A slot whose color
    changed at the same position is reported as a removal plus an addition.

    Returns:
        e.g. "Add: Blue in slot 2 | Remove: Red from slot 1", or
        "No physical changes needed" if the slot sets are identical
    """
    old_pairs = {(slot.position, slot.color) for slot in old_slots}
    new_pairs = {(slot.position, slot.color) for slot in new_slots}

    added = [
        f"{color_label(slot.color)} in slot {slot.position}"
        for slot in new_slots
        if (slot.position, slot.color) not in old_pairs
    ]
    removed = [
        f"{color_label(slot.color)} from slot {slot.position}"
        for slot in old_slots
        if (slot.position, slot.color) not in new_pairs
    ]

    instructions: list[str] = []
    if added:
        instructions.append(f"Add: {', '.join(added)}")
    if removed:
        instructions.append(f"Remove: {', '.join(removed)}")

    return " | ".join(instructions) or NO_CHANGE_INSTRUCTION
