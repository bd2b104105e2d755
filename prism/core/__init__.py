from prism.core.colors import (
    assign_colors,
    color_label,
    find_color_owner,
    get_next_color,
    get_next_stripe_position,
)
from prism.core.delta import calculate_delta, generate_update_instruction
from prism.core.normalizer import (
    card_names_equal,
    get_card_key,
    is_basic_land,
    normalize_card_name,
)
from prism.core.overlap import (
    calculate_overlap,
    calculate_pairwise_overlap,
    calculate_shared_cards,
)
from prism.core.processor import calculate_statistics, process_decks
from prism.core.reorder import order_decks_by_sharing, reorder_decks, reorder_decks_by_id

__all__ = [
    "assign_colors",
    "calculate_delta",
    "calculate_overlap",
    "calculate_pairwise_overlap",
    "calculate_shared_cards",
    "calculate_statistics",
    "card_names_equal",
    "color_label",
    "find_color_owner",
    "generate_update_instruction",
    "get_card_key",
    "get_next_color",
    "get_next_stripe_position",
    "is_basic_land",
    "normalize_card_name",
    "order_decks_by_sharing",
    "process_decks",
    "reorder_decks",
    "reorder_decks_by_id",
]
