from prism.db.database import get_session, init_db
from prism.db.operations import (
    create_prism,
    delete_prism,
    get_prism,
    list_prisms,
    prism_to_model,
    save_collection,
    save_snapshot,
    snapshot_decks,
)

__all__ = [
    "create_prism",
    "delete_prism",
    "get_prism",
    "get_session",
    "init_db",
    "list_prisms",
    "prism_to_model",
    "save_collection",
    "save_snapshot",
    "snapshot_decks",
]
