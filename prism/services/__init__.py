from prism.services.export import generate_changes_csv, generate_reference_csv
from prism.services.snapshot import (
    PrismSnapshot,
    build_snapshot,
    generate_json,
    load_snapshot,
    parse_snapshot,
)
from prism.services.storage import (
    CollectionDocument,
    collection_to_document,
    document_to_collection,
    dump_collection,
    load_collection,
    migrate_document,
)
from prism.services.summary import render_decks, render_summary

__all__ = [
    "CollectionDocument",
    "PrismSnapshot",
    "build_snapshot",
    "collection_to_document",
    "document_to_collection",
    "dump_collection",
    "generate_changes_csv",
    "generate_json",
    "generate_reference_csv",
    "load_collection",
    "load_snapshot",
    "migrate_document",
    "parse_snapshot",
    "render_decks",
    "render_summary",
]
