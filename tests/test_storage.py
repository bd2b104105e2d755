import pytest

from prism.config import STORAGE_VERSION
from prism.models.card import Card
from prism.models.collection import add_deck, create_collection, mark_card
from prism.models.deck import create_deck
from prism.models.failure import InvalidSnapshotError, UnsupportedVersionError
from prism.services.storage import dump_collection, load_collection, migrate_document


@pytest.fixture
def legacy_document() -> dict:
    """Unversioned bare collection as exported by older versions."""
    return {
        "id": "c1",
        "name": "My Decks",
        "markedCards": ["sol ring"],
        "createdAt": "2025-03-01T10:00:00Z",
        "updatedAt": "2025-03-02T10:00:00Z",
        "decks": [
            {
                "id": "d1",
                "name": "Atraxa",
                "commander": "Atraxa, Praetors' Voice",
                "bracket": 3,
                "color": "#ecc933",
                "cards": [{"name": "Sol Ring", "quantity": 1}],
            }
        ],
    }


class TestMigrateDocument:
    def test_legacy_document(self, legacy_document: dict) -> None:
        document = migrate_document(legacy_document)

        assert document.version == STORAGE_VERSION
        deck = document.collection.decks[0]
        assert deck.assigned_color == "#ECC933"
        assert document.collection.marked_cards == ["sol ring"]

    def test_current_document(self) -> None:
        collection = create_collection("Current")

        document = migrate_document(dump_collection(collection))

        assert document.collection.name == "Current"

    def test_future_version_rejected(self) -> None:
        with pytest.raises(UnsupportedVersionError):
            migrate_document({"version": 99, "collection": {}})

    def test_not_a_collection(self) -> None:
        with pytest.raises(InvalidSnapshotError):
            migrate_document({"name": "no decks"})

    def test_not_an_object(self) -> None:
        with pytest.raises(InvalidSnapshotError):
            migrate_document("collection")

    def test_invalid_fields(self) -> None:
        with pytest.raises(InvalidSnapshotError):
            migrate_document({"version": STORAGE_VERSION, "collection": {"id": "c1"}})


class TestCollectionRoundTrip:
    def test_dump_and_load(self) -> None:
        deck = create_deck(
            "Edgar Vampires",
            "Edgar Markov",
            4,
            [Card("Sol Ring"), Card("Swamp", 30)],
            color="#c73d2b",
        )
        collection = add_deck(mark_card(create_collection("Vampires"), "sol ring"), deck)

        loaded = load_collection(dump_collection(collection))

        assert loaded.id == collection.id
        assert loaded.marked_cards == {"sol ring"}
        assert loaded.decks[0].assigned_color == "#C73D2B"
        assert loaded.decks[0].cards == [Card("Sol Ring"), Card("Swamp", 30)]
        assert loaded.created_at == collection.created_at

    def test_legacy_load(self, legacy_document: dict) -> None:
        collection = load_collection(legacy_document)

        assert collection.name == "My Decks"
        assert collection.decks[0].bracket == 3
        assert collection.marked_cards == {"sol ring"}
