"""Tests for the prism-guide command."""

import csv
import json
from pathlib import Path

import pytest

from prism.config import settings
from prism.jobs.generate_guide import main, merge_decks, read_decks
from prism.models.collection import create_collection
from prism.models.failure import DeckValidationError


@pytest.fixture
def decklists(tmp_path: Path) -> list[Path]:
    atraxa = tmp_path / "atraxa.txt"
    atraxa.write_text("1 Sol Ring\n10 Island\n")
    edgar = tmp_path / "edgar.txt"
    edgar.write_text("1 Sol Ring\n12 Island\n1 Lightning Bolt\nnot a card\n")
    return [atraxa, edgar]


def _outputs(tmp_path: Path) -> list[str]:
    return [
        "--csv",
        str(tmp_path / "out.csv"),
        "--json",
        str(tmp_path / "out.json"),
        "--changes",
        str(tmp_path / "changes.csv"),
    ]


class TestReadDecks:
    def test_names_from_file_stems(self, decklists: list[Path]) -> None:
        decks = read_decks(decklists, None, None, 2)

        assert [deck.name for deck in decks] == ["atraxa", "edgar"]
        assert decks[1].card_count() == 14
        assert decks[0].commander == "Unknown Commander"

    def test_explicit_names(self, decklists: list[Path]) -> None:
        decks = read_decks(decklists, ["Atraxa", "Edgar"], ["Atraxa", "Edgar Markov"], 3)

        assert [deck.name for deck in decks] == ["Atraxa", "Edgar"]
        assert decks[1].commander == "Edgar Markov"
        assert decks[1].bracket == 3

    def test_name_count_mismatch(self, decklists: list[Path]) -> None:
        with pytest.raises(ValueError, match="--name"):
            read_decks(decklists, ["Only one"], None, 2)

    def test_invalid_bracket(self, decklists: list[Path]) -> None:
        with pytest.raises(DeckValidationError):
            read_decks(decklists, None, None, 9)


class TestMergeDecks:
    def test_same_name_replaces_cards(self, decklists: list[Path]) -> None:
        first, second = read_decks(decklists, ["Atraxa", "atraxa"], None, 2)

        collection = merge_decks(create_collection(), [first, second])

        assert len(collection.decks) == 1
        assert collection.decks[0].id == first.id
        assert collection.decks[0].cards == second.cards


class TestMain:
    def test_writes_outputs(
        self, decklists: list[Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = main([*map(str, decklists), *_outputs(tmp_path)])

        assert exit_code == 0
        rows = list(csv.reader((tmp_path / "out.csv").read_text().splitlines()))
        assert [row[0] for row in rows[1:]] == ["Island", "Sol Ring", "Lightning Bolt"]
        snapshot = json.loads((tmp_path / "out.json").read_text())
        assert [deck["name"] for deck in snapshot["decks"]] == ["atraxa", "edgar"]
        assert not (tmp_path / "changes.csv").exists()
        assert "Found 3 unique cards" in capsys.readouterr().out

    def test_previous_run_changes(self, decklists: list[Path], tmp_path: Path) -> None:
        """A second run against the first run's JSON reports only new cards."""
        main([str(decklists[0]), *_outputs(tmp_path)])
        previous = tmp_path / "previous.json"
        (tmp_path / "out.json").rename(previous)

        exit_code = main([str(decklists[1]), "--previous", str(previous), *_outputs(tmp_path)])

        assert exit_code == 0
        rows = list(csv.reader((tmp_path / "changes.csv").read_text().splitlines()))
        changes = {row[0]: row[1] for row in rows[1:]}
        assert changes == {"Lightning Bolt": "NEW", "Sol Ring": "UPDATE", "Island": "UPDATE"}

        snapshot = json.loads((tmp_path / "out.json").read_text())
        assert [deck["stripePosition"] for deck in snapshot["decks"]] == [1, 2]
        assert snapshot["decks"][0]["assignedColor"] == "#ECC933"

    def test_collection_file(self, decklists: list[Path], tmp_path: Path) -> None:
        collection_path = tmp_path / "collection.json"

        main([str(decklists[0]), "--collection", str(collection_path), *_outputs(tmp_path)])
        main([str(decklists[1]), "--collection", str(collection_path), *_outputs(tmp_path)])

        document = json.loads(collection_path.read_text())
        assert document["version"] == 1
        decks = document["collection"]["decks"]
        assert [deck["name"] for deck in decks] == ["atraxa", "edgar"]
        assert decks[0]["assigned_color"] == "#ECC933"

    def test_reorder_by_sharing(self, tmp_path: Path) -> None:
        lonely = tmp_path / "lonely.txt"
        lonely.write_text("1 Opt\n")
        hub = tmp_path / "hub.txt"
        hub.write_text("1 Sol Ring\n1 Arcane Signet\n")
        friend = tmp_path / "friend.txt"
        friend.write_text("1 Sol Ring\n1 Arcane Signet\n")

        main([str(lonely), str(hub), str(friend), "--reorder-by-sharing", *_outputs(tmp_path)])

        snapshot = json.loads((tmp_path / "out.json").read_text())
        assert [deck["name"] for deck in snapshot["decks"]] == ["hub", "friend", "lonely"]

    def test_too_many_decks(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(settings, "max_decks", 1)
        files = []
        for name in ["one", "two"]:
            path = tmp_path / f"{name}.txt"
            path.write_text("1 Sol Ring\n")
            files.append(str(path))

        exit_code = main([*files, *_outputs(tmp_path)])

        assert exit_code == 1
        assert "Too many decks (2)" in capsys.readouterr().err

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing.txt"), *_outputs(tmp_path)]) == 1

    def test_requires_input(self) -> None:
        with pytest.raises(SystemExit):
            main([])
