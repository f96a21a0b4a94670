"""Tests for the issuestore admin CLI (issuestore.main)."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from issuestore.backends import YamlDirectoryBackend
from issuestore.errors import StorageUnavailableError
from issuestore.main import main, parse_args
from issuestore.schemas import IssueRecord
from issuestore.store import IssueStore


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Config pointing at a YAML store with two projects."""
    monkeypatch.delenv("STORE_DATA_DIR", raising=False)
    data_dir = tmp_path / "data"
    with IssueStore(YamlDirectoryBackend(data_dir)) as store:
        store.upsert(IssueRecord(id="I1", project_id="P1", iris=["http://example.org/X"]))
        store.upsert(IssueRecord(id="I2", project_id="P1", obo_ids=["GO:1"]))
        store.upsert(IssueRecord(id="I3", project_id="P2", iris=["http://example.org/X"]))
    path = tmp_path / "config.yaml"
    path.write_text(f"store:\n  backend: yaml\n  data_dir: {data_dir}\nlogging:\n  level: ERROR\n")
    return path


def _listed_ids(out: str) -> set[str]:
    return {r["id"] for r in (yaml.safe_load(out) or [])}


class TestParseArgs:
    """Argument parsing."""

    def test_list_filters(self) -> None:
        """list accepts --project with --iri or --obo-id."""
        args = parse_args(["-c", "x.yaml", "list", "--project", "P1", "--obo-id", "GO:1"])
        assert args.config == Path("x.yaml")
        assert args.subcommand == "list"
        assert args.project == "P1"
        assert args.obo_id == "GO:1"
        assert args.iri is None

    def test_iri_and_obo_id_are_exclusive(self) -> None:
        """--iri and --obo-id cannot be combined."""
        with pytest.raises(SystemExit):
            parse_args(["list", "--iri", "X", "--obo-id", "GO:1"])

    def test_subcommand_required(self) -> None:
        """Running without a subcommand is a usage error."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestMain:
    """Subcommands against a real YAML store."""

    def test_check_prints_counts(self, config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """check reports record, project, IRI and OBO id counts."""
        assert main(["-c", str(config_path), "check"]) == 0
        assert "3 records, 2 projects, 1 IRIs, 1 OBO ids" in capsys.readouterr().out

    def test_list_dispatches_to_finders(self, config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """list picks the finder matching its filters."""
        cases = [
            ([], {"I1", "I2", "I3"}),
            (["--project", "P1"], {"I1", "I2"}),
            (["--iri", "http://example.org/X"], {"I1", "I3"}),
            (["--obo-id", "GO:1"], {"I2"}),
            (["--project", "P2", "--iri", "http://example.org/X"], {"I3"}),
            (["--project", "P2", "--obo-id", "GO:1"], set()),
        ]
        for filters, expected in cases:
            assert main(["-c", str(config_path), "list", *filters]) == 0
            assert _listed_ids(capsys.readouterr().out) == expected

    def test_delete_project(self, config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """delete-project removes the project's records durably."""
        assert main(["-c", str(config_path), "delete-project", "P1"]) == 0
        assert "Deleted 2 issue records of project P1" in capsys.readouterr().out
        assert main(["-c", str(config_path), "list"]) == 0
        assert _listed_ids(capsys.readouterr().out) == {"I3"}

    def test_store_error_returns_1(self, config_path: Path) -> None:
        """IssueStoreError is reported with exit code 1."""
        with patch("issuestore.main.open_store", side_effect=StorageUnavailableError("down")):
            assert main(["-c", str(config_path), "check"]) == 1

    def test_malformed_config_returns_1(self, tmp_path: Path) -> None:
        """A config file that is not a mapping is reported with exit code 1."""
        path = tmp_path / "config.yaml"
        path.write_text("- store\n- logging\n", encoding="utf-8")
        assert main(["-c", str(path), "check"]) == 1
