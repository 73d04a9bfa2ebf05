"""Integration tests for the MCP server handlers."""

import os
import tempfile
from pathlib import Path

import pytest

from niddb.mcp.server import _get_db, _handle_resolve, _handle_stats, _load

GOOD_JSON = (
    '{"SceTest": {"nid": 0, "modules": {"TestLib": {"nid": 0, "kernel": false, '
    '"functions": {"Foo": 1}}}}}'
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture(autouse=True)
def clear_cache():
    _load.cache_clear()
    yield
    _load.cache_clear()


@pytest.fixture
def nid_dir(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A database directory with one good and one malformed file."""
    (temp_dir / "good.json").write_text(GOOD_JSON)
    (temp_dir / "bad.json").write_text('{"L": 1}')
    monkeypatch.setenv("NIDDB_PATH", str(temp_dir))
    monkeypatch.delenv("NIDDB_FUNCTIONS", raising=False)
    return temp_dir


class TestLoadPolicy:
    """A file that fails to load is reported, the rest stay usable."""

    def test_bad_file_does_not_disable_server(self, nid_dir: Path) -> None:
        db = _get_db()

        assert db.resolve("TestLib", 1) == "Foo"
        assert _handle_resolve("TestLib", "0x1")["name"] == "Foo"

    def test_stats_report_load_errors(self, nid_dir: Path) -> None:
        stats = _handle_stats()

        assert stats["libraries"] == 1
        assert len(stats["load_errors"]) == 1
        assert "bad.json" in stats["load_errors"][0]

    def test_missing_signature_file_is_reported(self, nid_dir: Path) -> None:
        db, errors = _load((str(nid_dir / "good.json"),), str(nid_dir / "missing.txt"))

        assert db.resolve("TestLib", 1) == "Foo"
        assert len(errors) == 1
        assert os.fspath(nid_dir / "missing.txt") in errors[0]
