"""Unit tests for the function signature table."""

import tempfile
from pathlib import Path

import pytest

from niddb.core.models import FunctionSignature
from niddb.core.storage import SignatureStorage, parse_signature_line


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


class TestParseSignatureLine:
    """Tests for parsing single signature lines."""

    def test_full_line(self) -> None:
        assert parse_signature_line("memcpy|dst,src,len|void*") == FunctionSignature(
            name="memcpy", argument_spec="dst,src,len", return_spec="void*"
        )

    def test_name_only(self) -> None:
        assert parse_signature_line("  sceKernelExitGame  ") == FunctionSignature(
            name="sceKernelExitGame"
        )

    def test_name_and_args(self) -> None:
        signature = parse_signature_line("sceIoOpen|const char *file, int flags, SceMode mode")

        assert signature is not None
        assert signature.argument_spec == "const char *file, int flags, SceMode mode"
        assert signature.return_spec == ""

    def test_extra_separators_stay_in_return(self) -> None:
        signature = parse_signature_line("f|a|b|c")

        assert signature is not None
        assert signature.return_spec == "b|c"

    @pytest.mark.parametrize("line", ["", "   ", "# comment", "   # indented comment", "|args"])
    def test_skipped_lines(self, line: str) -> None:
        assert parse_signature_line(line) is None


class TestSignatureStorage:
    """Tests for loading and looking up signatures."""

    def test_load_file(self, temp_dir: Path) -> None:
        file_path = temp_dir / "functions.txt"
        file_path.write_text("memcpy|dst,src,len|void*\n# comment\n\n")

        storage = SignatureStorage()
        assert storage.load(file_path) == 1
        assert len(storage) == 1

        signature = storage.find("memcpy")
        assert signature is not None
        assert signature.argument_spec == "dst,src,len"
        assert signature.return_spec == "void*"
        assert storage.find("missing") is None

    def test_first_loaded_wins(self, temp_dir: Path) -> None:
        file_path = temp_dir / "functions.txt"
        file_path.write_text("f|int a|int\nf|char b|char\n")

        storage = SignatureStorage()
        storage.load(file_path)

        signature = storage.find("f")
        assert signature is not None
        assert signature.argument_spec == "int a"
        assert len(storage) == 2

    def test_clear(self) -> None:
        storage = SignatureStorage()
        storage.add(FunctionSignature(name="f"))
        storage.clear()

        assert storage.find("f") is None
