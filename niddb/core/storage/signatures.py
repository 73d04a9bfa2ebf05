"""Function signature storage operations."""

from __future__ import annotations

import logging
from pathlib import Path

from niddb.core.exceptions import FileUnreadableError
from niddb.core.models import FunctionSignature

logger = logging.getLogger(__name__)

_COMMENT = "#"
_SEPARATOR = "|"


class SignatureStorage:
    """Append-ordered table of function signatures.

    Names are not required to be unique; lookups return the first one loaded.
    """

    def __init__(self) -> None:
        self._signatures: list[FunctionSignature] = []

    def load(self, file: Path) -> int:
        """Load a ``name|args|return`` file. Returns the number of signatures added."""
        try:
            text = file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileUnreadableError(f"could not open {file}: {e}") from e

        count = 0
        for line in text.splitlines():
            signature = parse_signature_line(line)
            if signature is None:
                continue
            self._signatures.append(signature)
            count += 1
            logger.debug(
                "Function: %s %s(%s)",
                signature.return_spec,
                signature.name,
                signature.argument_spec,
            )
        return count

    def add(self, signature: FunctionSignature) -> None:
        self._signatures.append(signature)

    def find(self, name: str) -> FunctionSignature | None:
        """Get the first signature with the given name, or None."""
        for signature in self._signatures:
            if signature.name == name:
                return signature
        return None

    def __len__(self) -> int:
        return len(self._signatures)

    def clear(self) -> None:
        """Delete all signatures."""
        self._signatures.clear()


def parse_signature_line(line: str) -> FunctionSignature | None:
    """Parse one ``name[|args[|return]]`` line; blank and comment lines give None."""
    stripped = line.strip()
    if not stripped or stripped.startswith(_COMMENT):
        return None

    name, *rest = stripped.split(_SEPARATOR, 2)
    if not name:
        return None
    args = rest[0] if rest else ""
    ret = rest[1] if len(rest) > 1 else ""
    return FunctionSignature(name=name, argument_spec=args, return_spec=ret)
