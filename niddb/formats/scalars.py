"""Scalar conversions shared by the format parsers."""

from __future__ import annotations

U32_MAX = 0xFFFFFFFF

_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})


def parse_u32(text: str) -> int:
    """Parse a decimal or 0x-prefixed hexadecimal 32-bit value."""
    value = text.strip()
    if value[:2].lower() == "0x":
        number = int(value[2:], 16)
    else:
        number = int(value, 10)
    return _check_range(number, text)


def parse_hex_u32(text: str) -> int:
    """Parse a hexadecimal 32-bit value, with or without the 0x prefix."""
    value = text.strip()
    if value[:2].lower() == "0x":
        value = value[2:]
    return _check_range(int(value, 16), text)


def parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean: {text!r}")


def _check_range(number: int, text: str) -> int:
    if not 0 <= number <= U32_MAX:
        raise ValueError(f"value out of 32-bit range: {text!r}")
    return number
