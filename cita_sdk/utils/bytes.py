from __future__ import annotations

import re
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]*")


def has_hex_prefix(s: str) -> bool:
    return s.startswith(("0x", "0X"))


def strip_hex_prefix(s: str) -> str:
    """Drop a leading '0x'/'0X' if present."""
    return s[2:] if has_hex_prefix(s) else s


def add_hex_prefix(s: str) -> str:
    """Ensure a '0x' prefix (an existing '0X' is normalized to '0x')."""
    return "0x" + strip_hex_prefix(s)


def is_hex_digits(s: str) -> bool:
    """True for a (possibly empty) run of hex digits with no prefix."""
    return _HEX_DIGITS_RE.fullmatch(s) is not None


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """Bytes-like values pass through as `bytes`; strings are decoded as hex."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return from_hex(data)
    raise TypeError(f"expected bytes or hex, got {type(data).__name__}")


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """Lowercase hex of `b`, `0x`-prefixed unless `prefix=False`."""
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Decode hex (either case, `0x` optional). Odd digit counts and non-hex
    characters raise ValueError.
    """
    if not isinstance(s, str):
        raise TypeError(f"expected a hex string, got {type(s).__name__}")
    s = strip_hex_prefix(s)
    if len(s) % 2 != 0:
        raise ValueError(f"odd number of hex digits: {len(s)}")
    if not is_hex_digits(s):
        raise ValueError(f"invalid hex string: {s[:16]!r}")
    return bytes.fromhex(s)


__all__ = [
    "BytesLike",
    "has_hex_prefix",
    "strip_hex_prefix",
    "add_hex_prefix",
    "is_hex_digits",
    "ensure_bytes",
    "to_hex",
    "from_hex",
]
