"""
cita_sdk.tx.value
=================

Normalization of monetary amounts.

Callers hand amounts over as strings, either `0x`-prefixed hex or base-10
literals ("0xFF" and "255" are the same amount). The transaction body stores the
canonical form: lowercase hex digits, no prefix, no leading zeros ("0" for
zero). On the wire the amount is a big-endian byte string of at most 32 bytes.
"""

from __future__ import annotations

import re
from typing import Union

from ..errors import MalformedValue
from ..utils.bytes import BytesLike, has_hex_prefix, is_hex_digits

MAX_VALUE_BYTES = 32
MAX_VALUE = (1 << (8 * MAX_VALUE_BYTES)) - 1

_DECIMAL_RE = re.compile(r"[0-9]+")
_MAX_DECIMAL_DIGITS = len(str(MAX_VALUE))

ValueLike = Union[str, int]


def parse_value(value: ValueLike) -> int:
    """
    Parse a hex or decimal amount into an integer in [0, 2**256).

    Raises:
        MalformedValue: not a string/int, not valid hex or decimal, negative,
        or wider than 256 bits.
    """
    if isinstance(value, bool):
        raise MalformedValue(f"value must be a string or int, got {value!r}")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise MalformedValue("value must not be empty")
        if has_hex_prefix(s):
            digits = s[2:]
            if not digits or not is_hex_digits(digits):
                raise MalformedValue(f"invalid hex value: {value!r}")
            n = int(digits, 16)
        elif _DECIMAL_RE.fullmatch(s):
            s = s.lstrip("0") or "0"
            if len(s) > _MAX_DECIMAL_DIGITS:
                raise MalformedValue("value exceeds 256 bits")
            n = int(s, 10)
        else:
            raise MalformedValue(f"value is neither hex nor decimal: {value!r}")
    else:
        raise MalformedValue(f"value must be a string or int, got {type(value).__name__}")

    if n < 0:
        raise MalformedValue(f"value must be non-negative, got {n}")
    if n > MAX_VALUE:
        raise MalformedValue("value exceeds 256 bits")
    return n


def normalize_value(value: ValueLike) -> str:
    """Return the canonical lowercase hex digits (no `0x`) for an amount."""
    return format(parse_value(value), "x")


def value_to_bytes(canonical: str) -> bytes:
    """
    Canonical hex digits -> minimal big-endian bytes. Zero encodes as one
    zero byte.
    """
    n = parse_value("0x" + canonical)
    length = max(1, (n.bit_length() + 7) // 8)
    return n.to_bytes(length, "big")


def value_from_bytes(raw: BytesLike) -> str:
    """Big-endian wire bytes -> canonical hex digits. Empty decodes as zero."""
    b = bytes(raw)
    if len(b) > MAX_VALUE_BYTES:
        raise MalformedValue(f"value field is {len(b)} bytes, max {MAX_VALUE_BYTES}")
    return format(int.from_bytes(b, "big"), "x")


__all__ = [
    "MAX_VALUE",
    "MAX_VALUE_BYTES",
    "ValueLike",
    "parse_value",
    "normalize_value",
    "value_to_bytes",
    "value_from_bytes",
]
