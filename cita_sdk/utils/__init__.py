"""
Utility helpers for the Python SDK.

Re-exports:
- bytes: hex helpers
- hash: Keccak-256 and personalized BLAKE2b wrappers
"""

from .bytes import (add_hex_prefix, ensure_bytes, from_hex, strip_hex_prefix,
                    to_hex)
from .hash import blake2b_cryptape, keccak256, keccak256_hex

__all__ = [
    # bytes
    "to_hex",
    "from_hex",
    "ensure_bytes",
    "add_hex_prefix",
    "strip_hex_prefix",
    # hash
    "keccak256",
    "keccak256_hex",
    "blake2b_cryptape",
]
