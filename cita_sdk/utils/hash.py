"""
Hash primitives used by the signing schemes and address derivation.

- Keccak-256 (Ethereum padding) via pycryptodome. CPython's hashlib only ships
  NIST SHA3, whose padding differs.
- BLAKE2b-256 personalized with the CITA tag, via hashlib.
"""

from __future__ import annotations

import hashlib

from Crypto.Hash import keccak as _keccak

from .bytes import BytesLike, ensure_bytes, to_hex

# BLAKE2b personalization used by CITA's Ed25519 scheme (exactly 16 bytes).
CRYPTAPE_PERSON = b"CryptapeCryptape"


def keccak256(data: BytesLike) -> bytes:
    """Return Keccak-256 digest of *data* (bytes)."""
    h = _keccak.new(digest_bits=256)
    h.update(ensure_bytes(data))
    return h.digest()


def keccak256_hex(data: BytesLike, *, prefix: bool = True) -> str:
    """Return hex string of Keccak-256 digest (0x-prefixed by default)."""
    return to_hex(keccak256(data), prefix=prefix)


def blake2b_cryptape(data: BytesLike, *, digest_size: int = 32) -> bytes:
    """
    BLAKE2b with the 'CryptapeCryptape' personalization, no key and no salt.
    """
    return hashlib.blake2b(
        ensure_bytes(data), digest_size=digest_size, person=CRYPTAPE_PERSON
    ).digest()


__all__ = [
    "CRYPTAPE_PERSON",
    "keccak256",
    "keccak256_hex",
    "blake2b_cryptape",
]
