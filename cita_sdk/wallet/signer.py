"""
cita_sdk.wallet.signer
======================

Transaction signers for the two CITA signature schemes.

- `EcdsaSigner`: secp256k1 (libsecp256k1 via `coincurve`). The signature is a
  65-byte recoverable signature `r || s || recovery_id` over
  Keccak-256(raw transaction bytes), so the node recovers the sender's key.
- `Ed25519Blake2bSigner`: Ed25519 (via `cryptography`) over
  BLAKE2b-256(raw, person="CryptapeCryptape"). The output is
  `signature(64) || public_key(32)`; the public key rides inside the envelope.

Scheme selection is always explicit: `signer_for(scheme, key)` and
`sign(raw, key, scheme)` dispatch on the `Scheme` tag and never guess from the
shape of the key material.

Key material may be given as bytes or as a hex string (optional `0x`).
Malformed keys raise `SigningError`. Keys are never logged.
"""

from __future__ import annotations

import abc
import logging
from typing import Optional, Tuple, Union

import coincurve
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey, Ed25519PublicKey)
from cryptography.hazmat.primitives.serialization import (Encoding,
                                                          PublicFormat)

from ..errors import SigningError
from ..types.core import (ED25519_PUBLIC_KEY_LENGTH, ED25519_SIGNATURE_LENGTH,
                          Address, Scheme, Signature)
from ..utils.bytes import BytesLike, from_hex, to_hex
from ..utils.hash import blake2b_cryptape, keccak256

log = logging.getLogger(__name__)

KeyMaterial = Union[str, BytesLike]

SECP256K1_PRIVATE_KEY_LENGTH = 32
ED25519_SEED_LENGTH = 32

__all__ = [
    "KeyMaterial",
    "Signer",
    "EcdsaSigner",
    "Ed25519Blake2bSigner",
    "signer_for",
    "sign",
    "recover_public_key",
    "verify_signature",
    "public_key_to_address",
]


# --- Helpers -----------------------------------------------------------------


def _key_bytes(key: KeyMaterial, allowed: Tuple[int, ...], what: str) -> bytes:
    if isinstance(key, str):
        try:
            raw = from_hex(key.strip())
        except ValueError as e:
            raise SigningError(f"{what} is not valid hex") from e
    elif isinstance(key, (bytes, bytearray, memoryview)):
        raw = bytes(key)
    else:
        raise SigningError(f"{what} must be bytes or hex, got {type(key).__name__}")
    if len(raw) not in allowed:
        raise SigningError(f"{what} must be {' or '.join(map(str, allowed))} bytes, got {len(raw)}")
    return raw


def _check_scheme(signature: Signature, expected: Scheme) -> None:
    if signature.scheme is not expected:
        raise SigningError(f"expected a {expected.name} signature, got {signature.scheme.name}")


def public_key_to_address(public_key: bytes, scheme: Scheme) -> Address:
    """
    Derive the 20-byte account address for a public key.

    secp256k1: last 20 bytes of Keccak-256 over the 64-byte uncompressed key.
    Ed25519:   last 20 bytes of personalized BLAKE2b over the 32-byte key.
    """
    scheme = Scheme(scheme)
    if scheme is Scheme.ECDSA_SECP256K1:
        try:
            uncompressed = coincurve.PublicKey(bytes(public_key)).format(compressed=False)
        except ValueError as e:
            raise SigningError("invalid secp256k1 public key") from e
        return to_hex(keccak256(uncompressed[1:])[-20:])
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise SigningError(f"Ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes")
    return to_hex(blake2b_cryptape(public_key)[-20:])


# --- Signers -----------------------------------------------------------------


class Signer(abc.ABC):
    """Common interface of the scheme-specific signers."""

    scheme: Scheme

    @property
    @abc.abstractmethod
    def public_key(self) -> bytes:
        """Raw public key bytes for the scheme."""

    @property
    def address(self) -> Address:
        return public_key_to_address(self.public_key, self.scheme)

    @abc.abstractmethod
    def sign(self, raw: bytes) -> Signature:
        """Sign raw transaction bytes and return the tagged signature."""

    @abc.abstractmethod
    def verify(self, raw: bytes, signature: Signature) -> bool:
        """Check a signature over raw transaction bytes against this key."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address})"


class EcdsaSigner(Signer):
    """secp256k1 recoverable ECDSA over Keccak-256 of the raw bytes."""

    scheme = Scheme.ECDSA_SECP256K1

    def __init__(self, private_key: KeyMaterial) -> None:
        secret = _key_bytes(private_key, (SECP256K1_PRIVATE_KEY_LENGTH,), "secp256k1 private key")
        try:
            self._sk = coincurve.PrivateKey(secret)
        except ValueError as e:
            raise SigningError("secp256k1 private key is out of range") from e
        self._pk = self._sk.public_key.format(compressed=False)

    @property
    def public_key(self) -> bytes:
        """Uncompressed public key (65 bytes, 0x04 prefix)."""
        return self._pk

    def sign(self, raw: bytes) -> Signature:
        sig = self._sk.sign_recoverable(bytes(raw), hasher=keccak256)
        log.debug("secp256k1 signature over %d raw bytes", len(raw))
        return Signature(scheme=self.scheme, data=sig)

    def verify(self, raw: bytes, signature: Signature) -> bool:
        return verify_signature(raw, signature, self._pk)


class Ed25519Blake2bSigner(Signer):
    """Ed25519 over personalized BLAKE2b-256 of the raw bytes."""

    scheme = Scheme.ED25519_BLAKE2B

    def __init__(self, private_key: KeyMaterial) -> None:
        # 32-byte seed, or libsodium's 64-byte seed || public key form
        secret = _key_bytes(
            private_key,
            (ED25519_SEED_LENGTH, ED25519_SEED_LENGTH + ED25519_PUBLIC_KEY_LENGTH),
            "Ed25519 private key",
        )
        self._sk = Ed25519PrivateKey.from_private_bytes(secret[:ED25519_SEED_LENGTH])
        self._pk = self._sk.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        if len(secret) > ED25519_SEED_LENGTH and secret[ED25519_SEED_LENGTH:] != self._pk:
            raise SigningError("Ed25519 secret key: embedded public key does not match the seed")

    @property
    def public_key(self) -> bytes:
        return self._pk

    def sign(self, raw: bytes) -> Signature:
        digest = blake2b_cryptape(raw)
        sig = self._sk.sign(digest)
        log.debug("ed25519 signature over %d raw bytes", len(raw))
        return Signature(scheme=self.scheme, data=sig + self._pk)

    def verify(self, raw: bytes, signature: Signature) -> bool:
        return verify_signature(raw, signature, self._pk)


_SIGNERS = {
    Scheme.ECDSA_SECP256K1: EcdsaSigner,
    Scheme.ED25519_BLAKE2B: Ed25519Blake2bSigner,
}


def signer_for(scheme: Scheme, private_key: KeyMaterial) -> Signer:
    """Build the signer for an explicit scheme tag."""
    try:
        cls = _SIGNERS[Scheme(scheme)]
    except ValueError as e:
        raise SigningError(f"unknown signature scheme: {scheme!r}") from e
    return cls(private_key)


def sign(raw: bytes, private_key: KeyMaterial, scheme: Scheme) -> Signature:
    """Sign raw transaction bytes with `private_key` under `scheme`."""
    return signer_for(scheme, private_key).sign(raw)


# --- Verification ------------------------------------------------------------


def recover_public_key(raw: bytes, signature: Signature) -> bytes:
    """
    Recover the uncompressed secp256k1 public key from a recoverable signature.
    """
    _check_scheme(signature, Scheme.ECDSA_SECP256K1)
    try:
        pub = coincurve.PublicKey.from_signature_and_message(
            signature.data, bytes(raw), hasher=keccak256
        )
    except ValueError as e:
        raise SigningError(f"cannot recover public key: {e}") from e
    return pub.format(compressed=False)


def verify_signature(raw: bytes, signature: Signature, public_key: Optional[bytes] = None) -> bool:
    """
    Verify a tagged signature over raw transaction bytes.

    secp256k1: `public_key` (compressed or uncompressed) is required; the key
    recovered from the signature must match it.
    Ed25519:   the embedded key is used; if `public_key` is given it must match
    the embedded one.
    """
    if signature.scheme is Scheme.ECDSA_SECP256K1:
        if public_key is None:
            raise SigningError("secp256k1 verification needs the expected public key")
        try:
            expected = coincurve.PublicKey(bytes(public_key)).format(compressed=False)
        except ValueError as e:
            raise SigningError("invalid secp256k1 public key") from e
        try:
            return recover_public_key(raw, signature) == expected
        except SigningError:
            return False

    sig = signature.data[:ED25519_SIGNATURE_LENGTH]
    embedded = signature.data[ED25519_SIGNATURE_LENGTH:]
    if public_key is not None and bytes(public_key) != embedded:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(embedded).verify(sig, blake2b_cryptape(raw))
    except (InvalidSignature, ValueError):
        return False
    return True
