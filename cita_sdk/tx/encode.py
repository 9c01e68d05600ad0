"""
cita_sdk.tx.encode
==================

Deterministic protobuf encoding for CITA transactions.

This module provides:
- `serialize_raw(tx)` → canonical bytes of the unsigned body (what gets signed)
- `deserialize_raw(raw)` → the `Transaction` those bytes describe
- `serialize_envelope(raw, signature)` → `0x`-hex of the signed envelope, ready
  for `sendRawTransaction`
- `deserialize_envelope(hex_or_bytes)` → parsed `{transaction, raw, signature}`
- `transaction_hash(envelope)` → the hash the node will report for the envelope

Design notes
------------
* Field order is fixed by the schema in `cita_sdk.tx.proto`, and encoding uses
  protobuf's deterministic mode, so one logical transaction always yields the
  same bytes.
* Wire forms: `nonce` is lowercase hex without prefix, `value` is big-endian
  bytes (at most 32), `data` is the raw payload bytes.
* `serialize_envelope` re-parses the raw bytes it is given and requires them
  to re-encode identically before attaching the signature. The signature covers
  exactly the bytes embedded in the envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from google.protobuf.message import DecodeError

from ..errors import MalformedEnvelope, MalformedValue, SigningError
from ..types.core import Scheme, Signature, Transaction
from ..utils.bytes import BytesLike, from_hex, is_hex_digits, to_hex
from ..utils.hash import blake2b_cryptape, keccak256
from .proto import TransactionMessage, UnverifiedTransactionMessage
from .value import value_from_bytes, value_to_bytes

MAX_NONCE_HEX_DIGITS = 64


# -----------------------------------------------------------------------------
# Raw transaction (SignBytes)
# -----------------------------------------------------------------------------


def _to_message(tx: Transaction):
    try:
        return TransactionMessage(
            to=tx.to,
            nonce=tx.nonce_hex,
            quota=tx.quota,
            valid_until_block=tx.valid_until_block,
            data=from_hex(tx.data),
            value=value_to_bytes(tx.value),
            chain_id=tx.chain_id,
            version=tx.version,
        )
    except MalformedValue:
        raise
    except (TypeError, ValueError) as e:
        raise MalformedEnvelope(f"transaction does not fit the wire schema: {e}") from e


def serialize_raw(tx: Transaction) -> bytes:
    """
    Return the deterministic protobuf bytes of the unsigned transaction.

    This is the exact byte string the signers consume.
    """
    return _to_message(tx).SerializeToString(deterministic=True)


def _parse_transaction_message(raw: BytesLike):
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise MalformedEnvelope(f"raw transaction must be bytes, got {type(raw).__name__}")
    try:
        return TransactionMessage.FromString(bytes(raw))
    except DecodeError as e:
        raise MalformedEnvelope(f"cannot decode raw transaction: {e}") from e


def _from_message(msg) -> Transaction:
    nonce = msg.nonce
    if not nonce or len(nonce) > MAX_NONCE_HEX_DIGITS or not is_hex_digits(nonce):
        raise MalformedEnvelope(f"nonce must be 1..{MAX_NONCE_HEX_DIGITS} hex digits, got {nonce!r}")
    try:
        value = value_from_bytes(msg.value)
    except MalformedValue as e:
        raise MalformedEnvelope(str(e)) from e
    return Transaction(
        to=msg.to,
        nonce=int(nonce, 16),
        quota=msg.quota,
        valid_until_block=msg.valid_until_block,
        version=msg.version,
        chain_id=msg.chain_id,
        value=value,
        data=to_hex(msg.data),
    )


def deserialize_raw(raw: BytesLike) -> Transaction:
    """
    Parse raw transaction bytes back into a `Transaction`.

    Raises:
        MalformedEnvelope on truncated buffers or field-level violations.
    """
    return _from_message(_parse_transaction_message(raw))


# -----------------------------------------------------------------------------
# Signed envelope (wire format)
# -----------------------------------------------------------------------------


def serialize_envelope(raw: BytesLike, signature: Signature) -> str:
    """
    Wrap raw transaction bytes and a signature into the UnverifiedTransaction
    envelope and return it as `0x`-prefixed hex.
    """
    if not isinstance(signature, Signature):
        raise MalformedEnvelope(f"signature must be a Signature, got {type(signature).__name__}")
    tx_msg = _parse_transaction_message(raw)
    if tx_msg.SerializeToString(deterministic=True) != bytes(raw):
        raise MalformedEnvelope("raw transaction bytes are not in canonical form")

    utx = UnverifiedTransactionMessage(signature=signature.data, crypto=int(signature.scheme))
    utx.transaction.CopyFrom(tx_msg)
    return to_hex(utx.SerializeToString(deterministic=True))


@dataclass(frozen=True)
class DecodedEnvelope:
    transaction: Transaction
    raw: bytes
    signature: Signature


def _envelope_bytes(envelope: Union[str, BytesLike]) -> bytes:
    if isinstance(envelope, str):
        try:
            return from_hex(envelope.strip())
        except ValueError as e:
            raise MalformedEnvelope(f"envelope is not valid hex: {e}") from e
    if isinstance(envelope, (bytes, bytearray, memoryview)):
        return bytes(envelope)
    raise MalformedEnvelope(f"envelope must be hex or bytes, got {type(envelope).__name__}")


def deserialize_envelope(envelope: Union[str, BytesLike]) -> DecodedEnvelope:
    """
    Parse an envelope (hex string or bytes) into its transaction, the raw
    transaction bytes that were signed, and the tagged signature.
    """
    data = _envelope_bytes(envelope)
    try:
        utx = UnverifiedTransactionMessage.FromString(data)
    except DecodeError as e:
        raise MalformedEnvelope(f"cannot decode envelope: {e}") from e
    if not utx.HasField("transaction"):
        raise MalformedEnvelope("envelope carries no transaction")
    try:
        scheme = Scheme(utx.crypto)
    except ValueError as e:
        raise MalformedEnvelope(f"unknown crypto scheme tag: {utx.crypto}") from e
    try:
        signature = Signature(scheme=scheme, data=utx.signature)
    except SigningError as e:
        raise MalformedEnvelope(str(e)) from e
    raw = utx.transaction.SerializeToString(deterministic=True)
    return DecodedEnvelope(
        transaction=_from_message(utx.transaction),
        raw=raw,
        signature=signature,
    )


# -----------------------------------------------------------------------------
# Hash helpers
# -----------------------------------------------------------------------------


def transaction_hash(envelope: Union[str, BytesLike]) -> str:
    """
    Hash of a signed envelope as the node computes it: Keccak-256 on secp256k1
    chains, personalized BLAKE2b on Ed25519 chains. Returns 0x-hex.
    """
    data = _envelope_bytes(envelope)
    scheme = deserialize_envelope(data).signature.scheme
    if scheme is Scheme.ED25519_BLAKE2B:
        return to_hex(blake2b_cryptape(data))
    return to_hex(keccak256(data))


__all__ = [
    "serialize_raw",
    "deserialize_raw",
    "serialize_envelope",
    "deserialize_envelope",
    "DecodedEnvelope",
    "transaction_hash",
]
