"""
cita_sdk.tx.sign
================

Turn a built `Transaction` into the hex envelope `sendRawTransaction` expects.

Signing runs in three steps:
1. serialize the raw transaction (the transaction is frozen from here on)
2. sign the raw bytes under the requested scheme
3. wrap raw bytes, signature and scheme tag into the envelope

Any failure raises before an envelope exists, so a partially signed
transaction can never be submitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..types.core import Scheme, Signature, Transaction
from ..wallet.signer import KeyMaterial, Signer, signer_for
from .encode import serialize_envelope, serialize_raw

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedTransaction:
    transaction: Transaction
    raw: bytes
    signature: Signature
    envelope: str

    @property
    def scheme(self) -> Scheme:
        return self.signature.scheme


def sign_transaction_with(tx: Transaction, signer: Signer) -> SignedTransaction:
    """Sign with an already constructed signer."""
    raw = serialize_raw(tx)
    tx.freeze()
    signature = signer.sign(raw)
    envelope = serialize_envelope(raw, signature)
    log.debug("signed %s transaction: raw=%d bytes envelope=%d chars",
              signature.scheme.name, len(raw), len(envelope))
    return SignedTransaction(transaction=tx, raw=raw, signature=signature, envelope=envelope)


def sign_transaction(tx: Transaction, private_key: KeyMaterial,
                     scheme: Scheme = Scheme.ECDSA_SECP256K1) -> str:
    """
    Sign `tx` with `private_key` under `scheme` and return the `0x`-hex envelope.
    """
    return sign_transaction_with(tx, signer_for(scheme, private_key)).envelope


__all__ = ["SignedTransaction", "sign_transaction", "sign_transaction_with"]
