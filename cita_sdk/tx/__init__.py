"""
cita_sdk.tx
===========

Transaction lifecycle helpers: value codec, build, encode, sign, send.

Submodules
----------
- value   : Decimal / hex value literals to canonical hex and wire bytes.
- build   : Builders for contract-creation / function-call transactions.
- proto   : Protobuf schema of the raw transaction and signed envelope.
- encode  : Deterministic (de)serialization of raw bytes and envelopes.
- sign    : Raw bytes -> signature -> hex envelope.
- send    : JSON-RPC submission and receipt confirmation.
- pipeline: Thread-pool fan-out of submit / confirm.

Typical usage
-------------
    from cita_sdk.tx import build, sign, send

    tx = build.create_contract_transaction(
        nonce=build.random_nonce(), quota=99999,
        valid_until_block=build.valid_until_block_from(rpc),
        version=0, chain_id=1, value="0", init_code=bytecode,
    )
    envelope = sign.sign_transaction(tx, private_key)
    result = send.submit_and_wait(rpc, envelope)
    address = result.unwrap().contract_address
"""

from __future__ import annotations

# Re-export stable submodule namespaces
from . import build as build
from . import encode as encode
from . import pipeline as pipeline
from . import send as send
from . import sign as sign
from . import value as value

__all__ = ["build", "encode", "pipeline", "send", "sign", "value"]
