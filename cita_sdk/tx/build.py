"""
cita_sdk.tx.build
=================

Builders for CITA transactions (contract creation / function call) plus the
helpers callers use to seed the two fields the builders only store: the nonce
salt and the validity-window bound.

The builders return the dataclass `cita_sdk.types.core.Transaction`. Feed it to
`cita_sdk.tx.sign` to obtain the hex envelope, then to `cita_sdk.tx.send` to
submit and confirm.

Design notes
------------
- `create_contract_transaction`: empty `to`, payload = init code.
- `create_function_call_transaction`: non-empty `to`, payload = ABI-encoded call
  (encoded by higher layers; this module treats it as opaque hex).
- The nonce is a uniqueness salt, not an account counter: `random_nonce()` draws
  a fresh 256-bit value per transaction.
- `valid_until_block` must come from a recent height plus a margin. The builder
  does not re-derive it; `valid_until_block_from(rpc)` is the usual source.

Examples
--------
    from cita_sdk.tx.build import create_contract_transaction, random_nonce, valid_until_block_from

    tx = create_contract_transaction(
        nonce=random_nonce(), quota=99999,
        valid_until_block=valid_until_block_from(rpc),
        version=0, chain_id=1, value="0", init_code="0x6060...",
    )
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Optional, Protocol, Union

from ..errors import InvalidField, TransportError
from ..types.core import (DEFAULT_VALID_UNTIL_MARGIN, INT32_MAX,
                          MAX_VALID_UNTIL_MARGIN, NONCE_BOUND, UINT64_MAX,
                          Address, ChainId, Transaction)
from ..utils.bytes import BytesLike, is_hex_digits, strip_hex_prefix, to_hex
from .value import ValueLike, normalize_value

log = logging.getLogger(__name__)

Payload = Union[str, BytesLike, None]


class _RpcClient(Protocol):
    def call(self, method: str, params: Optional[list] = None) -> Any: ...


# -----------------------------------------------------------------------------
# Field validation
# -----------------------------------------------------------------------------


def _require_int(name: str, value: Any, *, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidField(name, f"must be an integer, got {type(value).__name__}")
    if value < low or value > high:
        raise InvalidField(name, f"must be in [{low}, {high}], got {value}")
    return value


def _normalize_payload(name: str, data: Payload) -> str:
    if data is None:
        return "0x"
    if isinstance(data, (bytes, bytearray, memoryview)):
        return to_hex(data)
    if not isinstance(data, str):
        raise InvalidField(name, f"must be hex or bytes, got {type(data).__name__}")
    digits = strip_hex_prefix(data.strip())
    if not is_hex_digits(digits):
        raise InvalidField(name, "must be hex encoded")
    if len(digits) % 2:
        raise InvalidField(name, "hex payload must have an even number of digits")
    return "0x" + digits.lower()


def make_transaction(
    *,
    to: Address,
    nonce: int,
    quota: int,
    valid_until_block: int,
    version: int,
    chain_id: ChainId,
    value: ValueLike,
    data: Payload,
) -> Transaction:
    """
    Construct a `Transaction` after local validation. No signing happens here.
    """
    if not isinstance(to, str):
        raise InvalidField("to", f"must be a string, got {type(to).__name__}")
    return Transaction(
        to=to.strip(),
        nonce=_require_int("nonce", nonce, low=0, high=NONCE_BOUND - 1),
        quota=_require_int("quota", quota, low=1, high=UINT64_MAX),
        valid_until_block=_require_int(
            "valid_until_block", valid_until_block, low=1, high=UINT64_MAX
        ),
        version=_require_int("version", version, low=0, high=INT32_MAX),
        chain_id=_require_int("chain_id", chain_id, low=0, high=INT32_MAX),
        value=normalize_value(value),
        data=_normalize_payload("data", data),
    )


# -----------------------------------------------------------------------------
# Core builders
# -----------------------------------------------------------------------------


def create_contract_transaction(
    *,
    nonce: int,
    quota: int,
    valid_until_block: int,
    version: int,
    chain_id: ChainId,
    value: ValueLike,
    init_code: Payload,
) -> Transaction:
    """
    Build a contract-creation transaction (`to` is empty).
    """
    return make_transaction(
        to="",
        nonce=nonce,
        quota=quota,
        valid_until_block=valid_until_block,
        version=version,
        chain_id=chain_id,
        value=value,
        data=init_code,
    )


def create_function_call_transaction(
    *,
    to: Address,
    nonce: int,
    quota: int,
    valid_until_block: int,
    version: int,
    chain_id: ChainId,
    value: ValueLike,
    data: Payload,
) -> Transaction:
    """
    Build a contract-call transaction. `data` should already be ABI-encoded.
    """
    if not isinstance(to, str) or not to.strip():
        raise InvalidField("to", "function-call transactions need a recipient")
    return make_transaction(
        to=to,
        nonce=nonce,
        quota=quota,
        valid_until_block=valid_until_block,
        version=version,
        chain_id=chain_id,
        value=value,
        data=data,
    )


# -----------------------------------------------------------------------------
# Seeding helpers
# -----------------------------------------------------------------------------


def random_nonce() -> int:
    """Fresh 256-bit salt; two transactions from one sender never share it."""
    return secrets.randbelow(NONCE_BOUND)


def parse_quantity(raw: Any) -> int:
    """Node quantities come back as 0x-hex strings; ints are accepted too."""
    if isinstance(raw, bool):
        raise ValueError(f"not a quantity: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        s = raw.strip()
        if s.startswith(("0x", "0X")):
            return int(s[2:] or "0", 16)
        return int(s, 10)
    raise ValueError(f"not a quantity: {raw!r}")


def block_number(rpc: _RpcClient) -> int:
    """Current chain height via `blockNumber`."""
    res = rpc.call("blockNumber", [])
    try:
        return parse_quantity(res)
    except ValueError as e:
        raise TransportError(f"unexpected blockNumber result: {res!r}", method="blockNumber") from e


def valid_until_block_from(rpc: _RpcClient, margin: int = DEFAULT_VALID_UNTIL_MARGIN) -> int:
    """
    Seed `valid_until_block` from the current height plus `margin` blocks.
    """
    _require_int("margin", margin, low=1, high=MAX_VALID_UNTIL_MARGIN)
    height = block_number(rpc)
    bound = height + margin
    log.debug("valid_until_block=%d (height=%d margin=%d)", bound, height, margin)
    return bound


__all__ = [
    "UINT64_MAX",
    "INT32_MAX",
    "MAX_VALID_UNTIL_MARGIN",
    "DEFAULT_VALID_UNTIL_MARGIN",
    "make_transaction",
    "create_contract_transaction",
    "create_function_call_transaction",
    "random_nonce",
    "parse_quantity",
    "block_number",
    "valid_until_block_from",
]
