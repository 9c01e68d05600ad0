from __future__ import annotations

"""
Core transaction types for the Python SDK.

- `Transaction`: the unsigned body, mutable while it is being built and frozen
  once it has been serialized for signing.
- `Scheme` / `Signature`: the tagged signature produced by wallet signers.
- `TransactionReceipt`: the node's execution record, parsed from JSON-RPC.

Nothing here performs network I/O; these are just types and converters.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, TypedDict

from ..errors import InvalidField, SigningError

# --- Common aliases ----------------------------------------------------------

Address = str  # 0x-prefixed 20-byte hex, or "" for contract creation
Hash = str  # 0x-prefixed hex string
Hex = str  # 0x-prefixed hex string
ChainId = int

# --- Field bounds ------------------------------------------------------------

UINT64_MAX = (1 << 64) - 1
INT32_MAX = (1 << 31) - 1
NONCE_BOUND = 1 << 256

# CITA nodes reject bounds more than this many blocks above the current height.
MAX_VALID_UNTIL_MARGIN = 100
DEFAULT_VALID_UNTIL_MARGIN = 80


# --- Signature schemes -------------------------------------------------------


class Scheme(enum.IntEnum):
    """
    Signing scheme tag. The integer value is the envelope's `crypto` field.
    """

    ECDSA_SECP256K1 = 0
    ED25519_BLAKE2B = 1

    @property
    def signature_length(self) -> int:
        return SIGNATURE_LENGTHS[self]


ECDSA_SIGNATURE_LENGTH = 65  # r(32) || s(32) || recovery id(1)
ED25519_SIGNATURE_LENGTH = 64
ED25519_PUBLIC_KEY_LENGTH = 32

SIGNATURE_LENGTHS: Dict[Scheme, int] = {
    Scheme.ECDSA_SECP256K1: ECDSA_SIGNATURE_LENGTH,
    Scheme.ED25519_BLAKE2B: ED25519_SIGNATURE_LENGTH + ED25519_PUBLIC_KEY_LENGTH,
}


@dataclass(slots=True, frozen=True)
class Signature:
    scheme: Scheme
    data: bytes

    def __post_init__(self) -> None:
        try:
            scheme = Scheme(self.scheme)
        except ValueError as e:
            raise SigningError(f"unknown signature scheme: {self.scheme!r}") from e
        object.__setattr__(self, "scheme", scheme)
        object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) != scheme.signature_length:
            raise SigningError(
                f"{scheme.name} signature must be {scheme.signature_length} bytes, "
                f"got {len(self.data)}"
            )

    @property
    def embedded_public_key(self) -> Optional[bytes]:
        """Signer public key carried inside Ed25519 signatures; None for ECDSA."""
        if self.scheme is Scheme.ED25519_BLAKE2B:
            return self.data[ED25519_SIGNATURE_LENGTH:]
        return None

    def hex(self) -> Hex:
        return "0x" + self.data.hex()


# --- Transaction -------------------------------------------------------------


@dataclass(slots=True)
class Transaction:
    """
    Unsigned CITA transaction body.

    `value` holds canonical lowercase hex digits without prefix (see
    `cita_sdk.tx.value`); `data` always carries a `0x` prefix. Use the builders
    in `cita_sdk.tx.build` rather than constructing this directly.
    """

    to: Address
    nonce: int
    quota: int
    valid_until_block: int
    version: int
    chain_id: ChainId
    value: str
    data: Hex
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise InvalidField(name, "transaction is frozen after serialization for signing")
        object.__setattr__(self, name, value)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def is_contract_creation(self) -> bool:
        return self.to == ""

    def freeze(self) -> "Transaction":
        object.__setattr__(self, "_frozen", True)
        return self

    @property
    def nonce_hex(self) -> str:
        """Wire form of the nonce: lowercase hex, no prefix, no leading zeros."""
        return format(self.nonce, "x")

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {
            "to": self.to,
            "nonce": self.nonce_hex,
            "quota": self.quota,
            "validUntilBlock": self.valid_until_block,
            "version": self.version,
            "chainId": self.chain_id,
            "value": self.value,
            "data": self.data,
        }


# --- Receipt -----------------------------------------------------------------


class LogDict(TypedDict, total=False):
    address: Address
    topics: List[Hash]
    data: Hex
    blockHash: Hash
    blockNumber: Hex
    transactionHash: Hash
    transactionIndex: Hex
    logIndex: Hex


class ReceiptDict(TypedDict, total=False):
    transactionHash: Hash
    transactionIndex: Hex
    blockHash: Hash
    blockNumber: Hex
    cumulativeQuotaUsed: Hex
    quotaUsed: Hex
    contractAddress: Optional[Address]
    logs: List[LogDict]
    root: Optional[Hash]
    logsBloom: Hex
    errorMessage: Optional[str]


def _opt_int(v: Any) -> Optional[int]:
    """Quantities arrive as 0x-hex strings or plain ints."""
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        return int(v)
    if isinstance(v, int):
        return v
    s = str(v).strip()
    if s.startswith(("0x", "0X")):
        return int(s, 16) if len(s) > 2 else 0
    return int(s, 10)


def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


@dataclass(slots=True, frozen=True)
class TransactionReceipt:
    transaction_hash: Optional[Hash]
    contract_address: Optional[Address] = None
    error_message: Optional[str] = None
    block_number: Optional[int] = None
    block_hash: Optional[Hash] = None
    quota_used: Optional[int] = None
    logs: Sequence[Mapping[str, Any]] = field(default_factory=tuple)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_failure(self) -> bool:
        """An error message marks terminal failure, whatever else is present."""
        return bool(self.error_message)

    @staticmethod
    def from_rpc_dict(d: ReceiptDict) -> "TransactionReceipt":
        quota = d.get("quotaUsed", d.get("gasUsed"))
        return TransactionReceipt(
            transaction_hash=_opt_str(d.get("transactionHash")),
            contract_address=_opt_str(d.get("contractAddress")),
            error_message=_opt_str(d.get("errorMessage")),
            block_number=_opt_int(d.get("blockNumber")),
            block_hash=_opt_str(d.get("blockHash")),
            quota_used=_opt_int(quota),
            logs=tuple(d.get("logs") or ()),
            raw=dict(d),
        )


__all__ = [
    # aliases
    "Address",
    "Hash",
    "Hex",
    "ChainId",
    # bounds
    "UINT64_MAX",
    "INT32_MAX",
    "NONCE_BOUND",
    "MAX_VALID_UNTIL_MARGIN",
    "DEFAULT_VALID_UNTIL_MARGIN",
    # signatures
    "Scheme",
    "Signature",
    "SIGNATURE_LENGTHS",
    "ECDSA_SIGNATURE_LENGTH",
    "ED25519_SIGNATURE_LENGTH",
    "ED25519_PUBLIC_KEY_LENGTH",
    # rpc dicts
    "LogDict",
    "ReceiptDict",
    # dataclasses
    "Transaction",
    "TransactionReceipt",
]
