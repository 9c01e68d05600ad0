"""
Typed error classes for the Python SDK.

These are raised by tx/value, tx/build, tx/encode, wallet/signer, rpc/http and
tx/send so callers can catch specific failure modes while still being able to
catch the base `CitaSdkError`.

Construction, serialization and signing errors abort the pipeline for a
transaction before any envelope exists. Transport and remote errors surface
unchanged from the RPC layer; nothing here retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

__all__ = [
    "CitaSdkError",
    "MalformedValue",
    "InvalidField",
    "SigningError",
    "MalformedEnvelope",
    "RpcError",
    "RemoteProtocolError",
    "TransportError",
    "TxError",
    "TxFailedError",
    "TxTimeoutError",
    "TxCancelledError",
    "JsonRpcCode",
    "from_jsonrpc_error",
]


class CitaSdkError(Exception):
    """Base class for all SDK errors."""


class MalformedValue(CitaSdkError, ValueError):
    """A monetary amount is neither valid hex nor valid decimal, or exceeds 256 bits."""


@dataclass(slots=True)
class InvalidField(CitaSdkError, ValueError):
    """A transaction field violates a builder precondition."""

    field: str
    reason: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"invalid field {self.field!r}: {self.reason}"


class SigningError(CitaSdkError):
    """Key material is malformed or the signature primitive rejected it."""


class MalformedEnvelope(CitaSdkError, ValueError):
    """Raw transaction or envelope bytes violate the wire schema."""


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0 standard codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000

    # Codes used by CITA nodes for rejected transactions
    TX_POOL_REJECTED = -32006
    TX_INVALID = -32003


class RpcError(CitaSdkError):
    """Base for anything that went wrong while talking to the node."""


@dataclass(slots=True)
class RemoteProtocolError(RpcError):
    """Raised when a JSON-RPC call returns an error object."""

    code: int
    message: str
    data: Optional[Any] = None
    method: Optional[str] = None
    request_id: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"node error in {self.method or '?'}: [{self.code}] {self.message}"]
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(slots=True)
class TransportError(RpcError):
    """
    Connection refused, timeout, HTTP failure, or a body that is not a
    well-formed JSON-RPC response.
    """

    message: str
    method: Optional[str] = None
    request_id: Optional[Any] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"transport[{self.method or '-'}]: {self.message}"]
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        return " ".join(parts)


@dataclass(slots=True)
class TxError(CitaSdkError):
    """
    Raised for transaction-level outcomes: an unusable submission result, or a
    confirmation that ended FAILED / TIMED_OUT / CANCELLED when the caller asked
    for an exception via `ConfirmationResult.unwrap()`.

    Fields:
      - tx_hash: hex hash if known
      - receipt: raw receipt dict when the node produced one
    """

    message: str
    tx_hash: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        suffix = f" tx={self.tx_hash}" if self.tx_hash else ""
        return f"{type(self).__name__}{suffix}: {self.message}"


class TxFailedError(TxError):
    """The chain produced a receipt carrying an error message."""


class TxTimeoutError(TxError):
    """No receipt appeared within the attempt budget."""


class TxCancelledError(TxError):
    """The caller cancelled confirmation before a terminal state."""


def from_jsonrpc_error(
    err_obj: Any,
    *,
    method: Optional[str] = None,
    request_id: Optional[Any] = None,
) -> RemoteProtocolError:
    """
    Convert a JSON-RPC error object into RemoteProtocolError.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}
    """
    if not isinstance(err_obj, dict):
        return RemoteProtocolError(
            code=int(JsonRpcCode.SERVER_ERROR),
            message=str(err_obj),
            method=method,
            request_id=request_id,
        )
    try:
        code = int(err_obj.get("code", JsonRpcCode.SERVER_ERROR))
    except (TypeError, ValueError):
        code = int(JsonRpcCode.SERVER_ERROR)
    return RemoteProtocolError(
        code=code,
        message=str(err_obj.get("message", "Unknown JSON-RPC error")),
        data=err_obj.get("data"),
        method=method,
        request_id=request_id,
    )
