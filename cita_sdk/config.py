"""
SDK configuration: RPC endpoint, chain identity, receipt polling and timeouts.

- Loads sane defaults and supports overrides via environment variables (CITA_*).
- Provides helpers for building HTTP headers and an `RpcClient`.
- There is no module-level default instance; build one with `SDKConfig()` or
  `SDKConfig.from_env()` and pass it where it is needed.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

from .types.core import DEFAULT_VALID_UNTIL_MARGIN, INT32_MAX, MAX_VALID_UNTIL_MARGIN
from .version import user_agent

if TYPE_CHECKING:  # pragma: no cover
    from .rpc.http import RpcClient

_DEFAULT_RPC = "http://127.0.0.1:1337"
_DEFAULT_USER_AGENT = user_agent()

_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")


def _parse_int(val: Any, default: int) -> int:
    """
    Accepts int, decimal str, or 0x-hex str and returns int.
    """
    if val is None or val == "":
        return int(default)
    if isinstance(val, int):
        return val
    s = str(val).strip()
    if _HEX_RE.match(s):
        return int(s, 16)
    return int(s, 10)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


@dataclass(slots=True, frozen=True)
class ReceiptPolicy:
    """
    How long to wait for a receipt: `poll_interval` seconds between polls
    and `max_attempts` polls in total. The poll that reaches
    `max_attempts` without a receipt ends in TIMED_OUT, so `max_attempts=1`
    means exactly one `getTransactionReceipt` query. The defaults give a node
    roughly four block intervals.
    """

    poll_interval: float = 3.0
    max_attempts: int = 4

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ValueError("max_attempts must be an integer")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.poll_interval < 0:
            raise ValueError(f"poll_interval must be >= 0, got {self.poll_interval}")


@dataclass(slots=True)
class SDKConfig:
    # Core
    rpc_url: str = field(default_factory=lambda: _DEFAULT_RPC)
    chain_id: int = 1
    version: int = 0
    # HTTP behavior
    request_timeout: float = 10.0
    # Confirmation
    receipt: ReceiptPolicy = field(default_factory=ReceiptPolicy)
    valid_until_margin: int = DEFAULT_VALID_UNTIL_MARGIN
    # Headers / identity
    user_agent: str = field(default_factory=lambda: _DEFAULT_USER_AGENT)

    def __post_init__(self) -> None:
        _ensure_scheme(self.rpc_url, ("http", "https"))
        if not 0 <= int(self.chain_id) <= INT32_MAX:
            raise ValueError(f"chain_id must fit a non-negative int32, got {self.chain_id}")
        if not 0 <= int(self.version) <= INT32_MAX:
            raise ValueError(f"version must fit a non-negative int32, got {self.version}")
        if not 1 <= int(self.valid_until_margin) <= MAX_VALID_UNTIL_MARGIN:
            raise ValueError(
                f"valid_until_margin must be in [1, {MAX_VALID_UNTIL_MARGIN}], "
                f"got {self.valid_until_margin}"
            )

    @classmethod
    def from_env(cls, prefix: str = "CITA_") -> "SDKConfig":
        """
        Create config from environment variables:

        CITA_RPC_URL            (http/https)
        CITA_CHAIN_ID           (int or 0x-hex)
        CITA_VERSION            (int)
        CITA_TIMEOUT            (float seconds, HTTP)
        CITA_POLL_INTERVAL      (float seconds between receipt polls)
        CITA_MAX_ATTEMPTS       (int receipt polls before giving up)
        CITA_VALID_UNTIL_MARGIN (int blocks above the current height)
        CITA_USER_AGENT         (str)
        """
        rpc = _env(f"{prefix}RPC_URL", _DEFAULT_RPC)
        chain_id = _parse_int(_env(f"{prefix}CHAIN_ID", None), 1)
        version = _parse_int(_env(f"{prefix}VERSION", None), 0)
        timeout = float(_env(f"{prefix}TIMEOUT", "10.0"))
        interval = float(_env(f"{prefix}POLL_INTERVAL", "3.0"))
        attempts = int(_env(f"{prefix}MAX_ATTEMPTS", "4"))
        margin = int(_env(f"{prefix}VALID_UNTIL_MARGIN", str(DEFAULT_VALID_UNTIL_MARGIN)))
        ua = _env(f"{prefix}USER_AGENT", _DEFAULT_USER_AGENT)

        return cls(
            rpc_url=rpc or _DEFAULT_RPC,
            chain_id=chain_id,
            version=version,
            request_timeout=timeout,
            receipt=ReceiptPolicy(poll_interval=interval, max_attempts=attempts),
            valid_until_margin=margin,
            user_agent=ua or _DEFAULT_USER_AGENT,
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["SDKConfig"] = None, **overrides: Any
    ) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored. `poll_interval` / `max_attempts` override the
        receipt policy fields individually.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        if "chain_id" in overrides:
            data["chain_id"] = _parse_int(overrides["chain_id"], base.chain_id)
        receipt = overrides.get("receipt", base.receipt)
        if "poll_interval" in overrides or "max_attempts" in overrides:
            receipt = ReceiptPolicy(
                poll_interval=float(overrides.get("poll_interval", receipt.poll_interval)),
                max_attempts=int(overrides.get("max_attempts", receipt.max_attempts)),
            )
        data.pop("poll_interval")
        data.pop("max_attempts")
        return cls(receipt=receipt, **data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def rpc_client(self) -> "RpcClient":
        """A fresh `RpcClient` for this endpoint; callers own (and close) it."""
        from .rpc.http import RpcClient

        return RpcClient(self.rpc_url, timeout=self.request_timeout, headers=self.http_headers())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "chain_id": int(self.chain_id),
            "version": int(self.version),
            "request_timeout": float(self.request_timeout),
            "poll_interval": float(self.receipt.poll_interval),
            "max_attempts": int(self.receipt.max_attempts),
            "valid_until_margin": int(self.valid_until_margin),
            "user_agent": self.user_agent,
        }


__all__ = ["ReceiptPolicy", "SDKConfig"]
