"""
cita_sdk.tx.send
================

Submit signed envelopes to a node via JSON-RPC and confirm them by polling
for receipts.

Primary entry points
--------------------
- submit_raw(rpc, envelope_hex) -> str
    Sends the `0x`-hex envelope via `sendRawTransaction` and returns the
    transaction hash. Never retries: a failed submit is the caller's call.

- get_transaction_receipt(rpc, tx_hash) -> TransactionReceipt | None
    One `getTransactionReceipt` query; `None` while the node has no receipt.

- ReceiptPoller(rpc, tx_hash, policy, cancel)
    The confirmation state machine:

        SUBMITTED -> PENDING -> {CONFIRMED | FAILED | TIMED_OUT | CANCELLED}

    `mark_pending()` records an accepted submission; `step()` performs one
    poll; `run()` polls until a terminal state, waiting
    `policy.poll_interval` seconds between polls on the `cancel` event.

- wait_for_receipt(rpc, tx_hash, *, policy=None, cancel=None) -> ConfirmationResult
- submit_and_wait(rpc, envelope_hex, *, policy=None, cancel=None) -> ConfirmationResult

FAILED and TIMED_OUT are reported outcomes, not exceptions. Callers who prefer
exceptions call `ConfirmationResult.unwrap()`.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from ..config import ReceiptPolicy
from ..errors import (TransportError, TxCancelledError, TxError, TxFailedError,
                      TxTimeoutError)
from ..types.core import Hash, TransactionReceipt
from ..utils.bytes import add_hex_prefix

log = logging.getLogger(__name__)


class _RpcClient(Protocol):
    """
    Minimal interface expected from cita_sdk.rpc.http client.
    """
    def call(self, method: str, params: Optional[list] = None) -> Any: ...


# -----------------------------------------------------------------------------
# Core RPC calls
# -----------------------------------------------------------------------------


def submit_raw(rpc: _RpcClient, envelope_hex: str) -> Hash:
    """
    Submit a signed envelope (`0x`-hex) to the node.

    Returns the transaction hash as a 0x-prefixed hex string. Transport and
    node errors propagate unchanged.
    """
    if not isinstance(envelope_hex, str):
        raise TypeError("envelope_hex must be a 0x-hex string")

    result = rpc.call("sendRawTransaction", [envelope_hex])

    tx_hash = result.get("hash") if isinstance(result, dict) else result
    if not isinstance(tx_hash, str) or not tx_hash.strip():
        raise TxError(f"unexpected RPC result for sendRawTransaction: {result!r}")
    tx_hash = add_hex_prefix(tx_hash.strip())
    log.info("submitted transaction %s", tx_hash)
    return tx_hash


def get_transaction_receipt(rpc: _RpcClient, tx_hash: Hash) -> Optional[TransactionReceipt]:
    """
    Query the node for a transaction receipt.

    Returns:
        TransactionReceipt if available, or None if the tx is pending/not found yet.
    """
    res = rpc.call("getTransactionReceipt", [tx_hash])
    if res in (None, False, ""):
        return None
    if not isinstance(res, dict):
        raise TxError(f"unexpected receipt payload: {type(res).__name__}", tx_hash=tx_hash)
    try:
        return TransactionReceipt.from_rpc_dict(res)
    except ValueError as e:
        raise TxError(f"malformed receipt: {e}", tx_hash=tx_hash, receipt=res) from e


# -----------------------------------------------------------------------------
# Confirmation state machine
# -----------------------------------------------------------------------------


class ConfirmationState(str, enum.Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({
    ConfirmationState.CONFIRMED,
    ConfirmationState.FAILED,
    ConfirmationState.TIMED_OUT,
    ConfirmationState.CANCELLED,
})


@dataclass(slots=True, frozen=True)
class ConfirmationResult:
    state: ConfirmationState
    tx_hash: Hash
    receipt: Optional[TransactionReceipt]
    error_message: Optional[str]
    attempts: int

    @property
    def ok(self) -> bool:
        return self.state is ConfirmationState.CONFIRMED

    @property
    def contract_address(self) -> Optional[str]:
        return self.receipt.contract_address if self.receipt is not None else None

    def unwrap(self) -> TransactionReceipt:
        """Return the receipt of a confirmed transaction, raise otherwise."""
        raw = dict(self.receipt.raw) if self.receipt is not None else None
        if self.state is ConfirmationState.CONFIRMED and self.receipt is not None:
            return self.receipt
        if self.state is ConfirmationState.FAILED:
            raise TxFailedError(self.error_message or "transaction failed",
                                tx_hash=self.tx_hash, receipt=raw)
        if self.state is ConfirmationState.TIMED_OUT:
            raise TxTimeoutError(f"no receipt after {self.attempts} attempts", tx_hash=self.tx_hash)
        if self.state is ConfirmationState.CANCELLED:
            raise TxCancelledError("confirmation cancelled", tx_hash=self.tx_hash)
        raise TxError(f"confirmation not finished (state={self.state.value})", tx_hash=self.tx_hash)


class ReceiptPoller:
    """
    Drives one transaction from SUBMITTED to a terminal state.

    A poll that hits a `TransportError` counts as an attempt without a
    receipt; node error objects (`RemoteProtocolError`) propagate.
    """

    def __init__(
        self,
        rpc: _RpcClient,
        tx_hash: Hash,
        policy: Optional[ReceiptPolicy] = None,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self.rpc = rpc
        self.tx_hash = tx_hash
        self.policy = policy or ReceiptPolicy()
        self.cancel = cancel or threading.Event()
        self.state = ConfirmationState.SUBMITTED
        self.attempts = 0
        self.receipt: Optional[TransactionReceipt] = None

    @property
    def done(self) -> bool:
        return self.state.terminal

    def mark_pending(self) -> ConfirmationState:
        """Record that the node accepted the submission and returned a hash."""
        if self.state is ConfirmationState.SUBMITTED:
            self.state = ConfirmationState.PENDING
        return self.state

    def step(self) -> ConfirmationState:
        """Perform at most one poll. Never sleeps."""
        if self.done:
            return self.state
        if self.cancel.is_set():
            return self._finish(ConfirmationState.CANCELLED)

        self.state = ConfirmationState.PENDING
        self.attempts += 1
        try:
            receipt = get_transaction_receipt(self.rpc, self.tx_hash)
        except TransportError as e:
            log.warning("poll %d for %s failed: %s", self.attempts, self.tx_hash, e)
            receipt = None
        log.debug("poll %d/%d for %s: %s", self.attempts, self.policy.max_attempts,
                  self.tx_hash, "receipt" if receipt is not None else "no receipt")

        if receipt is None:
            if self.attempts >= self.policy.max_attempts:
                return self._finish(ConfirmationState.TIMED_OUT)
            return self.state
        self.receipt = receipt
        if receipt.is_failure:
            return self._finish(ConfirmationState.FAILED)
        return self._finish(ConfirmationState.CONFIRMED)

    def run(self) -> ConfirmationResult:
        """Poll until terminal, waiting `poll_interval` between polls."""
        while not self.step().terminal:
            if self.cancel.wait(self.policy.poll_interval):
                self._finish(ConfirmationState.CANCELLED)
        return self.result()

    def result(self) -> ConfirmationResult:
        return ConfirmationResult(
            state=self.state,
            tx_hash=self.tx_hash,
            receipt=self.receipt,
            error_message=self.receipt.error_message if self.receipt is not None else None,
            attempts=self.attempts,
        )

    def _finish(self, state: ConfirmationState) -> ConfirmationState:
        self.state = state
        if state is ConfirmationState.CONFIRMED:
            log.info("transaction %s confirmed after %d polls", self.tx_hash, self.attempts)
        elif state is ConfirmationState.FAILED:
            log.warning("transaction %s failed: %s", self.tx_hash,
                        self.receipt.error_message if self.receipt else None)
        elif state is ConfirmationState.TIMED_OUT:
            log.warning("transaction %s timed out after %d polls", self.tx_hash, self.attempts)
        else:
            log.info("confirmation of %s cancelled after %d polls", self.tx_hash, self.attempts)
        return state


# -----------------------------------------------------------------------------
# Waiters
# -----------------------------------------------------------------------------


def wait_for_receipt(
    rpc: _RpcClient,
    tx_hash: Hash,
    *,
    policy: Optional[ReceiptPolicy] = None,
    cancel: Optional[threading.Event] = None,
) -> ConfirmationResult:
    """
    Poll for a receipt until confirmed, failed, out of attempts or cancelled.
    Blocks the calling thread.
    """
    return ReceiptPoller(rpc, tx_hash, policy, cancel).run()


def submit_and_wait(
    rpc: _RpcClient,
    envelope_hex: str,
    *,
    policy: Optional[ReceiptPolicy] = None,
    cancel: Optional[threading.Event] = None,
) -> ConfirmationResult:
    """
    Submit a signed envelope and block until its confirmation reaches a
    terminal state.
    """
    txh = submit_raw(rpc, envelope_hex)
    poller = ReceiptPoller(rpc, txh, policy, cancel)
    poller.mark_pending()
    return poller.run()


__all__ = [
    "submit_raw",
    "get_transaction_receipt",
    "ConfirmationState",
    "ConfirmationResult",
    "ReceiptPoller",
    "wait_for_receipt",
    "submit_and_wait",
]
