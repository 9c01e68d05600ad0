"""
Fan-out helpers for load generation and batch jobs.

`submit_many` and `confirm_many` run one task per envelope / hash on a thread
pool. Each task asks `rpc_factory` for its own client and closes it when done,
so no client is shared between workers. Both functions return only after
every task has finished, in input order.

    from cita_sdk.config import SDKConfig
    cfg = SDKConfig.from_env()
    outcomes = submit_many(cfg.rpc_client, envelopes, max_workers=8)
    confirmed = confirm_many(cfg.rpc_client, [o.tx_hash for o in outcomes if o.ok],
                             policy=cfg.receipt)
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from ..config import ReceiptPolicy
from ..errors import CitaSdkError
from ..types.core import Hash
from .send import (ConfirmationResult, ConfirmationState, submit_raw,
                   wait_for_receipt)

log = logging.getLogger(__name__)

RpcFactory = Callable[[], Any]

DEFAULT_MAX_WORKERS = 4


@dataclass(slots=True, frozen=True)
class SubmitOutcome:
    envelope: str
    tx_hash: Optional[Hash] = None
    error: Optional[CitaSdkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.tx_hash is not None


@dataclass(slots=True, frozen=True)
class ConfirmOutcome:
    """One hash from `confirm_many`: a poller result, or the SDK error that stopped it."""

    tx_hash: Hash
    result: Optional[ConfirmationResult] = None
    error: Optional[CitaSdkError] = None

    @property
    def state(self) -> Optional[ConfirmationState]:
        return self.result.state if self.result is not None else None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None and self.result.ok


def _close(rpc: Any) -> None:
    close = getattr(rpc, "close", None)
    if callable(close):
        close()


def _submit_one(rpc_factory: RpcFactory, envelope: str) -> SubmitOutcome:
    rpc = rpc_factory()
    try:
        return SubmitOutcome(envelope=envelope, tx_hash=submit_raw(rpc, envelope))
    except CitaSdkError as e:
        log.warning("submit failed: %s", e)
        return SubmitOutcome(envelope=envelope, error=e)
    finally:
        _close(rpc)


def _confirm_one(rpc_factory: RpcFactory, tx_hash: Hash, policy: Optional[ReceiptPolicy],
                 cancel: Optional[threading.Event]) -> ConfirmOutcome:
    rpc = rpc_factory()
    try:
        result = wait_for_receipt(rpc, tx_hash, policy=policy, cancel=cancel)
        return ConfirmOutcome(tx_hash=tx_hash, result=result)
    except CitaSdkError as e:
        log.warning("confirmation of %s stopped: %s", tx_hash, e)
        return ConfirmOutcome(tx_hash=tx_hash, error=e)
    finally:
        _close(rpc)


def submit_many(
    rpc_factory: RpcFactory,
    envelopes: Sequence[str],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[SubmitOutcome]:
    """
    Submit every envelope once. SDK errors are captured per envelope in
    `SubmitOutcome.error`; nothing is retried.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")
    envelopes = list(envelopes)
    if not envelopes:
        return []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cita-submit") as pool:
        futures = [pool.submit(_submit_one, rpc_factory, env) for env in envelopes]
        outcomes = [f.result() for f in futures]
    log.info("submitted %d/%d envelopes", sum(o.ok for o in outcomes), len(outcomes))
    return outcomes


def confirm_many(
    rpc_factory: RpcFactory,
    tx_hashes: Sequence[Hash],
    policy: Optional[ReceiptPolicy] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel: Optional[threading.Event] = None,
) -> List[ConfirmOutcome]:
    """
    Confirm every hash with its own poller. One shared `cancel` event stops
    all of them. An SDK error raised while polling one hash (a node error
    object, a malformed receipt) is captured in that hash's
    `ConfirmOutcome.error`; the other hashes are unaffected.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")
    tx_hashes = list(tx_hashes)
    if not tx_hashes:
        return []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cita-confirm") as pool:
        futures = [pool.submit(_confirm_one, rpc_factory, h, policy, cancel) for h in tx_hashes]
        results = [f.result() for f in futures]
    log.info("confirmed %d/%d transactions", sum(r.ok for r in results), len(results))
    return results


__all__ = ["SubmitOutcome", "ConfirmOutcome", "RpcFactory", "submit_many", "confirm_many"]
