import threading

import pytest

from cita_sdk.errors import RemoteProtocolError, TransportError, TxError
from cita_sdk.tx.pipeline import confirm_many, submit_many
from cita_sdk.tx.send import ConfirmationState


class _Factory:
    """Hands every worker its own scripted client and remembers them all."""

    def __init__(self, make_rpc, responses):
        self._make_rpc = make_rpc
        self._responses = responses
        self._lock = threading.Lock()
        self.clients = []

    def __call__(self):
        rpc = self._make_rpc(self._responses)
        with self._lock:
            self.clients.append(rpc)
        return rpc


def _send(params):
    envelope = params[0]
    if envelope == "0xbad":
        raise TransportError("connection reset", method="sendRawTransaction")
    return {"hash": "0x" + envelope[2:].rjust(64, "0")}


def test_submit_many_keeps_order_and_captures_errors(make_rpc):
    factory = _Factory(make_rpc, {"sendRawTransaction": _send})
    envelopes = ["0x01", "0x02", "0xbad", "0x04"]

    outcomes = submit_many(factory, envelopes, max_workers=3)

    assert [o.envelope for o in outcomes] == envelopes
    assert [o.ok for o in outcomes] == [True, True, False, True]
    assert outcomes[0].tx_hash == "0x" + "0" * 62 + "01"
    assert isinstance(outcomes[2].error, TransportError)
    assert outcomes[2].tx_hash is None
    assert len(factory.clients) == 4
    assert all(c.closed for c in factory.clients)
    assert all(len(c.calls) == 1 for c in factory.clients)


def _receipt_for(params):
    tx_hash = params[0]
    if tx_hash.endswith("ff"):
        return {"transactionHash": tx_hash, "errorMessage": "Reverted."}
    if tx_hash.endswith("ee"):
        return None
    return {"transactionHash": tx_hash, "errorMessage": None}


def test_confirm_many_reports_each_outcome(make_rpc, fast_policy):
    factory = _Factory(make_rpc, {"getTransactionReceipt": _receipt_for})
    hashes = ["0x" + "11" * 32, "0x" + "ff" * 32, "0x" + "ee" * 32]

    results = confirm_many(factory, hashes, policy=fast_policy, max_workers=2)

    assert [r.tx_hash for r in results] == hashes
    assert [r.state for r in results] == [
        ConfirmationState.CONFIRMED,
        ConfirmationState.FAILED,
        ConfirmationState.TIMED_OUT,
    ]
    assert results[2].result.attempts == fast_policy.max_attempts
    assert [r.ok for r in results] == [True, False, False]
    assert all(r.error is None for r in results)
    assert all(c.closed for c in factory.clients)


def test_confirm_many_isolates_per_hash_errors(make_rpc, fast_policy):
    def receipts(params):
        tx_hash = params[0]
        if tx_hash.endswith("22"):
            return RemoteProtocolError(code=-32602, message="invalid hash")
        if tx_hash.endswith("33"):
            return "garbage"
        return {"transactionHash": tx_hash, "errorMessage": None}

    factory = _Factory(make_rpc, {"getTransactionReceipt": receipts})
    hashes = ["0x" + "11" * 32, "0x" + "22" * 32, "0x" + "33" * 32, "0x" + "44" * 32]

    results = confirm_many(factory, hashes, policy=fast_policy, max_workers=2)

    assert [r.tx_hash for r in results] == hashes
    assert [r.ok for r in results] == [True, False, False, True]
    assert isinstance(results[1].error, RemoteProtocolError)
    assert results[1].error.code == -32602
    assert results[1].result is None and results[1].state is None
    assert isinstance(results[2].error, TxError)
    assert results[3].state is ConfirmationState.CONFIRMED
    assert all(c.closed for c in factory.clients)


def test_confirm_many_shared_cancel(make_rpc, fast_policy):
    cancel = threading.Event()
    cancel.set()
    factory = _Factory(make_rpc, {"getTransactionReceipt": None})

    results = confirm_many(factory, ["0x01", "0x02"], policy=fast_policy, cancel=cancel)

    assert {r.state for r in results} == {ConfirmationState.CANCELLED}
    assert all(c.calls == [] for c in factory.clients)


def test_empty_inputs_and_worker_bounds(make_rpc):
    factory = _Factory(make_rpc, {})
    assert submit_many(factory, []) == []
    assert confirm_many(factory, []) == []
    assert factory.clients == []
    with pytest.raises(ValueError):
        submit_many(factory, ["0x01"], max_workers=0)
