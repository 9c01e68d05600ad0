from typing import Any, Callable, Dict, List, Tuple

import pytest

from cita_sdk.config import ReceiptPolicy

_MISSING = object()


class FakeRpc:
    """
    Minimal in-memory JSON-RPC stub.

    `responses` maps a method name to one of:
      - a list: consumed one item per call, the last item repeats
      - a callable: called with the params list
      - anything else: returned on every call
    Exception instances are raised instead of returned.
    """

    def __init__(self, responses: Dict[str, Any] | None = None) -> None:
        self.responses = {
            k: (list(v) if isinstance(v, list) else v) for k, v in (responses or {}).items()
        }
        self.calls: List[Tuple[str, list]] = []
        self.closed = False

    def call(self, method: str, params=None):
        self.calls.append((method, list(params or [])))
        script = self.responses.get(method, _MISSING)
        if script is _MISSING:
            raise AssertionError(f"unexpected RPC call: {method}")
        if isinstance(script, list):
            out = script.pop(0) if len(script) > 1 else script[0]
        elif callable(script):
            out = script(list(params or []))
        else:
            out = script
        if isinstance(out, Exception):
            raise out
        return out

    def methods(self) -> List[str]:
        return [m for (m, _p) in self.calls]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_rpc() -> Callable[..., FakeRpc]:
    return FakeRpc


@pytest.fixture
def fast_policy() -> ReceiptPolicy:
    return ReceiptPolicy(poll_interval=0, max_attempts=4)
