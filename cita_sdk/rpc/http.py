from __future__ import annotations

"""
HTTP JSON-RPC client (sync).

- Built on httpx; a custom `transport` (e.g. `httpx.MockTransport`) can be
  injected for tests.
- Request ids come from a per-client counter starting at 1, advanced under a
  lock so one client may be shared between threads.
- Never retries; callers decide whether a failed submit is resent.
- Transport-level trouble (connection refused, timeout, HTTP failure, body
  that is not a JSON-RPC response) raises `TransportError`; an `error` object
  from the node raises `RemoteProtocolError`.

Example:
    from cita_sdk.rpc.http import RpcClient
    with RpcClient("http://127.0.0.1:1337") as rpc:
        height = rpc.call("blockNumber")
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from ..errors import RemoteProtocolError, TransportError, from_jsonrpc_error
from ..version import user_agent

log = logging.getLogger(__name__)

JSON = Union[dict, list, str, int, float, bool, None]
Params = Optional[Sequence[Any]]


def _positional(params: Params) -> List[Any]:
    if params is None:
        return []
    if isinstance(params, (str, bytes, bytearray)) or not isinstance(params, Sequence):
        raise TypeError(f"params must be an ordered sequence, got {type(params).__name__}")
    return list(params)


@dataclass
class RpcClient:
    """Synchronous JSON-RPC 2.0 client over HTTP."""

    url: str
    timeout: float = 30.0
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.BaseTransport] = None
    _next_id: int = field(init=False, default=1)
    _id_lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)
    _client: Any = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.Client(
            timeout=self.timeout,
            headers=merged_headers,
            transport=self.transport,
        )

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # --- public API ------------------------------------------------------

    def next_id(self) -> int:
        with self._id_lock:
            rid = self._next_id
            self._next_id += 1
        return rid

    def make_payload(self, method: str, params: Params = None) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "method": method,
            "params": _positional(params),
            "id": self.next_id(),
        }

    def call(self, method: str, params: Params = None) -> JSON:
        """Perform a single JSON-RPC request and return `result`."""
        payload = self.make_payload(method, params)
        rid = payload["id"]
        log.debug("rpc -> %s id=%s", method, rid)
        resp, status = self._post(payload, method=method, request_id=rid)
        if not isinstance(resp, dict):
            raise TransportError(
                f"expected a JSON-RPC object, got {type(resp).__name__}",
                method=method, request_id=rid, http_status=status,
            )
        return self._unwrap(resp, method=method, request_id=rid, http_status=status)

    def batch(self, calls: Sequence[Tuple[str, Params]]) -> List[JSON]:
        """
        Perform a JSON-RPC batch; returns results in the same order as `calls`.
        Responses are matched by id, not by position.
        """
        payloads = [self.make_payload(method, params) for method, params in calls]
        if not payloads:
            return []
        methods = {p["id"]: p["method"] for p in payloads}
        log.debug("rpc -> batch of %d ids=%s", len(payloads), list(methods))
        resp, status = self._post(payloads, method="batch")
        if not isinstance(resp, list):
            if isinstance(resp, dict) and resp.get("error") is not None:
                raise from_jsonrpc_error(resp["error"], method="batch", request_id=resp.get("id"))
            raise TransportError("batch response is not a list", method="batch", http_status=status)

        by_id: Dict[Any, Dict[str, Any]] = {}
        for item in resp:
            if not isinstance(item, dict) or item.get("id") not in methods:
                raise TransportError(f"unexpected item in batch response: {item!r}",
                                     method="batch", http_status=status)
            by_id[item["id"]] = item

        results: List[JSON] = []
        for p in payloads:
            rid = p["id"]
            if rid not in by_id:
                raise TransportError(f"missing result for id {rid}", method=p["method"],
                                     request_id=rid, http_status=status)
            results.append(self._unwrap(by_id[rid], method=p["method"], request_id=rid,
                                        http_status=status))
        return results

    # --- internals -------------------------------------------------------

    def _post(self, payload: Any, *, method: str,
              request_id: Optional[int] = None) -> Tuple[JSON, int]:
        if self._client is None:
            raise TransportError("client is closed", method=method, request_id=request_id)
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = self._client.post(self.url, content=body)
        except httpx.TimeoutException as e:
            raise TransportError(f"timeout: {e}", method=method, request_id=request_id) from e
        except httpx.HTTPError as e:
            raise TransportError(f"network error: {e}", method=method, request_id=request_id) from e

        try:
            resp = r.json()
        except ValueError as e:
            raise TransportError(
                f"non-JSON response: {r.text[:256]!r}",
                method=method, request_id=request_id, http_status=r.status_code,
            ) from e

        # An HTTP error status is only acceptable when it carries a JSON-RPC error body
        if r.status_code >= 400 and not (isinstance(resp, dict) and resp.get("error") is not None):
            raise TransportError(
                f"HTTP {r.status_code}", method=method, request_id=request_id,
                http_status=r.status_code,
            )
        return resp, r.status_code

    @staticmethod
    def _unwrap(resp: Dict[str, Any], *, method: str, request_id: int,
                http_status: Optional[int]) -> JSON:
        if resp.get("error") is not None:
            err: RemoteProtocolError = from_jsonrpc_error(
                resp["error"], method=method, request_id=resp.get("id", request_id)
            )
            log.debug("rpc <- %s id=%s error code=%s", method, request_id, err.code)
            raise err
        if resp.get("id") != request_id:
            raise TransportError(
                f"response id {resp.get('id')!r} does not match request id {request_id}",
                method=method, request_id=request_id, http_status=http_status,
            )
        if "result" not in resp:
            raise TransportError("malformed JSON-RPC response (no result)", method=method,
                                 request_id=request_id, http_status=http_status)
        return resp["result"]


__all__ = ["RpcClient", "JSON", "Params"]
