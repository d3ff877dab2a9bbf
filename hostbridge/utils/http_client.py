"""
hostbridge/utils/http_client.py

WHAT THIS FILE IS FOR
---------------------
This module is the transport layer of hostbridge. It opens a request
against a full URL, sends an optional body, and records the raw
completion state on a TransportHandle:

- ready_state   (UNSENT -> OPENED -> HEADERS_RECEIVED -> DONE)
- status        (HTTP status code, 0 when no status was ever received)
- response_text (decoded body)

Every ready-state transition is announced to the handle's listeners.
The async completion adapter subscribes to those announcements; the
blocking path simply inspects the handle once `send` returns.

TRANSPORTS
----------
- Blocking:     `requests` (one call per request, no session reuse)
- Non-blocking: `httpx.AsyncClient`, response read via `client.stream`
                so that headers and body completion are separate
                transitions

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Retry logic
- Query string / body construction (see url_builder.py)
- Deciding whether a completion is a success or a failure
  (see hostbridge/client/result_normalizer.py)

ERROR BEHAVIOR
--------------
Network-level failures (DNS, connection refused, timeout, dropped
connection) do NOT raise. The handle is completed with status 0 and the
exception is kept on `transport_error`.

Anything else the substrate raises (missing URL scheme, invalid URL,
invalid method) propagates unchanged to the caller.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, List, Optional

import httpx
import requests
import structlog

logger = structlog.get_logger(__name__)

StateListener = Callable[["TransportHandle"], None]

# Errors that mean "the request never produced a usable HTTP response".
_SYNC_NETWORK_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ContentDecodingError,
)
_ASYNC_NETWORK_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.DecodingError,
)


class ReadyState(IntEnum):
    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    DONE = 3


class TransportHandle:
    """
    Raw state of one request.

    A handle is bound to exactly one request and is never reused.
    """

    def __init__(self, method: str, url: str, synchronous: bool, timeout_seconds: float):
        self.method = method
        self.url = url
        self.synchronous = synchronous
        self.timeout_seconds = timeout_seconds

        self.ready_state = ReadyState.UNSENT
        self.status = 0
        self.response_text = ""
        self.transport_error: Optional[Exception] = None

        self._listeners: List[StateListener] = []

    def on_state_change(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _transition(self, state: ReadyState) -> None:
        self.ready_state = state
        for listener in list(self._listeners):
            listener(self)

    def _fail(self, exc: Exception) -> None:
        self.transport_error = exc
        self.status = 0
        self._transition(ReadyState.DONE)


def _encode_body(body: Optional[str]) -> Optional[bytes]:
    return body.encode("utf-8") if body is not None else None


def _response_text(resp: requests.Response) -> str:
    # Text without a declared charset is UTF-8 on both paths.
    if "charset=" not in resp.headers.get("content-type", "").lower():
        resp.encoding = "utf-8"
    return resp.text


class HttpClient:
    """
    Thin transport wrapper over `requests` (blocking) and `httpx` (async).

    TIMEOUT SEMANTICS
    -----------------
    `timeout_seconds` is copied onto every handle at open time. It applies
    to both the blocking and the non-blocking path.

    REDIRECTS / DECODING
    --------------------
    Both paths follow redirects and decode text without a declared
    charset as UTF-8, so a given response yields the same handle state
    whichever path sent it.
    """

    def __init__(self, timeout_seconds: float = 3.0):
        self.timeout_seconds = timeout_seconds

    def open(
        self,
        method: str,
        url: str,
        synchronous: bool,
    ) -> TransportHandle:
        handle = TransportHandle(
            method=method,
            url=url,
            synchronous=synchronous,
            timeout_seconds=self.timeout_seconds,
        )
        handle._transition(ReadyState.OPENED)
        return handle

    def send(self, handle: TransportHandle, body: Optional[str] = None) -> None:
        """
        Blocking send. Returns once the handle is DONE.

        Raises:
            ValueError: handle was opened for async use or already sent.
            requests.RequestException (other than network-level errors):
                propagated unchanged.
        """
        self._check_sendable(handle, synchronous=True)
        logger.debug("http_request_sent", method=handle.method, url=handle.url, synchronous=True)

        try:
            resp = requests.request(
                handle.method,
                handle.url,
                data=_encode_body(body),
                timeout=handle.timeout_seconds,
            )
        except _SYNC_NETWORK_ERRORS as exc:
            self._log_transport_error(handle, exc)
            handle._fail(exc)
            return

        handle.status = resp.status_code
        handle._transition(ReadyState.HEADERS_RECEIVED)
        handle.response_text = _response_text(resp)
        handle._transition(ReadyState.DONE)
        self._log_completed(handle)

    async def send_async(self, handle: TransportHandle, body: Optional[str] = None) -> None:
        """
        Non-blocking send. Completes once the handle is DONE.

        Listeners registered on the handle run inside this coroutine,
        on the event loop that awaits it.
        """
        self._check_sendable(handle, synchronous=False)
        logger.debug("http_request_sent", method=handle.method, url=handle.url, synchronous=False)

        async with httpx.AsyncClient(timeout=handle.timeout_seconds) as client:
            try:
                async with client.stream(
                    handle.method,
                    handle.url,
                    content=_encode_body(body),
                    follow_redirects=True,
                ) as resp:
                    handle.status = resp.status_code
                    handle._transition(ReadyState.HEADERS_RECEIVED)
                    await resp.aread()
                    handle.response_text = resp.text
                    handle._transition(ReadyState.DONE)
            except _ASYNC_NETWORK_ERRORS as exc:
                self._log_transport_error(handle, exc)
                handle._fail(exc)
                return

        self._log_completed(handle)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _check_sendable(handle: TransportHandle, synchronous: bool) -> None:
        if handle.synchronous != synchronous:
            mode = "synchronous" if handle.synchronous else "asynchronous"
            raise ValueError(f"Handle was opened as {mode}")
        if handle.ready_state is not ReadyState.OPENED:
            raise ValueError(f"Handle is not sendable (ready_state={handle.ready_state.name})")

    @staticmethod
    def _log_completed(handle: TransportHandle) -> None:
        logger.info(
            "http_request_completed",
            method=handle.method,
            url=handle.url,
            status_code=handle.status,
            synchronous=handle.synchronous,
        )

    @staticmethod
    def _log_transport_error(handle: TransportHandle, exc: Exception) -> None:
        logger.warning(
            "http_transport_error",
            method=handle.method,
            url=handle.url,
            synchronous=handle.synchronous,
            error_type=type(exc).__name__,
            error=str(exc),
        )
