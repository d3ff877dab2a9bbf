"""
hostbridge/client/host_client.py

WHAT THIS FILE IS FOR
---------------------
This module defines HostClient, the public call surface of hostbridge.
It lets a host application issue GET/POST requests against a single,
runtime-changeable host, either blocking or non-blocking, and always
reports the result in the same two-field Outcome shape.

CALL SURFACE
------------
- get(path, args=None)                               -> Outcome   (blocking)
- post(path, args=None)                              -> Outcome   (blocking)
- aget(path, args=None, on_success=None, on_failure=None)  -> Task[Outcome]
- apost(path, args=None, on_success=None, on_failure=None) -> Task[Outcome]

CALL FLOW
---------
caller
  -> RequestSpec (query string for GET / JSON body for POST)
      -> HttpClient.open(host + full_path)
          -> blocking:     HttpClient.send      -> normalize() -> Outcome
          -> non-blocking: completion_adapter.attach + HttpClient.send_async
                           scheduled on the running event loop

REQUEST BEHAVIOR
----------------
- The host is read exactly once per call, when the call is made. A host
  change while an async request is in flight does not affect it.
- The configured timeout applies to all four variants.
- GET sends no body. POST sends the JSON-encoded args (UTF-8) with no
  explicit Content-Type header.

ERROR HANDLING RULES
--------------------
- HTTP failures are never raised:
    * blocking:     Outcome(error=<status>)
    * non-blocking: on_failure() with no arguments; the task resolves to
                    the same Outcome the blocking call would return
- Network-level failures report status 0 on both paths and fire
  on_failure on the non-blocking path.
- Unexpected transport exceptions (e.g. a host without URL scheme)
  propagate: raised from get/post, or from awaiting the aget/apost task.
  A failed aget/apost task is also logged (`host_request_raised`), so a
  task nobody awaits does not fail silently.
- aget/apost must be called while an asyncio event loop is running;
  otherwise asyncio's RuntimeError propagates.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Set

import structlog

from hostbridge.client.completion_adapter import FailureCallback, SuccessCallback, attach
from hostbridge.client.configuration import ClientConfig
from hostbridge.client.result_normalizer import normalize
from hostbridge.schemas.outcome_schema import Outcome
from hostbridge.schemas.request_schema import HttpMethod, RequestSpec
from hostbridge.utils.http_client import HttpClient, TransportHandle
from hostbridge.utils.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

Args = Optional[Mapping[str, Any]]


class HostClient:
    """
    GET/POST facade over a single configurable host.

    Responsibilities:
    - Build the request path / body for each call
    - Apply the host + timeout held in ClientConfig
    - Normalize completion into Outcome
    - Route async completion to caller continuations
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        http: Optional[HttpClient] = None,
        encode_query: bool = False,
    ) -> None:
        self.config = config or ClientConfig()
        self.http = http or HttpClient(timeout_seconds=self.config.timeout_seconds)
        self.encode_query = encode_query

        # Strong references to in-flight tasks until they finish.
        self._inflight: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "HostClient":
        settings = settings or get_settings()
        return cls(config=ClientConfig.from_settings(settings), encode_query=settings.encode_query)

    # ------------------------------------------------------------------ #
    # Blocking
    # ------------------------------------------------------------------ #
    def get(self, path: str, args: Args = None) -> Outcome:
        return self._request(HttpMethod.GET, path, args)

    def post(self, path: str, args: Args = None) -> Outcome:
        return self._request(HttpMethod.POST, path, args)

    # ------------------------------------------------------------------ #
    # Non-blocking
    # ------------------------------------------------------------------ #
    def aget(
        self,
        path: str,
        args: Args = None,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> "asyncio.Task[Outcome]":
        return self._request_async(HttpMethod.GET, path, args, on_success, on_failure)

    def apost(
        self,
        path: str,
        args: Args = None,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> "asyncio.Task[Outcome]":
        return self._request_async(HttpMethod.POST, path, args, on_success, on_failure)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _spec(self, method: HttpMethod, path: str, args: Args, synchronous: bool) -> RequestSpec:
        return RequestSpec(
            method=method,
            path=path,
            args=dict(args) if args is not None else None,
            synchronous=synchronous,
            encode_query=self.encode_query,
        )

    def _open(self, spec: RequestSpec) -> TransportHandle:
        url = self.config.get_host() + spec.full_path
        return self.http.open(spec.method.value, url, synchronous=spec.synchronous)

    def _request(self, method: HttpMethod, path: str, args: Args) -> Outcome:
        spec = self._spec(method, path, args, synchronous=True)
        handle = self._open(spec)
        self.http.send(handle, spec.body)
        outcome = normalize(handle)

        if not outcome.ok:
            logger.info("host_request_failed", method=method.value, url=handle.url, error=outcome.error)
        return outcome

    def _request_async(
        self,
        method: HttpMethod,
        path: str,
        args: Args,
        on_success: Optional[SuccessCallback],
        on_failure: Optional[FailureCallback],
    ) -> "asyncio.Task[Outcome]":
        loop = asyncio.get_running_loop()

        spec = self._spec(method, path, args, synchronous=False)
        handle = self._open(spec)
        attach(handle, on_success=on_success, on_failure=on_failure)

        task = loop.create_task(self._complete(handle, spec.body))
        self._inflight.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: "asyncio.Task[Outcome]") -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            logger.error(
                "host_request_raised",
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def _complete(self, handle: TransportHandle, body: Optional[str]) -> Outcome:
        await self.http.send_async(handle, body)
        outcome = normalize(handle)

        if not outcome.ok:
            logger.info("host_request_failed", method=handle.method, url=handle.url, error=outcome.error)
        return outcome
