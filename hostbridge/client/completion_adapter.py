"""
hostbridge/client/completion_adapter.py

Routes a non-blocking request's state changes to caller continuations.

- on_success(body) fires once when the request completes with 200
- on_failure()     fires once when the request can no longer succeed
                   (HTTP >= 400, other non-200 completion, or a
                   network-level failure with status 0)

A PendingRequest settles on the first of the two and ignores every
later state change, so at most one continuation ever runs, and it runs
at most once.
"""

from __future__ import annotations

from typing import Callable, Optional

import structlog

from hostbridge.client.result_normalizer import is_failure, is_success
from hostbridge.utils.http_client import TransportHandle

logger = structlog.get_logger(__name__)

SuccessCallback = Callable[[str], None]
FailureCallback = Callable[[], None]


def _ignore_success(body: str) -> None:
    return None


def _ignore_failure() -> None:
    return None


class PendingRequest:
    def __init__(
        self,
        handle: TransportHandle,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        self.handle = handle
        self._on_success = on_success or _ignore_success
        self._on_failure = on_failure or _ignore_failure
        self.settled = False
        self.succeeded: Optional[bool] = None

        handle.on_state_change(self._on_state_change)

    def _on_state_change(self, handle: TransportHandle) -> None:
        if self.settled:
            return

        if is_success(handle):
            self._settle(True)
            self._on_success(handle.response_text)
        elif is_failure(handle):
            self._settle(False)
            self._on_failure()

    def _settle(self, succeeded: bool) -> None:
        # Mark first so a continuation that re-enters cannot fire twice.
        self.settled = True
        self.succeeded = succeeded
        logger.debug(
            "pending_request_settled",
            url=self.handle.url,
            succeeded=succeeded,
            status_code=self.handle.status,
        )


def attach(
    handle: TransportHandle,
    on_success: Optional[SuccessCallback] = None,
    on_failure: Optional[FailureCallback] = None,
) -> PendingRequest:
    return PendingRequest(handle, on_success=on_success, on_failure=on_failure)
