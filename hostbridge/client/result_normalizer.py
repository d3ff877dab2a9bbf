"""
hostbridge/client/result_normalizer.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single canonical rule* for deciding whether a
completed request succeeded, and for turning a TransportHandle into an
Outcome.

CONTRACT RULE
-------------
- ready_state DONE and status == 200 -> success, result = body
- anything else                      -> failure, error = status

Note that 2xx codes other than 200 (201, 204, ...) are failures under
this rule, and a request that never reached a server reports error 0.

The async completion adapter uses the same predicates so both call
styles agree on what "success" means.

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT perform I/O, log, or raise. It performs pure,
deterministic mapping only.
"""

from __future__ import annotations

from hostbridge.schemas.outcome_schema import Outcome
from hostbridge.utils.http_client import ReadyState, TransportHandle

SUCCESS_STATUS = 200


def is_success(handle: TransportHandle) -> bool:
    return handle.ready_state is ReadyState.DONE and handle.status == SUCCESS_STATUS


def is_failure(handle: TransportHandle) -> bool:
    """
    True once the handle can no longer succeed:
      - an HTTP error status (>= 400) has been received, or
      - the request is DONE without being a success (including status 0)
    """
    if handle.status >= 400:
        return True
    return handle.ready_state is ReadyState.DONE and handle.status != SUCCESS_STATUS


def normalize(handle: TransportHandle) -> Outcome:
    if is_success(handle):
        return Outcome.success(handle.response_text)
    return Outcome.failure(handle.status)
