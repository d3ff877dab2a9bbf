# -------------------------------------------------------------------
# hostbridge/schemas/outcome_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# Defines the normalized result of a request, shared by the blocking
# call variants (returned by value) and the non-blocking ones (the
# value their task resolves to).
#
# CONTRACT
# --------
# Exactly one of `result` / `error` is set:
#   - success: result = response body text, error = None
#   - failure: result = None, error = numeric status (0 when the
#     request never produced an HTTP status)
#
# Construction with both or neither set is rejected by validation.
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, model_validator


class Outcome(BaseModel):
    """
    Two-field request outcome with a mutual-exclusivity invariant.
    """

    model_config = {"extra": "forbid", "frozen": True}

    result: Optional[str] = None
    error: Optional[int] = None

    @model_validator(mode="after")
    def _exactly_one_field(self) -> "Outcome":
        if (self.result is None) == (self.error is None):
            raise ValueError("Outcome requires exactly one of result/error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, body: str) -> "Outcome":
        return cls(result=body)

    @classmethod
    def failure(cls, status: int) -> "Outcome":
        return cls(error=status)
