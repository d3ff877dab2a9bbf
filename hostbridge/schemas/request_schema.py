# -------------------------------------------------------------------
# hostbridge/schemas/request_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# Typed, per-call description of an outbound request. A RequestSpec
# is created by HostClient for each call, turned into a full path and
# body, and then discarded; it is never retained.
#
# NAMING CONVENTION
# -----------------
# `path` is the endpoint portion only. The configured host is NOT part
# of this model; it is prepended by the transport at send time.
# -------------------------------------------------------------------

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from hostbridge.utils.url_builder import build_get_query, build_post_body


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class RequestSpec(BaseModel):
    """
    One request as seen by the facade.

    - GET: args travel in the query string, there is no body
    - POST: args travel as a JSON document in the body
    """

    model_config = {"extra": "forbid"}

    method: HttpMethod
    path: str
    args: Optional[Dict[str, Any]] = None
    synchronous: bool = True
    encode_query: bool = False

    @property
    def full_path(self) -> str:
        if self.method is HttpMethod.GET:
            return self.path + build_get_query(self.args, encode=self.encode_query)
        return self.path

    @property
    def body(self) -> Optional[str]:
        if self.method is HttpMethod.POST:
            return build_post_body(self.args)
        return None
