"""
hostbridge/utils/url_builder.py

WHAT THIS FILE IS FOR
---------------------
Pure helpers that turn a caller's argument mapping into the two wire
forms used by the client:

- GET  -> query string appended to the endpoint path
- POST -> JSON document sent as the request body

QUERY STRING RULES
------------------
- args is None      -> ""                (no query string at all)
- args is {}        -> "?"               (bare marker, kept for compatibility)
- otherwise         -> "?k1=v1&k2=v2"    (mapping insertion order)

Keys and values are NOT percent-encoded unless `encode=True`.
Callers that send reserved characters ("&", "=", "#", spaces) should
enable `encode_query` in settings.

BODY RULES
----------
- args is None -> treated as {}
- compact JSON separators, so {"key": "value"} -> '{"key":"value"}'
- non-ASCII text is kept as-is; the transport encodes the body as UTF-8

Both functions are deterministic and side-effect free.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional
from urllib.parse import quote


def _query_part(value: Any, encode: bool) -> str:
    text = str(value)
    return quote(text, safe="") if encode else text


def build_get_query(args: Optional[Mapping[str, Any]], encode: bool = False) -> str:
    if args is None:
        return ""
    return "?" + "&".join(
        f"{_query_part(key, encode)}={_query_part(value, encode)}" for key, value in args.items()
    )


def build_post_body(args: Optional[Mapping[str, Any]]) -> str:
    if args is None:
        args = {}
    return json.dumps(dict(args), separators=(",", ":"), ensure_ascii=False)
