# tests/test_url_builder.py
from __future__ import annotations

from hostbridge.schemas.request_schema import HttpMethod, RequestSpec
from hostbridge.utils.url_builder import build_get_query, build_post_body


def test_build_get_query_none_returns_empty_string() -> None:
    assert build_get_query(None) == ""


def test_build_get_query_empty_mapping_keeps_bare_question_mark() -> None:
    assert build_get_query({}) == "?"


def test_build_get_query_joins_pairs_in_insertion_order() -> None:
    assert build_get_query({"b": "2", "a": "1", "c": "3"}) == "?b=2&a=1&c=3"


def test_build_get_query_leaves_values_unencoded_by_default() -> None:
    assert build_get_query({"q": "a b&c"}) == "?q=a b&c"


def test_build_get_query_percent_encodes_when_enabled() -> None:
    assert build_get_query({"q key": "a b&c", "id": "role#1"}, encode=True) == "?q%20key=a%20b%26c&id=role%231"


def test_build_post_body_none_and_empty_serialize_to_empty_object() -> None:
    assert build_post_body(None) == "{}"
    assert build_post_body({}) == "{}"


def test_build_post_body_is_compact_and_repeatable() -> None:
    first = build_post_body({"key": "value"})
    assert first == '{"key":"value"}'
    assert all(build_post_body({"key": "value"}) == first for _ in range(3))


def test_build_post_body_keeps_non_ascii_text() -> None:
    assert build_post_body({"name": "héllo"}) == '{"name":"héllo"}'


def test_request_spec_get_full_path_and_no_body() -> None:
    spec = RequestSpec(method=HttpMethod.GET, path="echo", args={"a": "1"})
    assert spec.full_path == "echo?a=1"
    assert spec.body is None


def test_request_spec_post_keeps_path_and_builds_body() -> None:
    spec = RequestSpec(method=HttpMethod.POST, path="echo", args={"a": "1"}, synchronous=False)
    assert spec.full_path == "echo"
    assert spec.body == '{"a":"1"}'
