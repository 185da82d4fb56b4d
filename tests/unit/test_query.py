"""Unit tests for Elasticsearch query compilation."""

from __future__ import annotations

import json
import logging
from typing import Any

import pytest

from filterbar.search.ast_nodes import (
    BoolNode,
    Clause,
    CompilerOptions,
    ExplicitGroup,
    Leaf,
    Logic,
)
from filterbar.search.query import build_query, compile_leaf, compile_node, is_match_all, match_all


def _c(
    field: str,
    value: Any = None,
    operator: str = "is",
    connector: str | None = None,
    **kw: Any,
) -> Clause:
    return Clause(
        field=field,
        operator=operator,
        value=value,
        connector=Logic(connector) if connector else None,
        **kw,
    )


def _leaf(clause: Clause) -> Any:
    return compile_leaf(clause)


class TestCompileLeaf:
    def test_is_text_uses_match(self) -> None:
        assert _leaf(_c("status", "active")) == {"match": {"status": "active"}}

    def test_is_numeric_uses_term(self) -> None:
        assert _leaf(_c("bytes", "42")) == {"term": {"bytes": 42}}
        assert _leaf(_c("ratio", "0.5")) == {"term": {"ratio": 0.5}}

    def test_is_keyword_uses_term_without_coercion(self) -> None:
        assert _leaf(_c("code.keyword", "200")) == {"term": {"code.keyword": "200"}}

    def test_is_not_wraps_once(self) -> None:
        assert _leaf(_c("status", "active", "is_not")) == {
            "bool": {"must_not": [{"match": {"status": "active"}}]}
        }

    def test_is_one_of(self) -> None:
        clause = _c("tags", operator="is_one_of", values=["web", "api"])
        assert _leaf(clause) == {"terms": {"tags": ["web", "api"]}}

    def test_is_one_of_comma_string(self) -> None:
        assert _leaf(_c("tags", "web, api", "is_one_of")) == {"terms": {"tags": ["web", "api"]}}

    def test_is_not_one_of(self) -> None:
        assert _leaf(_c("tags", "web", "is_not_one_of")) == {
            "bool": {"must_not": [{"terms": {"tags": ["web"]}}]}
        }

    def test_exists(self) -> None:
        assert _leaf(_c("host", operator="exists")) == {"exists": {"field": "host"}}

    def test_does_not_exist(self) -> None:
        assert _leaf(_c("host", operator="does_not_exist")) == {
            "bool": {"must_not": [{"exists": {"field": "host"}}]}
        }

    def test_range_both_bounds(self) -> None:
        clause = _c("bytes", operator="range", min_value=10, max_value="20")
        assert _leaf(clause) == {"range": {"bytes": {"gt": 10, "lt": 20}}}

    def test_range_one_bound(self) -> None:
        clause = _c("bytes", operator="range", min_value="5", min_operator="gte")
        assert _leaf(clause) == {"range": {"bytes": {"gte": 5}}}

    def test_range_zero_upper_bound(self) -> None:
        clause = _c("delta", operator="range", max_value=0, max_operator="lte")
        assert _leaf(clause) == {"range": {"delta": {"lte": 0}}}

    def test_range_without_bounds_is_skipped(self) -> None:
        assert _leaf(_c("bytes", operator="range")) is None

    def test_prefix_on_text_field(self) -> None:
        assert _leaf(_c("message", "err", "prefix")) == {
            "wildcard": {"message": {"value": "err*", "case_insensitive": True}}
        }

    def test_prefix_on_keyword_field(self) -> None:
        assert _leaf(_c("host.keyword", "web", "prefix")) == {"prefix": {"host.keyword": "web"}}

    def test_wildcard(self) -> None:
        assert _leaf(_c("host", "web-*", "wildcard")) == {
            "wildcard": {"host": {"value": "web-*", "case_insensitive": True}}
        }

    def test_wildcard_case_sensitive_option(self) -> None:
        options = CompilerOptions(wildcard_case_insensitive=False)
        doc = compile_leaf(_c("host", "web-*", "wildcard"), options)
        assert doc == {"wildcard": {"host": {"value": "web-*", "case_insensitive": False}}}

    def test_query_string(self) -> None:
        assert _leaf(_c("message", "error AND NOT debug", "query_string")) == {
            "query_string": {"default_field": "message", "query": "error AND NOT debug"}
        }

    def test_custom_keyword_suffix(self) -> None:
        options = CompilerOptions(keyword_suffix=".raw")
        assert compile_leaf(_c("code.raw", "200"), options) == {"term": {"code.raw": "200"}}
        assert compile_leaf(_c("code.keyword", "x"), options) == {"match": {"code.keyword": "x"}}

    def test_incomplete_clause_skipped(self) -> None:
        assert _leaf(_c("status")) is None
        assert _leaf(_c("", "x")) is None

    def test_unknown_operator_skipped_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="filterbar.search.query"):
            assert _leaf(_c("status", "x", "near")) is None
        assert "near" in caplog.text


class TestCompileNode:
    def test_none_is_match_all(self) -> None:
        assert compile_node(None) == match_all()
        assert is_match_all(compile_node(None))

    def test_and_uses_must(self) -> None:
        node = BoolNode(Logic.AND, (Leaf(_c("a", "x")), Leaf(_c("b", "y"))))
        assert compile_node(node) == {
            "bool": {"must": [{"match": {"a": "x"}}, {"match": {"b": "y"}}]}
        }

    def test_or_uses_should(self) -> None:
        node = BoolNode(Logic.OR, (Leaf(_c("a", "x")), Leaf(_c("b", "y"))))
        assert compile_node(node) == {
            "bool": {
                "should": [{"match": {"a": "x"}}, {"match": {"b": "y"}}],
                "minimum_should_match": 1,
            }
        }

    def test_single_valid_child_collapses(self) -> None:
        node = BoolNode(Logic.AND, (Leaf(_c("a", "x")), Leaf(_c("b"))))
        assert compile_node(node) == {"match": {"a": "x"}}

    def test_no_valid_children_is_match_all(self) -> None:
        node = BoolNode(Logic.OR, (Leaf(_c("a")), Leaf(_c("b"))))
        assert compile_node(node) == match_all()


class TestBuildQuery:
    def test_empty_filter_bar(self) -> None:
        assert build_query([]) == {"query": {"match_all": {}}}

    def test_single_clause(self) -> None:
        assert build_query([_c("status", "active")]) == {"query": {"match": {"status": "active"}}}

    def test_uniform_and_is_flat(self) -> None:
        clauses = [_c("a", "1"), _c("b", "2", connector="AND"), _c("c", "3", connector="AND")]
        query = build_query(clauses)["query"]
        assert query == {
            "bool": {"must": [{"term": {"a": 1}}, {"term": {"b": 2}}, {"term": {"c": 3}}]}
        }

    def test_uniform_or_is_flat(self) -> None:
        clauses = [_c("a", "x"), _c("b", "y", connector="OR"), _c("c", "z", connector="OR")]
        query = build_query(clauses)["query"]
        assert len(query["bool"]["should"]) == 3
        assert query["bool"]["minimum_should_match"] == 1

    def test_connector_change_wraps_previous(self) -> None:
        clauses = [_c("a", "x"), _c("b", "y", connector="AND"), _c("c", "z", connector="OR")]
        assert build_query(clauses) == {
            "query": {
                "bool": {
                    "should": [
                        {"bool": {"must": [{"match": {"a": "x"}}, {"match": {"b": "y"}}]}},
                        {"match": {"c": "z"}},
                    ],
                    "minimum_should_match": 1,
                }
            }
        }

    def test_status_user_admin_scenario(self) -> None:
        clauses = [
            _c("status", "active"),
            _c("type", "user", connector="OR"),
            _c("type", "admin", connector="AND"),
        ]
        assert build_query(clauses) == {
            "query": {
                "bool": {
                    "must": [
                        {
                            "bool": {
                                "should": [
                                    {"match": {"status": "active"}},
                                    {"match": {"type": "user"}},
                                ],
                                "minimum_should_match": 1,
                            }
                        },
                        {"match": {"type": "admin"}},
                    ]
                }
            }
        }

    def test_disabled_clauses_ignored(self) -> None:
        clauses = [_c("a", "x"), _c("b", "y", connector="OR", disabled=True)]
        assert build_query(clauses) == {"query": {"match": {"a": "x"}}}

    def test_explicit_group(self) -> None:
        clauses = [
            _c("env", "prod"),
            _c("status", "500", connector="AND"),
            _c("status", "503", connector="OR"),
        ]
        groups = [ExplicitGroup(id="g", type=Logic.OR, clause_indices=(1, 2))]
        assert build_query(clauses, groups) == {
            "query": {
                "bool": {
                    "must": [
                        {"match": {"env": "prod"}},
                        {
                            "bool": {
                                "should": [{"term": {"status": 500}}, {"term": {"status": 503}}],
                                "minimum_should_match": 1,
                            }
                        },
                    ]
                }
            }
        }

    def test_deterministic_output(self) -> None:
        clauses = [
            _c("a", "x"),
            _c("b", operator="range", min_value=1, connector="OR"),
            _c("c", "y", "is_not", connector="AND"),
        ]
        first = json.dumps(build_query(clauses))
        second = json.dumps(build_query(clauses))
        assert first == second

    def test_input_not_modified(self) -> None:
        clauses = [_c("bytes", "42"), _c("b", "y", connector="OR")]
        build_query(clauses)
        assert clauses[0].value == "42"
        assert clauses[1].connector == Logic.OR
