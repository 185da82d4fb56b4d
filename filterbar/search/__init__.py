"""Filter expression compiler: clauses -> boolean AST -> query and preview."""

from filterbar.search.ast_nodes import (
    BoolNode,
    Clause,
    CompilerOptions,
    ExplicitGroup,
    Leaf,
    Logic,
    OperatorKind,
)
from filterbar.search.builder import build, build_ast, build_grouped_ast
from filterbar.search.kibana import to_kibana_filter, to_kibana_filters
from filterbar.search.normalizer import normalize
from filterbar.search.parser import ParsedFilterBar, parse_filter_bar
from filterbar.search.preview import build_preview, render
from filterbar.search.query import build_query, compile_node

__all__ = [
    "BoolNode",
    "Clause",
    "CompilerOptions",
    "ExplicitGroup",
    "Leaf",
    "Logic",
    "OperatorKind",
    "ParsedFilterBar",
    "build",
    "build_ast",
    "build_grouped_ast",
    "build_preview",
    "build_query",
    "compile_node",
    "normalize",
    "parse_filter_bar",
    "render",
    "to_kibana_filter",
    "to_kibana_filters",
]
