"""Shared input handling for commands that read a filter bar."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from filterbar.exceptions import StateFormatError
from filterbar.groups.state import FilterBarState
from filterbar.search.parser import parse_filter_bar

EXIT_SUCCESS = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE_ERROR = 2


def load_state(source: str | None, expr: str | None) -> FilterBarState:
    """Read a filter bar from an expression, a JSON file or stdin.

    Args:
        source: Path to a state JSON file, or ``-`` for stdin.
        expr: One-line filter-bar expression; takes precedence over ``source``.

    Raises:
        FilterParseError: If the expression cannot be parsed.
        StateFormatError: If the JSON is malformed or has the wrong shape.
        OSError: If the file cannot be read.
    """
    if expr is not None:
        parsed = parse_filter_bar(expr)
        return FilterBarState(clauses=parsed.clauses, groups=parsed.groups)

    if source is None:
        raise StateFormatError("no input given; pass a state file, '-' or --expr")

    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateFormatError(f"not valid JSON: {e}") from e
    return FilterBarState.from_dict(data)
