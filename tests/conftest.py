"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from filterbar.groups.state import FilterBarState
from filterbar.search.ast_nodes import Clause, Logic

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[compiler]
keyword_suffix = ".raw"
default_connector = "OR"
range_min_operator = "gte"

[display]
colored_output = false
indent = 4
""")
    return config_path


@pytest.fixture
def empty_config(temp_dir: Path) -> Path:
    """An existing config file with no settings, so no warnings are printed."""
    config_path = temp_dir / "empty.toml"
    config_path.write_text("")
    return config_path


@pytest.fixture
def four_clause_state() -> FilterBarState:
    """status: active, type: user (OR), type: admin (AND), env: prod (AND)."""
    return FilterBarState(
        clauses=[
            Clause(field="status", operator="is", value="active"),
            Clause(field="type", operator="is", value="user", connector=Logic.OR),
            Clause(field="type", operator="is", value="admin", connector=Logic.AND),
            Clause(field="env", operator="is", value="prod", connector=Logic.AND),
        ]
    )
