"""Configuration management for filterbar."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from filterbar.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from filterbar.search.ast_nodes import CompilerOptions, Logic

_RANGE_MIN_OPERATORS = ("gt", "gte")
_RANGE_MAX_OPERATORS = ("lt", "lte")


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "filterbar" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        keyword_suffix: Field suffix that marks exact-match (keyword) fields.
        default_connector: Connector used when a clause carries none.
        wildcard_case_insensitive: ``case_insensitive`` flag on wildcard queries.
        range_min_operator: Default lower-bound operator for range clauses.
        range_max_operator: Default upper-bound operator for range clauses.
        colored_output: Whether to use colored terminal output.
        indent: JSON indent for printed queries.
        field_catalog: Optional JSON file listing available fields.
        config_path: Path where config was loaded from (None if defaults).
    """

    keyword_suffix: str = ".keyword"
    default_connector: str = "AND"
    wildcard_case_insensitive: bool = True
    range_min_operator: str = "gt"
    range_max_operator: str = "lt"
    colored_output: bool = True
    indent: int = 2
    field_catalog: Path | None = None
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        self.default_connector = self.default_connector.upper()
        if self.default_connector not in ("AND", "OR"):
            raise ConfigValidationError(
                "compiler.default_connector", self.default_connector, "must be AND or OR"
            )
        if self.range_min_operator not in _RANGE_MIN_OPERATORS:
            raise ConfigValidationError(
                "compiler.range_min_operator", self.range_min_operator, "must be gt or gte"
            )
        if self.range_max_operator not in _RANGE_MAX_OPERATORS:
            raise ConfigValidationError(
                "compiler.range_max_operator", self.range_max_operator, "must be lt or lte"
            )

        if not self.keyword_suffix:
            warnings.append("compiler.keyword_suffix is empty; no field is treated as exact-match")

        if self.indent < 0:
            warnings.append(f"display.indent={self.indent} is negative, using 0")
            self.indent = 0

        if self.field_catalog is not None:
            self.field_catalog = self.field_catalog.expanduser().resolve()
            if not self.field_catalog.exists():
                warnings.append(f"Field catalog not found: {self.field_catalog}")

        return warnings

    def compiler_options(self) -> CompilerOptions:
        """Options handed to the normalizer, builders and compiler."""
        return CompilerOptions(
            keyword_suffix=self.keyword_suffix,
            default_connector=Logic(self.default_connector.upper()),
            wildcard_case_insensitive=self.wildcard_case_insensitive,
            range_min_operator=self.range_min_operator,
            range_max_operator=self.range_max_operator,
        )


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        # Use defaults
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: filterbar init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    # Load from file
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _expect(section: dict[str, Any], key: str, kind: type, where: str, reason: str) -> Any:
    value = section[key]
    # bool is an int subclass; never accept it where a number is wanted
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigValidationError(f"{where}.{key}", value, reason)
    return value


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [compiler] section
    compiler = data.get("compiler", {})
    if "keyword_suffix" in compiler:
        config.keyword_suffix = _expect(
            compiler, "keyword_suffix", str, "compiler", "must be a string"
        )
    if "default_connector" in compiler:
        config.default_connector = _expect(
            compiler, "default_connector", str, "compiler", "must be AND or OR"
        )
    if "wildcard_case_insensitive" in compiler:
        config.wildcard_case_insensitive = _expect(
            compiler, "wildcard_case_insensitive", bool, "compiler", "must be a boolean"
        )
    if "range_min_operator" in compiler:
        config.range_min_operator = _expect(
            compiler, "range_min_operator", str, "compiler", "must be gt or gte"
        )
    if "range_max_operator" in compiler:
        config.range_max_operator = _expect(
            compiler, "range_max_operator", str, "compiler", "must be lt or lte"
        )

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        config.colored_output = _expect(
            display, "colored_output", bool, "display", "must be a boolean"
        )
    if "indent" in display:
        config.indent = _expect(display, "indent", int, "display", "must be an integer")

    # Parse [fields] section
    fields = data.get("fields", {})
    if "catalog" in fields:
        config.field_catalog = Path(
            _expect(fields, "catalog", str, "fields", "must be a string path")
        )

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Only values that differ from the defaults are written.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    defaults = Config()
    data: dict[str, Any] = {}

    compiler_data: dict[str, Any] = {}
    for key in (
        "keyword_suffix",
        "default_connector",
        "wildcard_case_insensitive",
        "range_min_operator",
        "range_max_operator",
    ):
        value = getattr(config, key)
        if value != getattr(defaults, key):
            compiler_data[key] = value
    if compiler_data:
        data["compiler"] = compiler_data

    display_data: dict[str, Any] = {}
    if config.colored_output != defaults.colored_output:
        display_data["colored_output"] = config.colored_output
    if config.indent != defaults.indent:
        display_data["indent"] = config.indent
    if display_data:
        data["display"] = display_data

    if config.field_catalog is not None:
        data["fields"] = {"catalog": str(config.field_catalog)}

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
