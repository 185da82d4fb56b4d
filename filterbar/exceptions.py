"""Exception hierarchy for filterbar."""

from pathlib import Path


class FilterBarError(Exception):
    """Base exception for all filterbar errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all filterbar errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(FilterBarError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Clause Errors
class ValidationError(FilterBarError):
    """A clause is malformed or not yet complete.

    Raised by the normalizer. The compiler treats such clauses as
    "not ready" and leaves them out of the query.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class UnknownOperatorError(FilterBarError):
    """Clause uses an operator the compiler does not know."""

    def __init__(self, operator: object) -> None:
        self.operator = operator
        super().__init__(f"Unknown filter operator: {operator!r}")


# Group Errors
class GroupError(FilterBarError):
    """Explicit group bookkeeping errors."""

    pass


class InvalidGroupError(GroupError):
    """Selection cannot form a group (too small or not contiguous)."""

    def __init__(self, indices: list[int] | tuple[int, ...], reason: str) -> None:
        self.indices = list(indices)
        self.reason = reason
        super().__init__(f"Cannot group clauses {self.indices}: {reason}")


class GroupNotFoundError(GroupError):
    """Group doesn't exist."""

    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Group not found: {group_id}")


class ClauseIndexError(FilterBarError, IndexError):
    """Clause index is outside the filter bar."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"Clause index {index} out of range (filter bar has {size} clauses)")


# Input Errors
class FilterParseError(FilterBarError):
    """Raised when a filter-bar expression cannot be parsed."""

    def __init__(self, text: str, message: str) -> None:
        self.text = text
        super().__init__(f"Failed to parse filter expression '{text}': {message}")


class StateFormatError(FilterBarError):
    """Serialized filter-bar state has an unexpected shape."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid filter-bar state: {detail}")
