"""Unit tests for operator metadata and the field catalog."""

from __future__ import annotations

import pytest

from filterbar.catalog import (
    OPERATORS,
    FieldCatalog,
    FieldDefinition,
    get_operator_def,
    operator_requires_value,
    operator_supports_multiple_values,
)
from filterbar.exceptions import ValidationError
from filterbar.search.ast_nodes import OperatorKind


class TestOperatorDefs:
    def test_every_operator_listed_once(self) -> None:
        assert {op.value for op in OPERATORS} == set(OperatorKind)
        assert len(OPERATORS) == len(OperatorKind)

    def test_lookup(self) -> None:
        op_def = get_operator_def("is_one_of")
        assert op_def is not None
        assert op_def.label == "is one of"
        assert get_operator_def("near") is None

    def test_requires_value(self) -> None:
        assert operator_requires_value("is") is True
        assert operator_requires_value("exists") is False
        assert operator_requires_value("does_not_exist") is False
        assert operator_requires_value("near") is True

    def test_multiple_values(self) -> None:
        assert operator_supports_multiple_values("is_not_one_of") is True
        assert operator_supports_multiple_values("is") is False
        assert operator_supports_multiple_values("near") is False


class TestFieldCatalog:
    def test_from_names_and_mappings(self) -> None:
        catalog = FieldCatalog.from_list(
            ["host", {"name": "bytes", "type": "number", "label": "Bytes sent"}]
        )
        assert catalog.names() == ["host", "bytes"]
        assert len(catalog) == 2
        bytes_field = catalog.get("bytes")
        assert bytes_field is not None
        assert bytes_field.display_label == "Bytes sent"
        assert catalog.get("host") == FieldDefinition(name="host")

    def test_string_fields_have_no_range(self) -> None:
        catalog = FieldCatalog.from_list(["host"])
        operators = catalog.operators_for("host")
        assert OperatorKind.RANGE not in operators
        assert OperatorKind.PREFIX in operators

    def test_number_fields_have_no_prefix(self) -> None:
        catalog = FieldCatalog.from_list([{"name": "bytes", "type": "number"}])
        operators = catalog.operators_for("bytes")
        assert OperatorKind.RANGE in operators
        assert OperatorKind.PREFIX not in operators
        assert OperatorKind.WILDCARD not in operators

    def test_boolean_fields(self) -> None:
        catalog = FieldCatalog.from_list([{"name": "active", "type": "boolean"}])
        assert set(catalog.operators_for("active")) == {
            OperatorKind.IS,
            OperatorKind.IS_NOT,
            OperatorKind.EXISTS,
            OperatorKind.DOES_NOT_EXIST,
        }

    def test_explicit_operators(self) -> None:
        catalog = FieldCatalog.from_list([{"name": "tag", "operators": ["is", "exists"]}])
        assert catalog.operators_for("tag") == (OperatorKind.IS, OperatorKind.EXISTS)

    def test_unknown_field_gets_everything(self) -> None:
        assert len(FieldCatalog().operators_for("anything")) == len(OPERATORS)

    @pytest.mark.parametrize(
        "items",
        [
            [{"type": "string"}],
            [{"name": ""}],
            [42],
            [{"name": "x", "type": "geo_point"}],
            [{"name": "x", "operators": ["near"]}],
        ],
    )
    def test_invalid_entries(self, items: list[object]) -> None:
        with pytest.raises(ValidationError):
            FieldCatalog.from_list(items)
