"""List filter operators and the ones offered per field."""

from __future__ import annotations

import json
from pathlib import Path

import click

from filterbar.catalog import OPERATORS, FieldCatalog
from filterbar.cli import Context, pass_context
from filterbar.commands._input import EXIT_INPUT_ERROR
from filterbar.exceptions import ValidationError
from filterbar.utils.output import console, create_table, error


def _load_catalog(path: Path) -> FieldCatalog:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("fields", [])
    if not isinstance(data, list):
        raise ValidationError("field catalog", path, "must be a list of fields")
    return FieldCatalog.from_list(data)


@click.command("operators")
@click.option("--field", "field_name", default=None, help="Only operators offered for this field")
@click.option(
    "--catalog",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Field catalog JSON (default: [fields] catalog from the config)",
)
@pass_context
def cli(ctx: Context, field_name: str | None, catalog: Path | None) -> None:
    """Show the available filter operators.

    With --field, only the operators the field catalog offers for that
    field are listed.
    """
    allowed = None
    if field_name is not None:
        catalog = catalog or ctx.get_config().field_catalog
        field_catalog = FieldCatalog()
        if catalog is not None:
            try:
                field_catalog = _load_catalog(catalog)
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                error(f"Cannot read field catalog {catalog}: {e}")
                raise SystemExit(EXIT_INPUT_ERROR)
        allowed = set(field_catalog.operators_for(field_name))

    table = create_table(title=f"Operators for {field_name}" if field_name else "Operators")
    table.add_column("Operator", style="operator")
    table.add_column("Label")
    table.add_column("Description")
    table.add_column("Value")
    for op in OPERATORS:
        if allowed is not None and op.value not in allowed:
            continue
        if not op.requires_value:
            value_hint = "none"
        elif op.supports_multiple_values:
            value_hint = "list"
        else:
            value_hint = "single"
        table.add_row(str(op.value), op.label, op.description, value_hint)
    console.print(table)
