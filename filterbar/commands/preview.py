"""Show the human-readable preview of a filter bar."""

from __future__ import annotations

import click

from filterbar.cli import Context, pass_context
from filterbar.commands._input import EXIT_INPUT_ERROR, EXIT_USAGE_ERROR, load_state
from filterbar.exceptions import FilterParseError, GroupNotFoundError, StateFormatError
from filterbar.groups import group_preview, preview, separators
from filterbar.utils.output import console, create_table, error, print_preview


@click.command("preview")
@click.argument("source", required=False)
@click.option("--expr", "-e", default=None, help="Inline filter-bar expression")
@click.option(
    "--separators",
    "show_separators",
    is_flag=True,
    default=False,
    help="Also list the connector shown between each pair of clauses",
)
@click.option("--group", "-g", "group_id", default=None, help="Preview only this explicit group")
@pass_context
def cli(
    ctx: Context,
    source: str | None,
    expr: str | None,
    show_separators: bool,
    group_id: str | None,
) -> None:
    """Print the preview line of a filter bar, e.g. "(a: 1 OR b: 2) AND c: 3".

    SOURCE is a saved filter-bar state or "-" for stdin; --expr gives
    the filter bar inline.
    """
    if source is None and expr is None:
        error("Nothing to preview", hint="Pass a state file, '-' for stdin, or --expr")
        raise SystemExit(EXIT_USAGE_ERROR)

    try:
        state = load_state(source, expr)
    except (FilterParseError, StateFormatError, OSError) as e:
        error(str(e))
        raise SystemExit(EXIT_INPUT_ERROR)

    options = ctx.compiler_options()
    if group_id is not None:
        try:
            print_preview(group_preview(state, group_id, options))
        except GroupNotFoundError as e:
            error(str(e), hint="Use the id from the state file's \"groups\" list")
            raise SystemExit(EXIT_INPUT_ERROR)
        return

    print_preview(preview(state, options))

    if show_separators and state.clauses:
        table = create_table(title="Separators")
        table.add_column("Between", justify="right")
        table.add_column("Connector", style="operator")
        table.add_column("Boundary")
        table.add_column("Group")
        for sep in separators(state, options):
            table.add_row(
                f"{sep.index - 1}-{sep.index}",
                str(sep.connector_type),
                "yes" if sep.is_group_boundary else "",
                sep.group_id or "",
            )
        console.print(table)
