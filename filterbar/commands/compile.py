"""Compile a filter bar into an Elasticsearch query."""

from __future__ import annotations

import click

from filterbar.cli import Context, pass_context
from filterbar.commands._input import EXIT_INPUT_ERROR, EXIT_USAGE_ERROR, load_state
from filterbar.exceptions import FilterParseError, StateFormatError
from filterbar.groups import ast
from filterbar.search import tree
from filterbar.search.kibana import to_kibana_filters
from filterbar.search.preview import render
from filterbar.search.query import compile_node
from filterbar.utils.output import debug, error, print_json_document, print_preview, verbose


@click.command("compile")
@click.argument("source", required=False)
@click.option("--expr", "-e", default=None, help="Inline filter-bar expression")
@click.option("--compact", is_flag=True, default=False, help="Print the query on one line")
@click.option(
    "--query-only",
    is_flag=True,
    default=False,
    help="Print only the query document, without the preview line",
)
@click.option(
    "--kibana",
    is_flag=True,
    default=False,
    help="Print one Kibana filter object per clause instead of the bool query",
)
@pass_context
def cli(
    ctx: Context,
    source: str | None,
    expr: str | None,
    compact: bool,
    query_only: bool,
    kibana: bool,
) -> None:
    """Compile a filter bar into an Elasticsearch bool query.

    SOURCE is a saved filter-bar state (JSON with "clauses" and "groups"),
    or "-" to read it from stdin. Use --expr to give the filter bar inline.

    Examples:

    \b
      # From a saved state
      filterbar compile state.json

    \b
      # Inline, with an explicit OR group
      filterbar compile --expr 'env is prod AND (status is 500 OR status is 503)'

    \b
      # Query only, on one line
      filterbar compile --compact --query-only state.json

    \b
      # Kibana filter objects, negation in meta.negate
      filterbar compile --kibana --expr 'status is_not 500'
    """
    if source is None and expr is None:
        error("Nothing to compile", hint="Pass a state file, '-' for stdin, or --expr")
        raise SystemExit(EXIT_USAGE_ERROR)

    try:
        state = load_state(source, expr)
    except (FilterParseError, StateFormatError, OSError) as e:
        error(str(e))
        raise SystemExit(EXIT_INPUT_ERROR)

    options = ctx.compiler_options()
    indent = None if compact else ctx.get_config().indent
    verbose(f"{len(state.clauses)} clauses, {len(state.groups)} groups")
    debug(f"Compiler options: {options}")

    if kibana:
        filters = to_kibana_filters(state.clauses, options)
        verbose(f"{len(filters)} of {len(state.clauses)} clauses projected")
        print_json_document({"filters": filters}, indent=indent)
        return

    root = ast(state, options)
    debug(f"AST depth {tree.depth(root)}, {len(tree.clauses(root))} active clauses")
    print_json_document({"query": compile_node(root, options)}, indent=indent)
    if not query_only and not ctx.quiet:
        print_preview(render(root, None, options))
