"""Command-line interface for filterbar.

The group callback loads the config once, applies the compiler overrides
given on the command line and leaves both on a shared :class:`Context`.
Commands take their compiler options from there, so config file, command
line and defaults always agree.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from filterbar import __version__
from filterbar.config import Config, load_config
from filterbar.exceptions import ConfigError
from filterbar.search.ast_nodes import CompilerOptions
from filterbar.utils.output import error, set_color, set_verbosity, warning

logger = logging.getLogger(__name__)

_MISSING_CONFIG = "No config file"


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False

    def get_config(self) -> Config:
        """Return the loaded config, falling back to defaults."""
        if self.config is None:
            self.config = Config()
        return self.config

    def compiler_options(self) -> CompilerOptions:
        """Compiler options from the config, command-line overrides included."""
        return self.get_config().compiler_options()


pass_context = click.make_pass_decorator(Context, ensure=True)


def _apply_overrides(
    config: Config, keyword_suffix: str | None, connector: str | None
) -> list[str]:
    """Apply command-line compiler overrides; return what was changed."""
    changed: list[str] = []
    if keyword_suffix is not None:
        config.keyword_suffix = keyword_suffix
        changed.append(f"keyword_suffix={keyword_suffix!r}")
    if connector is not None:
        config.default_connector = connector.upper()
        changed.append(f"default_connector={config.default_connector}")
    return changed


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ~/.config/filterbar/config.toml)",
)
@click.option(
    "--keyword-suffix",
    metavar="SUFFIX",
    default=None,
    help="Field suffix marking exact-match fields; overrides [compiler]",
)
@click.option(
    "--connector",
    type=click.Choice(["AND", "OR"], case_sensitive=False),
    default=None,
    help="Connector for clauses that carry none; overrides [compiler]",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output (implies --verbose)")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.version_option(version=__version__, prog_name="filterbar")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    keyword_suffix: str | None,
    connector: str | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """filterbar: Compile Kibana-style filter bars into Elasticsearch queries.

    A filter bar is an ordered list of field/operator/value clauses joined
    by AND/OR, with optional explicit groups. Clauses are combined strictly
    left to right; a change of connector wraps everything before it.

    Settings come from ~/.config/filterbar/config.toml unless --config
    names another file. --keyword-suffix and --connector override the
    [compiler] section for one run.

    Examples:

        # Compile a saved filter bar
        filterbar compile state.json

        # Treat ".raw" fields as exact-match and join bare clauses with OR
        filterbar --keyword-suffix .raw --connector OR compile -e 'code.raw is 200'
    """
    app_ctx = ctx.ensure_object(Context)
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet
    set_verbosity(verbose=verbose, debug=debug)

    disable_color = no_color or os.environ.get("NO_COLOR") is not None
    if disable_color:
        set_color(False)

    try:
        config, warnings = load_config(config_path)
    except ConfigError as e:
        error(str(e), hint="Run 'filterbar init-config --force' to start from the example")
        ctx.exit(1)

    if not disable_color and not config.colored_output:
        set_color(False)
    if not quiet:
        for message in warnings:
            # the default location is optional; only a named file must exist
            if config_path is not None or not message.startswith(_MISSING_CONFIG):
                warning(message)

    for change in _apply_overrides(config, keyword_suffix, connector):
        logger.info("Compiler override: %s", change)
    app_ctx.config = config


@cli.command("help")
@click.argument("command", required=False, nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Show help for a command."""
    group: click.Group = cli
    for name in command:
        cmd = group.get_command(ctx, name)
        if cmd is None:
            error(f"Unknown command: {name}", hint="Run 'filterbar help' for the command list")
            ctx.exit(1)
            return
        if not isinstance(cmd, click.Group):
            click.echo(cmd.get_help(ctx))
            return
        group = cmd
    click.echo(group.get_help(ctx))


def register_commands() -> None:
    """Register all commands from the commands package."""
    from filterbar.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


register_commands()
