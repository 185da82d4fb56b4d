"""Write the example configuration and check that it loads."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click
from rich.table import Table

from filterbar.cli import Context, pass_context
from filterbar.config import Config, get_default_config_path, load_config
from filterbar.exceptions import ConfigError
from filterbar.utils.output import console, create_table, error, success, warning


def example_config_text() -> str:
    """The example configuration shipped with the package."""
    return resources.files("filterbar").joinpath("config.example.toml").read_text()


def compiler_settings_table(config: Config) -> Table:
    """Tabulate the ``[compiler]`` settings a config resolves to."""
    options = config.compiler_options()
    table = create_table(title="Compiler settings", caption=str(config.config_path or "defaults"))
    table.add_column("Setting", style="field")
    table.add_column("Value")
    table.add_row("keyword_suffix", repr(options.keyword_suffix))
    table.add_row("default_connector", str(options.default_connector))
    table.add_row("wildcard_case_insensitive", str(options.wildcard_case_insensitive).lower())
    table.add_row("range_min_operator", options.range_min_operator)
    table.add_row("range_max_operator", options.range_max_operator)
    return table


@click.command("init-config")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the config (default: ~/.config/filterbar/config.toml)",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file")
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print the example config instead of writing it",
)
@pass_context
def cli(ctx: Context, output: Path | None, force: bool, to_stdout: bool) -> None:
    """Write the example config, then load it back and show its compiler settings.

    Examples:

    \b
      # Create the config at the default location
      filterbar init-config

    \b
      # Start a project-local config from the example
      filterbar init-config --stdout > filterbar.toml
    """
    text = example_config_text()
    if to_stdout:
        click.echo(text, nl=False)
        return

    target = (output or get_default_config_path()).expanduser().resolve()
    if target.exists() and not force:
        error(f"Config file already exists: {target}", hint="Use --force to overwrite")
        raise SystemExit(1)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text)
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    try:
        config, warnings = load_config(target)
    except ConfigError as e:
        error(f"Written config does not load: {e}")
        raise SystemExit(1)

    for message in warnings:
        warning(message)
    success(f"Created config file: {target}")
    if not ctx.quiet:
        console.print(compiler_settings_table(config))
