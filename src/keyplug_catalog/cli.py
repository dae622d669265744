# Copyright (c) 2025 Keyplug Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI interface for Keyplug Catalog."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from keyplug_catalog import __version__
from keyplug_catalog.product import DERIVE_KEY
from keyplug_catalog.wiring import build_registry, create_factory
from keyplug_interceptors import InterceptionError, load_config, validate_config

app = typer.Typer(
    name="keyplug",
    help="Derive product keys through a configurable interceptor chain",
    rich_markup_mode="markdown"
)
console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"keyplug version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True
    )


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    )
) -> None:
    """Keyplug - product keys extended by before, around and after interceptors."""
    pass


@app.command()
def derive_key(
    sku: str = typer.Argument(..., help="SKU to derive the key from"),
    profile: str = typer.Option("default", "--profile", "-p", help="Built-in profile: default, around, disabled, traced"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file (YAML or JSON)"),
    trace: bool = typer.Option(False, "--trace", "-t", help="Show the execution trail"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug mode")
) -> None:
    """Derive the key for a SKU."""
    _configure_logging(verbose, debug)
    logger.debug(f"Deriving key for {sku!r} with {config or 'profile ' + profile}")

    try:
        registry = build_registry(profile=profile, config_path=config)
        context = registry.run(DERIVE_KEY, sku)
    except (InterceptionError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(context.result)

    if trace:
        table = Table(title=f"Execution trail for {context.target}")
        table.add_column("#", style="dim")
        table.add_column("Step", style="cyan")
        table.add_column("Phase", style="yellow")

        for index, (name, phase) in enumerate(context.trail, start=1):
            table.add_row(str(index), name, phase.value)

        console.print(table)
        console.print(f"Arguments after before phase: {context.args!r}")


@app.command()
def plugins(
    profile: str = typer.Option("default", "--profile", "-p", help="Built-in profile"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file (YAML or JSON)")
) -> None:
    """List the interceptors bound to each target."""
    _configure_logging(False, False)

    try:
        registry = build_registry(profile=profile, config_path=config)
    except (InterceptionError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    listing = registry.list_interceptors()
    if not listing:
        console.print("[yellow]No interceptors configured[/yellow]")
        return

    table = Table(title="Registered Interceptors")
    table.add_column("Target", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Sort Order", justify="right")
    table.add_column("Enabled")
    table.add_column("Hooks", style="yellow")

    for info in listing:
        table.add_row(
            info['target'],
            info['name'],
            str(info['sort_order']),
            "[green]yes[/green]" if info['enabled'] else "[red]no[/red]",
            ", ".join(info['capabilities'])
        )

    console.print(table)


@app.command()
def validate(
    config: Path = typer.Argument(..., help="Configuration file to validate")
) -> None:
    """Validate a configuration file."""
    _configure_logging(False, False)

    try:
        data = load_config(config)
    except (InterceptionError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    errors = validate_config(data, factory=create_factory())
    if errors:
        console.print(f"[red]✗ {len(errors)} configuration error(s):[/red]")
        for error in errors:
            console.print(f"  • {error}")
        raise typer.Exit(1)

    count = len(data.get('interceptors', []))
    console.print(f"[green]✓ Configuration is valid ({count} interceptors)[/green]")


if __name__ == "__main__":
    app()
