"""Command-line inspection of the resolved environment and configuration."""

from __future__ import annotations

from dataclasses import dataclass

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cfx.config import CfxError, bootstrap, build_environment_context, load_env_files

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Inspect cfx environment and layered YAML configuration")


@dataclass
class _Options:
    prefix: str
    dotenv: bool


def _options(ctx: typer.Context) -> _Options:
    options: _Options = ctx.obj
    return options


def _fail(error: CfxError) -> typer.Exit:
    err_console.print(f"[red]{type(error).__name__}: {escape(str(error))}[/red]")
    return typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    prefix: str = typer.Option("", "--prefix", "-p", help="Environment variable prefix"),
    dotenv: bool = typer.Option(False, "--dotenv/--no-dotenv", help="Layer .env files"),
) -> None:
    """Resolve settings shared by all commands."""
    ctx.obj = _Options(prefix=prefix, dotenv=dotenv)


@app.command("env")
def show_env(ctx: typer.Context) -> None:
    """Print the resolved environment context as JSON."""
    options = _options(ctx)
    try:
        environ = load_env_files(prefix=options.prefix) if options.dotenv else None
        env = build_environment_context(options.prefix, environ=environ)
    except CfxError as error:
        raise _fail(error) from None
    console.print_json(env.model_dump_json())


@app.command("get")
def get_value(
    ctx: typer.Context,
    key: str = typer.Argument("", help="Dotted key; empty prints the whole document"),
) -> None:
    """Print a subtree of the merged configuration as YAML."""
    options = _options(ctx)
    try:
        runtime = bootstrap(options.prefix, dotenv=options.dotenv)
    except CfxError as error:
        raise _fail(error) from None

    if not runtime.config.has(key):
        err_console.print(f"[red]Key not found: {escape(key)}[/red]")
        raise typer.Exit(code=1)

    value = runtime.config.get(key)
    console.print(
        yaml.safe_dump(value, sort_keys=False, default_flow_style=False).rstrip(),
        markup=False,
        highlight=False,
    )


@app.command("check")
def check(ctx: typer.Context) -> None:
    """Load everything and report whether the configuration is usable."""
    options = _options(ctx)
    try:
        runtime = bootstrap(options.prefix, dotenv=options.dotenv)
    except CfxError as error:
        raise _fail(error) from None

    env = runtime.env
    table = Table(title="cfx", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("environment", str(env.environment))
    table.add_row("env prefix", str(env.env_prefix))
    table.add_row("app path", str(env.app_path))
    table.add_row("config path", str(env.config_path))
    keys = sorted(map(str, runtime.config.get("", {})))
    table.add_row("top-level keys", escape(", ".join(keys)))
    console.print(table)
    console.print("[green]configuration OK[/green]")


if __name__ == "__main__":
    app()
