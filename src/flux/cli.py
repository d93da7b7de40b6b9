"""
Flux command line.

Evaluate, tokenize and inspect Flux expressions from the shell:

    flux eval "(psx - 20) <? 400" -v psx=800
    flux tokens "w * 2 <? 100"
    flux ast "a ? b : c"
    flux symbols
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flux._version import get_version
from flux.core.config import FluxConfig, LogLevel, find_config, load_config
from flux.core.errors import FluxError
from flux.core.expression_lang.handle import Flux
from flux.core.expression_lang.parser import parse_expr
from flux.core.expression_lang.registry import SymbolRegistry, arity_of
from flux.core.expression_lang.tokenizer import tokenize

app = typer.Typer(
    help="Flux: numeric expressions evaluated on demand.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("flux.cli")


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        typer.echo(f"flux {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Flux: numeric expressions evaluated on demand."""


# =============================================================================
# Helpers
# =============================================================================


def _configure_logging(cli_level: LogLevel | None, config: FluxConfig) -> None:
    level = cli_level or os.getenv("LOG_LEVEL", "").upper() or config.logging.level
    logging.basicConfig(
        level=getattr(logging, str(level), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load(config_path: Path | None) -> FluxConfig:
    """Load the given config, the nearest flux.toml, or defaults."""
    path = config_path or find_config()
    if path is None:
        return FluxConfig()
    return load_config(path)


def _parse_assignments(assignments: list[str]) -> dict[str, float]:
    """Turn ``name=value`` pairs into a variable mapping."""
    variables: dict[str, float] = {}
    for item in assignments:
        name, sep, raw = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise typer.BadParameter(f"Expected name=value, got {item!r}")
        try:
            variables[name] = float(raw.replace("'", ""))
        except ValueError:
            raise typer.BadParameter(f"Not a number for {name!r}: {raw!r}") from None
    return variables


def _fail(error: FluxError) -> typer.Exit:
    err_console.print(f"[red]{type(error).__name__}:[/red] {escape(str(error))}")
    return typer.Exit(code=1)


def _format_result(value: float) -> str:
    return str(int(value)) if value.is_integer() else repr(value)


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to flux.toml (default: search upwards)"),
]
LogLevelOption = Annotated[
    LogLevel | None,
    typer.Option("--log-level", case_sensitive=False, help="Logging level"),
]


# =============================================================================
# Commands
# =============================================================================


@app.command("eval")
def eval_command(
    expression: Annotated[str, typer.Argument(help="Expression to evaluate")],
    var: Annotated[
        list[str] | None,
        typer.Option("--var", "-v", help="Local variable as name=value (repeatable)"),
    ] = None,
    config_path: ConfigOption = None,
    no_builtins: Annotated[
        bool, typer.Option("--no-builtins", help="Do not install built-in symbols")
    ] = False,
    log_level: LogLevelOption = None,
) -> None:
    """Evaluate an expression and print the result."""
    try:
        config = _load(config_path)
        _configure_logging(log_level, config)
        registry = config.build_registry(builtins=False if no_builtins else None)
        variables = {**config.variables, **_parse_assignments(var or [])}
        result = Flux(expression, variables, registry).evaluate()
    except FluxError as e:
        raise _fail(e) from e

    logger.info("Evaluated %r with %d variables", expression, len(variables))
    typer.echo(_format_result(result))


@app.command("tokens")
def tokens_command(
    expression: Annotated[str, typer.Argument(help="Expression to tokenize")],
) -> None:
    """Show the tokens of an expression."""
    try:
        tokens = tokenize(expression)
    except FluxError as e:
        raise _fail(e) from e

    table = Table(title="Tokens")
    table.add_column("Pos", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Value", style="bold")
    for tok in tokens:
        table.add_row(str(tok.pos), tok.kind.value, escape(tok.value))
    console.print(table)


@app.command("ast")
def ast_command(
    expression: Annotated[str, typer.Argument(help="Expression to parse")],
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Parse an expression and print its fully parenthesised form."""
    try:
        expr = parse_expr(expression)
    except FluxError as e:
        raise _fail(e) from e

    if output_json:
        typer.echo(json.dumps(expr.model_dump(mode="json"), indent=2))
    else:
        typer.echo(str(expr))


@app.command("symbols")
def symbols_command(
    config_path: ConfigOption = None,
    no_builtins: Annotated[
        bool, typer.Option("--no-builtins", help="Do not install built-in symbols")
    ] = False,
) -> None:
    """List the constants and functions available to expressions."""
    try:
        registry = _load(config_path).build_registry(builtins=False if no_builtins else None)
    except FluxError as e:
        raise _fail(e) from e

    console.print(_constants_table(registry))
    console.print(_functions_table(registry))


def _constants_table(registry: SymbolRegistry) -> Table:
    table = Table(title="Constants")
    table.add_column("Name", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in sorted(registry.constants.items()):
        table.add_row(name, repr(value))
    return table


def _functions_table(registry: SymbolRegistry) -> Table:
    table = Table(title="Functions")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments", justify="right")
    for name, fn in sorted(registry.functions.items()):
        arity = arity_of(fn)
        if arity is None:
            args = "?"
        elif arity[1] is None:
            args = f"{arity[0]}+"
        elif arity[0] == arity[1]:
            args = str(arity[0])
        else:
            args = f"{arity[0]}-{arity[1]}"
        table.add_row(name, args)
    return table


def main() -> None:
    """Entry point for the flux command."""
    app()


if __name__ == "__main__":
    main()
