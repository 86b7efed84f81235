"""Click-based CLI for quote-sentinel.

Thin wrapper around QuoteService. Zero business logic: every command
builds the service, awaits one operation and renders its result.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from quote_sentinel.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _build_service(config):
    from quote_sentinel.service import build_service

    return build_service(config)


def _call_service(ctx: click.Context, operation):
    """Build the service, await ``operation(service)``, always close it."""
    config = _load_config(ctx)

    async def _run():
        service = _build_service(config)
        try:
            return await operation(service)
        finally:
            await service.close()

    return _run_async(_run())


def _parse_symbols(symbols: tuple[str, ...]) -> list[str]:
    """Accept ``AAPL MSFT`` as well as ``AAPL,MSFT``."""
    parsed = [s.strip() for arg in symbols for s in arg.split(",") if s.strip()]
    if not parsed:
        raise click.UsageError("At least one symbol is required")
    return parsed


def _exit_on_failure(result, as_json: bool) -> None:
    """Render a Failure and exit with status 1. No-op on Success."""
    if result.kind != "failure":
        return

    if as_json:
        from quote_sentinel.api.schemas import ErrorListResponse

        click.echo(ErrorListResponse.from_failure(result).model_dump_json(indent=2))
    else:
        table = Table(title="Errors", title_style="bold red")
        table.add_column("Kind", style="red")
        table.add_column("Field")
        table.add_column("Value")
        table.add_column("Reason")
        for error in result.errors:
            table.add_row(
                error.kind,
                getattr(error, "field", "-"),
                getattr(error, "value", "-"),
                getattr(error, "reason", "-"),
            )
        console.print(table)
    raise SystemExit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="QUOTE_SENTINEL_CONFIG",
    default=None,
    help="Path to quote-sentinel.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="quote-sentinel")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Quote Sentinel: stock quotes, price history and gains projections."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# quote / compare
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def quote(ctx: click.Context, symbol: str, as_json: bool) -> None:
    """Show the latest price for SYMBOL."""
    result = _call_service(ctx, lambda service: service.get_quote(symbol))
    _exit_on_failure(result, as_json)
    _output_quotes([result.value], as_json, title=f"{result.value.symbol} quote", single=True)


@cli.command()
@click.argument("symbols", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def compare(ctx: click.Context, symbols: tuple[str, ...], as_json: bool) -> None:
    """Compare the latest prices of SYMBOLS, in the order given."""
    symbol_list = _parse_symbols(symbols)
    result = _call_service(ctx, lambda service: service.compare_quotes(symbol_list))
    _exit_on_failure(result, as_json)
    _output_quotes(result.value.quotes, as_json, title="Comparison")


def _output_quotes(quotes, as_json: bool, title: str, single: bool = False) -> None:
    from quote_sentinel.api.schemas import QuoteResponse

    rows = [QuoteResponse.from_model(q) for q in quotes]
    if as_json:
        payload = rows[0].model_dump() if single else [r.model_dump() for r in rows]
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(title=title)
    table.add_column("Symbol", style="bold")
    table.add_column("Last price", justify="right")
    table.add_column("Priced at")
    for row in rows:
        table.add_row(row.symbol, f"{row.last_price:.2f}", row.priced_at)
    console.print(table)


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option("--from", "from_date", required=True, help="Earliest date (YYYY-MM-DD).")
@click.option("--to", "to_date", required=True, help="Latest date (YYYY-MM-DD).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def history(
    ctx: click.Context,
    symbol: str,
    from_date: str,
    to_date: str,
    as_json: bool,
) -> None:
    """Show daily prices for SYMBOL between two dates, newest first."""
    from quote_sentinel.api.schemas import HistoryResponse

    result = _call_service(
        ctx, lambda service: service.get_history_window(symbol, from_date, to_date)
    )
    _exit_on_failure(result, as_json)
    response = HistoryResponse.from_model(result.value)

    if as_json:
        click.echo(response.model_dump_json(indent=2))
        return

    table = Table(title=f"{response.symbol} {from_date} → {to_date}")
    table.add_column("Date", style="bold")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Close", justify="right")
    for point in result.value.prices:
        table.add_row(
            point.date.isoformat(),
            f"{point.open_price:.2f}",
            f"{point.high_price:.2f}",
            f"{point.low_price:.2f}",
            f"{point.close_price:.2f}",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# gains
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option("--amount", "-a", required=True, help="Number of shares bought.")
@click.option("--date", "-d", "purchase_date", required=True, help="Purchase date (YYYY-MM-DD).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def gains(
    ctx: click.Context,
    symbol: str,
    amount: str,
    purchase_date: str,
    as_json: bool,
) -> None:
    """Project capital gains for shares of SYMBOL bought on a past date."""
    from quote_sentinel.api.schemas import GainsResponse

    result = _call_service(
        ctx, lambda service: service.project_gains(symbol, amount, purchase_date)
    )
    _exit_on_failure(result, as_json)
    response = GainsResponse.from_model(result.value)

    if as_json:
        click.echo(response.model_dump_json(indent=2))
        return

    table = Table(title=f"{response.symbol} capital gains")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Purchased amount", f"{response.purchased_amount:g}")
    table.add_row("Purchased at", purchase_date)
    table.add_row("Price at purchase", f"{response.price_at_date:.2f}")
    table.add_row("Last price", f"{response.last_price:.2f}")
    table.add_section()
    style = "green" if response.capital_gains >= 0 else "red"
    table.add_row("Capital gains", f"[{style}]{response.capital_gains:.2f}[/{style}]")
    console.print(table)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address. Default: from config.")
@click.option("--port", "-p", type=int, default=None, help="Port number. Default: from config.")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]uvicorn not installed. Install with: "
            "pip install quote-sentinel[api][/red]"
        )
        raise SystemExit(1)

    config = _load_config(ctx)
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting quote-sentinel API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "quote_sentinel.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
