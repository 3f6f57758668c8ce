"""Inference commands for TradeAutopsy CLI.

Runs the trade-inference engine over OCR text files, one file per
screenshot, and renders the trades and account summary.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def _setup_logging(verbose: bool) -> None:
    """Route engine events to the console when --verbose is given."""
    if not verbose:
        return

    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _format_pnl(value: float) -> str:
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}{value:.2f}[/{color}]"


def render_trades(trades: list) -> Table:
    """Build a rich table of reconstructed trades."""
    table = Table(
        title="Detected Trades",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Asset", style="bold")
    table.add_column("Side")
    table.add_column("Size", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("S/L", justify="right")
    table.add_column("T/P", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Time")
    table.add_column("Source", style="dim")

    for i, trade in enumerate(trades, 1):
        side_color = {"buy": "green", "sell": "red"}.get(trade.direction, "dim")
        table.add_row(
            str(i),
            trade.asset,
            f"[{side_color}]{trade.direction.upper()}[/{side_color}]",
            f"{trade.position_size:g}",
            f"{trade.entry_price:g}" if trade.entry_price else "-",
            f"{trade.stop_loss:g}" if trade.stop_loss else "-",
            f"{trade.take_profit:g}" if trade.take_profit else "-",
            _format_pnl(trade.loss_amount),
            trade.timestamp.strftime("%Y-%m-%d %H:%M") if trade.timestamp else "-",
            f"{trade.platform} #{trade.block_index + 1}",
        )

    return table


def render_summary(summary) -> Panel:
    """Build a rich panel for the account summary."""
    stacking = "[red]YES[/red]" if summary.risk_stacking else "[green]no[/green]"
    ordering = (
        "[green]by timestamp[/green]"
        if summary.ordering_verified
        else "[yellow]input order (unverified)[/yellow]"
    )

    return Panel(
        f"[bold]Net P&L:[/bold] {_format_pnl(summary.net_pnl)}\n"
        f"[bold]Trades:[/bold] {summary.trade_count}\n"
        f"[bold]Win Rate:[/bold] {summary.win_rate:.1f}%\n"
        f"[bold]Largest Loss:[/bold] {_format_pnl(summary.largest_loss)}\n"
        f"[bold]Avg Lot:[/bold] {summary.avg_lot:.2f}\n"
        f"[bold]Overtrading Score:[/bold] {summary.overtrading_score:.0f}/100\n"
        f"[bold]Risk Stacking:[/bold] {stacking}\n"
        f"[bold]Ordering:[/bold] {ordering}",
        title="[bold]Account Summary[/bold]",
        border_style="cyan",
    )


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.File("r", encoding="utf-8", errors="replace"),
)
@click.option(
    "--sort-by-time",
    is_flag=True,
    default=False,
    help="Order trades by their timestamps when every trade has one.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log parsing decisions.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/tradeautopsy/config.toml).",
)
def infer(files, sort_by_time: bool, as_json: bool, verbose: bool, config_path: Optional[Path]) -> None:
    """Reconstruct trades from OCR text files.

    Each FILE holds the text of one screenshot. Use - to read stdin.

    \b
    Examples:
      tradeautopsy infer history.txt
      tradeautopsy infer shot1.txt shot2.txt --sort-by-time
      tesseract shot.png - | tradeautopsy infer -
    """
    from tradeautopsy.config import load_settings
    from tradeautopsy.inference import infer_trades, logging_observer

    _setup_logging(verbose)

    settings = load_settings(config_path)
    texts = [f.read() for f in files]

    result = infer_trades(
        texts,
        settings=settings,
        sort_by_timestamp=sort_by_time,
        observer=logging_observer() if verbose else None,
    )

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    if not result.trades:
        console.print(Panel(
            "[yellow]No trades could be recovered from the text.[/yellow]\n\n"
            "Check that the screenshot shows the trade history rows.",
            title="[bold yellow]Low Confidence[/bold yellow]",
            border_style="yellow",
        ))
        return

    console.print(render_trades(result.trades))
    console.print(render_summary(result.account_summary))
    console.print(f"\n[dim]Confidence: {result.confidence}. Please confirm the detected trades.[/dim]")


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.File("r", encoding="utf-8", errors="replace"),
)
def detect(files) -> None:
    """Show which platform each OCR text file looks like.

    \b
    Examples:
      tradeautopsy detect shot1.txt shot2.txt
    """
    from tradeautopsy.inference import detect as detect_platform

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("File", style="bold")
    table.add_column("Platform")

    for f in files:
        tag = detect_platform(f.read())
        style = "dim" if tag.value == "unknown" else "green"
        table.add_row(Path(f.name).name, f"[{style}]{tag.value}[/{style}]")

    console.print(table)
