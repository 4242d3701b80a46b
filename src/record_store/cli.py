"""Command line interface for record store."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Dict, List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .application import RecordStoreApp, create_app
from .domain.catalog.entities import CatalogEntry
from .domain.catalog.filters import CatalogCriteria
from .domain.catalog.value_objects import RecordCategory, RecordFormat
from .domain.ordering.entities import Order, OrderLineRequest
from .domain.pagination import Page
from .exceptions import RecordStoreError
from .models.config import Config, create_default_config, load_config

console = Console()

FORMAT_CHOICES = [f.value for f in RecordFormat]
CATEGORY_CHOICES = [c.value for c in RecordCategory]
ENTRY_SORT_FIELDS = ["created", "artist", "album", "price", "category", "format"]
ORDER_SORT_FIELDS = ["created", "total_amount", "status"]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _get_app(ctx: click.Context) -> RecordStoreApp:
    """Build the app once per invocation from the group options."""
    state = ctx.find_root().obj
    if state.get("app") is None:
        try:
            config = load_config(state["config_path"]) if state["config_path"] else Config.default()
            state["app"] = create_app(config, data_directory=state["data_dir"])
        except RecordStoreError as e:
            console.print(f"\n[red]Error: {e}[/red]")
            sys.exit(1)
    return state["app"]


def _run(coro: Awaitable[Any]) -> Any:
    """Run a service coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except RecordStoreError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)


def _echo_json(data: Dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2))


def _print_entry(entry: CatalogEntry) -> None:
    info_table = Table(title=entry.get_display_name(), show_header=False)
    info_table.add_column("Field", style="cyan")
    info_table.add_column("Value")
    info_table.add_row("ID", entry.id)
    info_table.add_row("Artist", entry.artist)
    info_table.add_row("Album", entry.album)
    info_table.add_row("Format", entry.format.value)
    info_table.add_row("Category", entry.category.value)
    info_table.add_row("Price", str(entry.price))
    info_table.add_row("In stock", str(entry.quantity))
    info_table.add_row("MBID", entry.mbid or "-")
    info_table.add_row("Created", entry.created.isoformat(timespec="seconds"))
    info_table.add_row("Last modified", entry.last_modified.isoformat(timespec="seconds"))
    console.print(info_table)

    if entry.tracklist:
        tracks_table = Table(title="Tracklist")
        tracks_table.add_column("#", justify="right")
        tracks_table.add_column("Title")
        tracks_table.add_column("Length", justify="right")
        for track in entry.tracklist:
            tracks_table.add_row(str(track.position), track.title, track.formatted_duration())
        console.print(tracks_table)


def _print_entry_page(page: Page[CatalogEntry]) -> None:
    if not page.data:
        console.print("[yellow]No records found[/yellow]")
    else:
        results_table = Table(title="Records")
        results_table.add_column("ID", style="dim", no_wrap=True)
        results_table.add_column("Artist", style="cyan")
        results_table.add_column("Album")
        results_table.add_column("Format")
        results_table.add_column("Category")
        results_table.add_column("Price", justify="right")
        results_table.add_column("Stock", justify="right")
        for entry in page.data:
            results_table.add_row(
                entry.id, entry.artist, entry.album, entry.format.value,
                entry.category.value, str(entry.price), str(entry.quantity),
            )
        console.print(results_table)
    console.print(f"Page {page.page} of {page.total_pages} ({page.total} total)")


def _print_order(order: Order) -> None:
    console.print(f"\n[bold]Order {order.id}[/bold]")
    console.print(f"Status: {order.status.value}")
    console.print(f"Created: {order.created.isoformat(timespec='seconds')}")

    lines_table = Table()
    lines_table.add_column("Record", style="dim", no_wrap=True)
    lines_table.add_column("Qty", justify="right")
    lines_table.add_column("Unit price", justify="right")
    lines_table.add_column("Subtotal", justify="right")
    for line in order.lines:
        lines_table.add_row(
            line.catalog_entry_id, str(line.quantity), str(line.price_at_time), str(line.subtotal)
        )
    console.print(lines_table)
    console.print(f"[bold green]Total: {order.total_amount}[/bold green]")


def _parse_order_line(value: str) -> OrderLineRequest:
    entry_id, sep, quantity = value.rpartition(":")
    if not sep:
        entry_id, quantity = value, "1"
    try:
        return OrderLineRequest(catalog_entry_id=entry_id, quantity=int(quantity))
    except ValueError:
        raise click.BadParameter(f"expected ENTRY_ID[:QUANTITY], got {value!r}")


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', 'config_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Configuration file path'
)
@click.option(
    '--data-dir',
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory holding records.json and orders.json'
)
@click.option('--verbose', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], data_dir: Optional[Path], verbose: bool):
    """Manage a record shop's catalog and orders."""
    _setup_logging(verbose)
    ctx.obj = {"config_path": config_path, "data_dir": data_dir, "app": None}


@cli.group()
def entries():
    """Create, change and search catalog entries."""
    pass


@entries.command("add")
@click.option('--artist', required=True)
@click.option('--album', required=True)
@click.option('--price', required=True, help='Unit price, e.g. 24.99')
@click.option('--quantity', required=True, type=click.IntRange(min=0), help='Units in stock')
@click.option('--format', 'record_format', required=True,
              type=click.Choice(FORMAT_CHOICES, case_sensitive=False))
@click.option('--category', required=True,
              type=click.Choice(CATEGORY_CHOICES, case_sensitive=False))
@click.option('--mbid', help='MusicBrainz release ID to fetch the tracklist from')
@click.option('--json', 'as_json', is_flag=True, help='Print the entry as JSON')
@click.pass_context
def add_entry(ctx, artist, album, price, quantity, record_format, category, mbid, as_json):
    """Add a record to the catalog."""
    app = _get_app(ctx)
    entry = _run(app.catalog.create_entry({
        "artist": artist,
        "album": album,
        "price": price,
        "quantity": quantity,
        "format": record_format,
        "category": category,
        "mbid": mbid,
    }))
    if as_json:
        _echo_json(entry.to_dict())
        return
    console.print(f"[green]Created record {entry.id}[/green]")
    if mbid:
        console.print(f"Tracklist: {len(entry.tracklist)} tracks")


@entries.command("update")
@click.argument('entry_id')
@click.option('--artist')
@click.option('--album')
@click.option('--price')
@click.option('--quantity', type=click.IntRange(min=0))
@click.option('--format', 'record_format', type=click.Choice(FORMAT_CHOICES, case_sensitive=False))
@click.option('--category', type=click.Choice(CATEGORY_CHOICES, case_sensitive=False))
@click.option('--mbid')
@click.option('--json', 'as_json', is_flag=True, help='Print the entry as JSON')
@click.pass_context
def update_entry(ctx, entry_id, artist, album, price, quantity, record_format, category, mbid, as_json):
    """Change fields of ENTRY_ID; a new --mbid refreshes the tracklist."""
    fields = {
        "artist": artist,
        "album": album,
        "price": price,
        "quantity": quantity,
        "format": record_format,
        "category": category,
        "mbid": mbid,
    }
    fields = {name: value for name, value in fields.items() if value is not None}

    app = _get_app(ctx)
    entry = _run(app.catalog.update_entry(entry_id, fields))
    if as_json:
        _echo_json(entry.to_dict())
        return
    console.print(f"[green]Updated record {entry.id}[/green]")


@entries.command("show")
@click.argument('entry_id')
@click.option('--json', 'as_json', is_flag=True, help='Print the entry as JSON')
@click.pass_context
def show_entry(ctx, entry_id, as_json):
    """Show one catalog entry with its tracklist."""
    app = _get_app(ctx)
    entry = _run(app.catalog.get_entry(entry_id))
    if as_json:
        _echo_json(entry.to_dict())
    else:
        _print_entry(entry)


@entries.command("delete")
@click.argument('entry_id')
@click.pass_context
def delete_entry(ctx, entry_id):
    """Remove a record from the catalog."""
    app = _get_app(ctx)
    _run(app.catalog.delete_entry(entry_id))
    console.print(f"[green]Deleted record {entry_id}[/green]")


@entries.command("list")
@click.option('--query', '-q', help='Match artist, album or category')
@click.option('--artist', help='Artist contains')
@click.option('--album', help='Album contains')
@click.option('--format', 'record_format', type=click.Choice(FORMAT_CHOICES, case_sensitive=False))
@click.option('--category', type=click.Choice(CATEGORY_CHOICES, case_sensitive=False))
@click.option('--page', default=1, type=click.IntRange(min=1))
@click.option('--page-size', type=click.IntRange(min=1))
@click.option('--sort-by', default='created', type=click.Choice(ENTRY_SORT_FIELDS))
@click.option('--sort-order', default='desc', type=click.Choice(['asc', 'desc']))
@click.option('--json', 'as_json', is_flag=True, help='Print the page as JSON')
@click.pass_context
def list_entries(ctx, query, artist, album, record_format, category, page, page_size,
                 sort_by, sort_order, as_json):
    """Search the catalog."""
    app = _get_app(ctx)

    async def _find():
        criteria = CatalogCriteria(
            query=query, artist=artist, album=album, format=record_format, category=category
        )
        return await app.catalog.find_entries(
            criteria, app.page_request(page, page_size, sort_by, sort_order)
        )

    result = _run(_find())
    if as_json:
        _echo_json(result.to_dict())
    else:
        _print_entry_page(result)


@cli.group()
def orders():
    """Place and inspect orders."""
    pass


@orders.command("create")
@click.argument('lines', nargs=-1, required=True)
@click.option('--json', 'as_json', is_flag=True, help='Print the order as JSON')
@click.pass_context
def create_order(ctx, lines, as_json):
    """Place an order for LINES given as ENTRY_ID[:QUANTITY]."""
    requests: List[OrderLineRequest] = [_parse_order_line(line) for line in lines]
    app = _get_app(ctx)
    order = _run(app.orders.create_order(requests))
    if as_json:
        _echo_json(order.to_dict())
    else:
        _print_order(order)


@orders.command("show")
@click.argument('order_id')
@click.option('--json', 'as_json', is_flag=True, help='Print the order as JSON')
@click.pass_context
def show_order(ctx, order_id, as_json):
    """Show one order."""
    app = _get_app(ctx)
    order = _run(app.orders.get_order(order_id))
    if as_json:
        _echo_json(order.to_dict())
    else:
        _print_order(order)


@orders.command("list")
@click.option('--page', default=1, type=click.IntRange(min=1))
@click.option('--page-size', type=click.IntRange(min=1))
@click.option('--sort-by', default='created', type=click.Choice(ORDER_SORT_FIELDS))
@click.option('--sort-order', default='desc', type=click.Choice(['asc', 'desc']))
@click.option('--json', 'as_json', is_flag=True, help='Print the page as JSON')
@click.pass_context
def list_orders(ctx, page, page_size, sort_by, sort_order, as_json):
    """List orders."""
    app = _get_app(ctx)
    result = _run(app.orders.list_orders(app.page_request(page, page_size, sort_by, sort_order)))
    if as_json:
        _echo_json(result.to_dict())
        return

    if not result.data:
        console.print("[yellow]No orders found[/yellow]")
    else:
        orders_table = Table(title="Orders")
        orders_table.add_column("ID", style="dim", no_wrap=True)
        orders_table.add_column("Created")
        orders_table.add_column("Status")
        orders_table.add_column("Lines", justify="right")
        orders_table.add_column("Total", justify="right")
        for order in result.data:
            orders_table.add_row(
                order.id, order.created.isoformat(timespec="seconds"), order.status.value,
                str(len(order.lines)), str(order.total_amount),
            )
        console.print(orders_table)
    console.print(f"Page {result.page} of {result.total_pages} ({result.total} total)")


@cli.group("config")
def config_group():
    """Manage configuration files."""
    pass


@config_group.command("init")
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
def init_config(path: Path):
    """Write a configuration file with every default to PATH."""
    if path.exists():
        console.print(f"[red]Error: {path} already exists[/red]")
        sys.exit(1)
    try:
        create_default_config(path)
    except RecordStoreError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]Wrote default configuration to {path}[/green]")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
