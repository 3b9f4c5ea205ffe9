"""CLI commands for the inventory valuation view."""

from __future__ import annotations

import click

from stockledger.application.dto import InventoryViewDTO
from stockledger.application.show_inventory import LocationScope
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import ledger_queries, show_inventory_handler


def _display_view(view: InventoryViewDTO) -> None:
    click.echo(
        f"{'SKU':<12} {'Name':<20} {'Qty':>8} {'Avg cost':>10} {'Value':>12}  Locations"
    )
    click.echo("-" * 90)
    for row in view.rows:
        flag = " *" if row.low_stock else ""
        click.echo(
            f"{row.sku:<12} {row.name[:20]:<20} {str(row.quantity):>8} "
            f"{str(row.average_unit_cost):>10} {str(row.total_value):>12}  "
            f"{row.locations_text}{flag}"
        )
    click.echo("-" * 90)
    click.echo(f"{'Total':<33} {str(view.total_quantity):>8} {'':>10} {str(view.total_value):>12}")


@click.command("show")
@click.option("--search", default=None, help="Match SKU, name or location text.")
@click.option("--low", "low_only", is_flag=True, default=False, help="Only low-stock items.")
@click.option("--location", default=None, help="Restrict to one location.")
@click.option(
    "--scope",
    type=click.Choice([s.value for s in LocationScope]),
    default=LocationScope.ALL_ITEMS.value,
    show_default=True,
    help="How --location filters items.",
)
@click.option("--show-zero", is_flag=True, default=False, help="Include zero-quantity locations.")
def inventory_show(
    search: str | None,
    low_only: bool,
    location: str | None,
    scope: str,
    show_zero: bool,
) -> None:
    """Show quantity, average cost and stock value per item."""
    try:
        view = show_inventory_handler().handle(
            search=search,
            low_only=low_only,
            location=location,
            scope=scope,
            include_zero_locations=show_zero,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not view.rows:
        click.echo("No items found.")
        return

    _display_view(view)


@click.command("low")
def inventory_low() -> None:
    """List items at or below their low-stock threshold."""
    rows = ledger_queries().low_stock_items()

    if not rows:
        click.echo("No items are low on stock.")
        return

    click.echo(f"{'SKU':<12} {'On hand':>10}")
    click.echo("-" * 23)
    for row in rows:
        click.echo(f"{row.sku:<12} {str(row.quantity_on_hand):>10}")
