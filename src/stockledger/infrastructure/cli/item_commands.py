"""CLI commands for item registration and lookup."""

from __future__ import annotations

import click

from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.item import Item
from stockledger.infrastructure.bootstrap import ledger_queries, register_item_handler


def _display_item(item: Item) -> None:
    click.echo(f"Item #{item.id}  {item.sku}  {item.name}")
    click.echo(f"  On hand:   {item.quantity_on_hand} {item.unit_of_measure or ''}".rstrip())
    click.echo(f"  Avg cost:  {item.average_unit_cost}")
    if item.low_stock_threshold is not None:
        flag = "  (LOW)" if item.is_low_stock else ""
        click.echo(f"  Threshold: {item.low_stock_threshold}{flag}")
    if item.barcode:
        click.echo(f"  Barcode:   {item.barcode}")
    if item.purchase_price is not None:
        click.echo(f"  Purchase:  {item.purchase_price}")


@click.command("add")
@click.option("--sku", required=True, help="Stock-keeping unit code (unique).")
@click.option("--name", default="", help="Display name (defaults to the SKU).")
@click.option("--threshold", default=None, help="Low-stock threshold.")
@click.option("--uom", default=None, help="Unit of measure, e.g. pcs or kg.")
@click.option("--barcode", default=None, help="Barcode for lookup.")
@click.option("--purchase-price", default=None, help="Purchase price used for estimates.")
@click.option("--gst", default=None, help="GST percent.")
@click.option("--margin", default=None, help="Margin percent.")
def item_add(
    sku: str,
    name: str,
    threshold: str | None,
    uom: str | None,
    barcode: str | None,
    purchase_price: str | None,
    gst: str | None,
    margin: str | None,
) -> None:
    """Register a new item."""
    handler = register_item_handler()

    try:
        item = handler.handle(
            sku=sku,
            name=name,
            low_stock_threshold=threshold,
            unit_of_measure=uom,
            barcode=barcode,
            purchase_price=purchase_price,
            gst_percent=gst,
            margin_percent=margin,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{item.id} '{item.sku}' registered")


@click.command("show")
@click.argument("code")
def item_show(code: str) -> None:
    """Show an item by SKU or barcode."""
    try:
        item = ledger_queries().lookup_item(code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_item(item)


@click.command("lookup")
@click.argument("code")
def item_lookup(code: str) -> None:
    """Print the item id for a SKU or barcode."""
    try:
        item = ledger_queries().lookup_item(code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(item.id)
