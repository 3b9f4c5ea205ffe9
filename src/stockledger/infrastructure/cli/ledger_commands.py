"""CLI commands for ledger maintenance and pricing helpers."""

from __future__ import annotations

import click

from stockledger.domain.exceptions import DomainException
from stockledger.domain.service.pricing import price_from_cost
from stockledger.infrastructure.bootstrap import (
    ledger_queries,
    quote_estimate_handler,
    reconcile_ledger_handler,
)


@click.command("reconcile")
@click.argument("code", required=False)
def ledger_reconcile(code: str | None) -> None:
    """Replay move history and compare it with stored aggregates."""
    try:
        item_id = ledger_queries().lookup_item(code).id if code else None
        report = reconcile_ledger_handler().handle(item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not report:
        click.echo("Ledger is consistent.")
        return

    for item_id, problems in report.items():
        click.echo(f"Item {item_id}:")
        for problem in problems:
            click.echo(f"  - {problem}")
    raise SystemExit(1)


@click.command("from-cost")
@click.argument("base_cost")
@click.option("--gst", default="0", show_default=True, help="GST percent.")
@click.option("--margin", default="0", show_default=True, help="Margin percent.")
def price_from_cost_cmd(base_cost: str, gst: str, margin: str) -> None:
    """Selling price: ceil(ceil(cost * (1 + gst%)) * (1 + margin%))."""
    try:
        click.echo(price_from_cost(base_cost, gst, margin))
    except DomainException as exc:
        raise click.ClickException(str(exc))


def _parse_basket(raw: str) -> list[tuple[str, int]]:
    """Parse 'SKU:Qty,SKU:Qty' into (code, qty) pairs."""
    basket: list[tuple[str, int]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'SKU:Quantity'."
            )
        code, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{code}'."
            )
        basket.append((code.strip(), qty))
    return basket


@click.command("estimate")
@click.option("--items", required=True, help="Items as 'SKU:Qty,SKU:Qty'.")
def price_estimate(items: str) -> None:
    """Quote a basket without moving stock."""
    try:
        estimate = quote_estimate_handler().handle(_parse_basket(items))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"  {'SKU':<12} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*44}")
    for line in estimate.lines:
        click.echo(f"  {line.sku:<12} {line.qty:>5} {line.unit_price:>12} {line.line_total:>12}")
    click.echo(f"  {'-'*44}")
    click.echo(f"  {'Estimate Total':<18} {estimate.total:>26}")
