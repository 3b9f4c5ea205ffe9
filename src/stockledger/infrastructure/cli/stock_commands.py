"""CLI commands for stock moves and move history."""

from __future__ import annotations

import click

from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.move import MoveResult, MoveType
from stockledger.infrastructure.bootstrap import append_move_handler, ledger_queries


def _append(
    code: str,
    move_type: MoveType,
    qty: str,
    unit_cost: str | None = None,
    location: str | None = None,
    reference: str | None = None,
    reason: str | None = None,
    txn: str | None = None,
) -> MoveResult:
    try:
        item = ledger_queries().lookup_item(code)
        return append_move_handler().handle(
            item_id=item.id,
            move_type=move_type,
            qty=qty,
            unit_cost=unit_cost,
            location=location,
            reference=reference,
            reason=reason,
            client_transaction_id=txn,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))


def _report(code: str, result: MoveResult) -> None:
    move = result.move
    prefix = "Already applied: " if result.replayed else ""
    click.echo(
        f"{prefix}{move.move_type.value} #{move.id} {code} qty={move.qty} "
        f"@ {move.location}"
    )
    click.echo(
        f"On hand: {result.quantity_on_hand}  avg cost: {result.average_unit_cost}"
    )


def _common_options(func):
    func = click.option("--txn", default=None, help="Client transaction id (makes retries safe).")(func)
    func = click.option("--ref", "reference", default=None, help="Document reference.")(func)
    func = click.option("--location", default=None, help="Storage location.")(func)
    return func


@click.command("receive")
@click.argument("code")
@click.option("--qty", required=True, help="Quantity received (> 0).")
@click.option("--cost", required=True, help="Unit cost of this receipt.")
@_common_options
def stock_receive(
    code: str, qty: str, cost: str, location: str | None, reference: str | None, txn: str | None
) -> None:
    """Receive stock at a unit cost."""
    _report(code, _append(code, MoveType.RECEIVE, qty, cost, location, reference, txn=txn))


@click.command("issue")
@click.argument("code")
@click.option("--qty", required=True, help="Quantity issued (> 0).")
@_common_options
def stock_issue(
    code: str, qty: str, location: str | None, reference: str | None, txn: str | None
) -> None:
    """Issue stock at the current average cost."""
    _report(code, _append(code, MoveType.ISSUE, qty, None, location, reference, txn=txn))


@click.command("return")
@click.argument("code")
@click.option("--qty", required=True, help="Quantity returned (> 0).")
@_common_options
def stock_return(
    code: str, qty: str, location: str | None, reference: str | None, txn: str | None
) -> None:
    """Take stock back at the current average cost."""
    _report(code, _append(code, MoveType.RETURN, qty, None, location, reference, txn=txn))


@click.command("adjust")
@click.argument("code")
@click.option("--delta", required=True, help="Signed quantity change (non-zero).")
@click.option("--reason", default=None, help="Why the count changed.")
@_common_options
def stock_adjust(
    code: str,
    delta: str,
    reason: str | None,
    location: str | None,
    reference: str | None,
    txn: str | None,
) -> None:
    """Correct on-hand quantity by a signed delta."""
    _report(
        code,
        _append(code, MoveType.ADJUST, delta, None, location, reference, reason, txn),
    )


@click.command("history")
@click.argument("code", required=False)
@click.option("--limit", default=50, show_default=True, type=int, help="Rows to show.")
def stock_history(code: str | None, limit: int) -> None:
    """Show recent moves, newest first."""
    queries = ledger_queries()
    try:
        item_id = queries.lookup_item(code).id if code else None
        rows = queries.move_history(item_id=item_id, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No moves recorded.")
        return

    click.echo(f"{'#':>5} {'When':<17} {'SKU':<12} {'Type':<8} {'Qty':>8} {'Cost':>10} {'Location':<14} Ref")
    click.echo("-" * 90)
    for row in rows:
        click.echo(
            f"{row.id:>5} {row.created_at.strftime('%Y-%m-%d %H:%M'):<17} {row.sku:<12} "
            f"{row.move_type:<8} {str(row.qty):>8} {str(row.unit_cost):>10} "
            f"{row.location:<14} {row.reference or ''}"
        )


@click.command("locations")
@click.argument("code", required=False)
def stock_locations(code: str | None) -> None:
    """Show per-location balances for an item, or list every known location."""
    queries = ledger_queries()

    if not code:
        for location in queries.all_locations():
            click.echo(location)
        return

    try:
        item = queries.lookup_item(code)
        balances = queries.location_balances(item.id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not balances:
        click.echo(f"No moves recorded for '{item.sku}'.")
        return

    click.echo(f"{'Location':<20} {'Qty':>10}")
    click.echo("-" * 31)
    for balance in balances:
        click.echo(f"{balance.location:<20} {str(balance.qty):>10}")
