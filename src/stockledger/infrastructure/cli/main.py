import click

from stockledger.infrastructure.cli.inventory_commands import inventory_low, inventory_show
from stockledger.infrastructure.cli.invoice_commands import (
    invoice_pay,
    invoice_post,
    invoice_receipt,
    invoice_report,
    invoice_void_payment,
)
from stockledger.infrastructure.cli.item_commands import item_add, item_lookup, item_show
from stockledger.infrastructure.cli.ledger_commands import (
    ledger_reconcile,
    price_estimate,
    price_from_cost_cmd,
)
from stockledger.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_history,
    stock_issue,
    stock_locations,
    stock_receive,
    stock_return,
)
from stockledger.infrastructure.config import get_settings
from stockledger.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """Stock Ledger — weighted-average inventory costing"""
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)


@cli.group()
def item() -> None:
    """Register and look up items."""


@cli.group()
def stock() -> None:
    """Record stock moves."""


@cli.group()
def inventory() -> None:
    """Inventory valuation."""


@cli.group()
def invoice() -> None:
    """Post invoices, take payments and report on them."""


@cli.group()
def price() -> None:
    """Pricing helpers."""


@cli.group()
def ledger() -> None:
    """Ledger maintenance."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_lookup)
item.add_command(item_show)
stock.add_command(stock_adjust)
stock.add_command(stock_history)
stock.add_command(stock_issue)
stock.add_command(stock_locations)
stock.add_command(stock_receive)
stock.add_command(stock_return)
inventory.add_command(inventory_low)
inventory.add_command(inventory_show)
invoice.add_command(invoice_pay)
invoice.add_command(invoice_post)
invoice.add_command(invoice_receipt)
invoice.add_command(invoice_report)
invoice.add_command(invoice_void_payment)
price.add_command(price_estimate)
price.add_command(price_from_cost_cmd)
ledger.add_command(ledger_reconcile)
