"""CLI commands that move stock or show balances."""

from __future__ import annotations

import click

from stockledger.application.adjust_stock import AdjustStockHandler
from stockledger.application.count_stock import CountStockHandler
from stockledger.application.receive_stock import ReceiveStockHandler
from stockledger.application.ship_stock import ShipStockHandler
from stockledger.application.show_balance import ShowBalanceHandler
from stockledger.application.transfer_stock import TransferStockHandler
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.value_objects import StockLocation
from stockledger.infrastructure.bootstrap import StockServices
from stockledger.infrastructure.cli.output import (
    check_outcome,
    echo_balance_table,
    echo_entries,
)

product_option = click.option("--product", required=True, help="Product ID.")
warehouse_option = click.option("--warehouse", required=True, help="Warehouse ID.")
location_option = click.option(
    "--location", default=None, help="Location within the warehouse (default bucket if omitted)."
)
user_option = click.option("--by", "performed_by", required=True, help="User performing the action.")


@click.command("receive")
@product_option
@warehouse_option
@location_option
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option("--unit-cost", default=None, help="Cost per unit, e.g. 4.50.")
@click.option("--reference", default=None, help="Delivery or PO reference.")
@user_option
@click.pass_obj
def stock_receive(
    services: StockServices,
    product: str,
    warehouse: str,
    location: str | None,
    quantity: int,
    unit_cost: str | None,
    reference: str | None,
    performed_by: str,
) -> None:
    """Record goods received into a location."""
    handler = ReceiveStockHandler(services.ledger)
    try:
        outcome = handler.handle(
            product, warehouse, quantity, performed_by,
            location_id=location, reference_id=reference, unit_cost=unit_cost,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    echo_entries(outcome.entries)


@click.command("ship")
@product_option
@warehouse_option
@location_option
@click.option("--quantity", required=True, type=int, help="Units shipped.")
@click.option("--reference", default=None, help="Sales order reference.")
@user_option
@click.pass_obj
def stock_ship(
    services: StockServices,
    product: str,
    warehouse: str,
    location: str | None,
    quantity: int,
    reference: str | None,
    performed_by: str,
) -> None:
    """Record goods shipped out of a location."""
    handler = ShipStockHandler(services.ledger, services.validator)
    try:
        outcome = handler.handle(
            product, warehouse, quantity, performed_by,
            location_id=location, reference_id=reference,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    echo_entries(outcome.entries)


@click.command("adjust")
@product_option
@warehouse_option
@location_option
@click.option("--delta", required=True, type=int, help="Signed correction, e.g. -3.")
@click.option("--reason", default=None, help="Why the adjustment is needed.")
@user_option
@click.pass_obj
def stock_adjust(
    services: StockServices,
    product: str,
    warehouse: str,
    location: str | None,
    delta: int,
    reason: str | None,
    performed_by: str,
) -> None:
    """Correct a balance up or down."""
    handler = AdjustStockHandler(services.ledger, services.validator)
    try:
        outcome = handler.handle(
            product, warehouse, delta, performed_by, location_id=location, reason=reason
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    echo_entries(outcome.entries)


@click.command("count")
@product_option
@warehouse_option
@location_option
@click.option("--counted", required=True, type=int, help="Units physically counted.")
@user_option
@click.pass_obj
def stock_count(
    services: StockServices,
    product: str,
    warehouse: str,
    location: str | None,
    counted: int,
    performed_by: str,
) -> None:
    """Replace a balance with a physical count."""
    handler = CountStockHandler(services.ledger)
    try:
        outcome = handler.handle(product, warehouse, counted, performed_by, location_id=location)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    echo_entries(outcome.entries)


@click.command("transfer")
@product_option
@click.option("--from-warehouse", required=True, help="Source warehouse ID.")
@click.option("--from-location", default=None, help="Source location.")
@click.option("--to-warehouse", required=True, help="Destination warehouse ID.")
@click.option("--to-location", default=None, help="Destination location.")
@click.option("--quantity", required=True, type=int, help="Units to move.")
@user_option
@click.pass_obj
def stock_transfer(
    services: StockServices,
    product: str,
    from_warehouse: str,
    from_location: str | None,
    to_warehouse: str,
    to_location: str | None,
    quantity: int,
    performed_by: str,
) -> None:
    """Move stock between two locations."""
    handler = TransferStockHandler(services.ledger, services.validator)
    try:
        outcome = handler.handle(
            product,
            StockLocation(from_warehouse, from_location),
            StockLocation(to_warehouse, to_location),
            quantity,
            performed_by,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    echo_entries(outcome.entries)


@click.command("balance")
@click.option("--product", default=None, help="Product ID (all products if omitted).")
@click.option("--warehouse", default=None, help="Warehouse ID.")
@location_option
@click.option("--aggregate", is_flag=True, default=False, help="Sum all locations of the warehouse.")
@click.pass_obj
def stock_balance(
    services: StockServices,
    product: str | None,
    warehouse: str | None,
    location: str | None,
    aggregate: bool,
) -> None:
    """Show stock balances."""
    handler = ShowBalanceHandler(services.balances)

    if aggregate or location:
        if not product or not warehouse:
            raise click.ClickException("--product and --warehouse are required here")
        try:
            balances = [handler.handle(product, warehouse, location, aggregate=aggregate)]
        except DomainException as exc:
            raise click.ClickException(str(exc))
    else:
        balances = handler.list_all(product, warehouse)

    if not balances:
        click.echo("No stock balances found.")
        return
    echo_balance_table(balances)
