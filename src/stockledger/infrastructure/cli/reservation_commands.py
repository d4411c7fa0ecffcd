"""CLI commands for stock reservations."""

from __future__ import annotations

import click

from stockledger.application.consume_reservation import ConsumeReservationHandler
from stockledger.application.expire_reservations import ExpireReservationsHandler
from stockledger.application.release_reservation import ReleaseReservationHandler
from stockledger.application.reserve_stock import ReserveStockHandler
from stockledger.application.show_reservations import ShowReservationsHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import StockServices
from stockledger.infrastructure.cli.output import check_outcome, echo_entries


@click.command("create")
@click.option("--product", required=True, help="Product ID.")
@click.option("--warehouse", required=True, help="Warehouse ID.")
@click.option("--location", default=None, help="Location within the warehouse.")
@click.option("--quantity", required=True, type=int, help="Units to hold.")
@click.option("--ttl", "ttl_minutes", default=None, type=int, help="Minutes until the hold expires.")
@click.option("--by", "reserved_by", required=True, help="User placing the hold.")
@click.pass_obj
def reservation_create(
    services: StockServices,
    product: str,
    warehouse: str,
    location: str | None,
    quantity: int,
    ttl_minutes: int | None,
    reserved_by: str,
) -> None:
    """Reserve available stock."""
    handler = ReserveStockHandler(services.reservations, services.state.clock)
    try:
        outcome = handler.handle(
            product, warehouse, quantity, reserved_by,
            location_id=location, ttl_minutes=ttl_minutes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    click.echo(f"Reservation {outcome.reservation.id} created ({quantity} units).")


@click.command("release")
@click.option("--id", "reservation_id", required=True, help="Reservation ID.")
@click.option("--by", "released_by", required=True, help="User releasing the hold.")
@click.pass_obj
def reservation_release(services: StockServices, reservation_id: str, released_by: str) -> None:
    """Release a reservation back to available stock."""
    handler = ReleaseReservationHandler(services.reservations)
    try:
        outcome = handler.handle(reservation_id, released_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    click.echo(f"Reservation {reservation_id} released.")


@click.command("consume")
@click.option("--id", "reservation_id", required=True, help="Reservation ID.")
@click.option("--reference", default=None, help="Shipment or order reference.")
@click.option("--by", "consumed_by", required=True, help="User shipping the goods.")
@click.pass_obj
def reservation_consume(
    services: StockServices, reservation_id: str, reference: str | None, consumed_by: str
) -> None:
    """Ship the units held by a reservation."""
    handler = ConsumeReservationHandler(services.reservations)
    try:
        outcome = handler.handle(reservation_id, consumed_by, reference_id=reference)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    check_outcome(outcome.validation)
    echo_entries(outcome.entries)


@click.command("expire")
@click.pass_obj
def reservation_expire(services: StockServices) -> None:
    """Expire every reservation past its deadline."""
    count = ExpireReservationsHandler(services.reservations).handle()
    click.echo(f"Expired {count} reservation(s).")


@click.command("list")
@click.option("--product", required=True, help="Product ID.")
@click.option("--warehouse", default=None, help="Warehouse ID.")
@click.pass_obj
def reservation_list(services: StockServices, product: str, warehouse: str | None) -> None:
    """List active reservations for a product."""
    lines = ShowReservationsHandler(services.reservations).handle(product, warehouse)
    if not lines:
        click.echo("No active reservations.")
        return
    click.echo(f"{'ID':<40} {'Location':<20} {'Qty':>6} {'By':<12} {'Expires'}")
    click.echo("-" * 95)
    for r in lines:
        click.echo(
            f"{r.id:<40} {r.location:<20} {r.quantity:>6} {r.reserved_by:<12} {r.expires_at or '-'}"
        )
