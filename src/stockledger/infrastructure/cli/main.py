import dataclasses
import logging
from pathlib import Path

import click

from stockledger.domain.exceptions import (
    ConsistencyError,
    DomainException,
    StockSystemError,
)
from stockledger.infrastructure.bootstrap import build_services
from stockledger.infrastructure.cli.ledger_commands import ledger_history, ledger_verify
from stockledger.infrastructure.cli.reservation_commands import (
    reservation_consume,
    reservation_create,
    reservation_expire,
    reservation_list,
    reservation_release,
)
from stockledger.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_balance,
    stock_count,
    stock_receive,
    stock_ship,
    stock_transfer,
)
from stockledger.infrastructure.config import Settings
from stockledger.infrastructure.logging_setup import configure_logging

logger = logging.getLogger(__name__)


class StockLedgerGroup(click.Group):
    """Reports storage and consistency failures as CLI errors."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (StockSystemError, ConsistencyError) as exc:
            logger.error("Command failed: %s", exc)
            raise click.ClickException(str(exc)) from exc


@click.group(cls=StockLedgerGroup)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding stock.json (overrides STOCKLEDGER_DATA_DIR).",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None) -> None:
    """Stock ledger: transactions, balances and reservations"""
    try:
        settings = Settings.from_env()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    if data_dir is not None:
        settings = dataclasses.replace(settings, data_dir=data_dir)
    configure_logging(settings.log_level)
    ctx.obj = build_services(settings)


@cli.group()
def stock() -> None:
    """Move stock and show balances."""


@cli.group()
def reservation() -> None:
    """Manage stock reservations."""


@cli.group()
def ledger() -> None:
    """Inspect the transaction ledger."""


# Register subcommands
stock.add_command(stock_adjust)
stock.add_command(stock_balance)
stock.add_command(stock_count)
stock.add_command(stock_receive)
stock.add_command(stock_ship)
stock.add_command(stock_transfer)
reservation.add_command(reservation_consume)
reservation.add_command(reservation_create)
reservation.add_command(reservation_expire)
reservation.add_command(reservation_list)
reservation.add_command(reservation_release)
ledger.add_command(ledger_history)
ledger.add_command(ledger_verify)
