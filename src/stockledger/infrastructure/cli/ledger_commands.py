"""CLI commands for the ledger itself."""

from __future__ import annotations

import click

from stockledger.application.show_ledger import ShowLedgerHandler
from stockledger.infrastructure.bootstrap import StockServices


@click.command("history")
@click.option("--product", required=True, help="Product ID.")
@click.option("--warehouse", default=None, help="Warehouse ID.")
@click.option("--limit", default=50, show_default=True, type=int, help="Maximum entries shown.")
@click.pass_obj
def ledger_history(
    services: StockServices, product: str, warehouse: str | None, limit: int
) -> None:
    """Show the newest ledger entries for a product."""
    lines = ShowLedgerHandler(services.ledger, services.balances).handle(
        product, warehouse, limit
    )
    if not lines:
        click.echo("No ledger entries found.")
        return

    click.echo(
        f"{'Date':<21} {'Type':<13} {'Location':<20} {'Qty':>6} "
        f"{'Before':>7} {'After':>7}  {'By':<10} {'Reference'}"
    )
    click.echo("-" * 100)
    for e in lines:
        click.echo(
            f"{e.date:<21} {e.transaction_type:<13} {e.location:<20} {e.quantity:>6} "
            f"{e.previous_balance:>7} {e.new_balance:>7}  {e.performed_by:<10} {e.reference}"
        )


@click.command("verify")
@click.pass_obj
def ledger_verify(services: StockServices) -> None:
    """Replay the ledger and check every stored balance against it."""
    problems = ShowLedgerHandler(services.ledger, services.balances).verify()
    if problems:
        for line in problems:
            click.echo(line)
        raise click.ClickException(f"{len(problems)} problem(s) found")
    click.echo("Ledger and balances are consistent.")
