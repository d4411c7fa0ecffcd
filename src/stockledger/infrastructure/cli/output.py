"""Shared output helpers for the CLI commands."""

from __future__ import annotations

import click

from stockledger.application.dto import BalanceDTO, LedgerEntryDTO
from stockledger.domain.service.validation import ValidationResult


def check_outcome(validation: ValidationResult) -> None:
    """Echo warnings, then abort with the errors if there are any."""
    for warning in validation.warnings:
        click.echo(f"Warning: {warning}", err=True)
    if not validation.is_valid:
        raise click.ClickException("; ".join(issue.message for issue in validation.errors))


def echo_entries(entries: tuple[LedgerEntryDTO, ...] | list[LedgerEntryDTO]) -> None:
    for entry in entries:
        click.echo(
            f"{entry.id}  {entry.transaction_type:<12} {entry.location:<20} "
            f"qty={entry.quantity:<6} {entry.previous_balance} -> {entry.new_balance}"
        )


def echo_balance_table(balances: list[BalanceDTO]) -> None:
    click.echo(
        f"{'Product':<12} {'Warehouse':<10} {'Location':<10} "
        f"{'Total':>8} {'Reserved':>10} {'Available':>10}"
    )
    click.echo("-" * 65)
    for b in balances:
        click.echo(
            f"{b.product_id:<12} {b.warehouse_id:<10} {b.location:<10} "
            f"{b.total:>8} {b.reserved:>10} {b.available:>10}"
        )
