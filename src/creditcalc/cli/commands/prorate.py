"""Prorated charge command."""

import click
from creditcalc.config import resolve_tax_rate
from creditcalc.cli.error_handling import handle_domain_error
from creditcalc.domain.day_span import days_between, days_in_billing_cycle
from creditcalc.domain.entities import BillingCycle
from creditcalc.domain.errors import DomainError
from creditcalc.domain.proration import calculate_tax, prorated_amount
from creditcalc.utils.amount_parser import parse_amount
from creditcalc.utils.date_parser import parse_date


@click.command("prorate")
@click.option("--rate", required=True, help="Price of one full billing cycle (e.g., 79.99)")
@click.option("--start", "start_date", required=True, help="First day of service")
@click.option("--end", "end_date", required=True, help="Last day of service")
@click.option(
    "--cycle",
    type=click.Choice([c.value for c in BillingCycle], case_sensitive=False),
    default=BillingCycle.MONTHLY.value,
    show_default=True,
    help="Billing cycle the rate is quoted for",
)
@click.option(
    "--tax-rate",
    help="Tax percentage (overrides CREDITCALC_TAX_RATE, default 13)",
)
@click.pass_context
def prorate(ctx, rate: str, start_date: str, end_date: str, cycle: str, tax_rate: str | None):
    """Prorate a cycle rate to the days a service was actually used.

    Examples:
        creditcalc prorate --rate 79.99 --start 2024-01-10 --end 2024-01-31
        creditcalc prorate --rate 240 --start 2024-02-01 --end 2024-03-15 --cycle quarterly
    """
    try:
        amount = parse_amount(rate)
    except ValueError as e:
        click.echo(f"Error: Invalid rate: {e}", err=True)
        ctx.exit(1)

    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        tax = resolve_tax_rate(tax_rate)
    except ValueError as e:
        click.echo(f"Error: Invalid tax rate: {e}", err=True)
        ctx.exit(1)

    billing_cycle = BillingCycle(cycle.lower())
    try:
        charge = prorated_amount(amount, start, end, billing_cycle)
        used_days = days_between(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    charge_tax = calculate_tax(charge, tax)
    cycle_days = days_in_billing_cycle(billing_cycle, start)

    click.echo(f"  Days used: {used_days} of {cycle_days} ({billing_cycle.value})")
    click.echo(f"  Prorated charge: ${charge:,.2f}")
    click.echo(f"  Tax ({tax}%): ${charge_tax:,.2f}")
    click.echo(f"  Total: ${charge + charge_tax:,.2f}")


def register_commands(cli):
    """Register prorate command with main CLI."""
    cli.add_command(prorate)
