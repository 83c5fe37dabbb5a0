"""Outage credit command."""

import click
from creditcalc.config import resolve_tax_rate
from creditcalc.cli.error_handling import handle_domain_error
from creditcalc.domain.credit import CreditCalculationService
from creditcalc.domain.csv_input import read_service_items
from creditcalc.domain.entities import BillingPeriod, ServiceItem
from creditcalc.domain.errors import DomainError
from creditcalc.utils.amount_parser import parse_amount
from creditcalc.utils.date_parser import parse_date


def _parse_optional(ctx, parser, value: str | None, label: str):
    if not value:
        return None
    try:
        return parser(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _display_result(result):
    click.echo("\nService Credits:")
    click.echo("-" * 96)
    click.echo(
        f"{'Service':<30} {'Billed':>7} {'Unserved':>9} {'Daily Rate':>12} "
        f"{'Credit':>11} {'Tax':>10} {'Total':>12}"
    )
    click.echo("-" * 96)
    for calc in result.calculations:
        click.echo(
            f"{calc.name:<30} {calc.total_billing_days:>7} {calc.days_without_service:>9} "
            f"{f'${calc.daily_rate:,.2f}':>12} {f'${calc.credit_amount:,.2f}':>11} "
            f"{f'${calc.tax_on_credit:,.2f}':>10} {f'${calc.total_credit_with_tax:,.2f}':>12}"
        )
    click.echo("-" * 96)
    click.echo(f"{'Total credit':<50} {f'${result.total_credit_amount:,.2f}':>20}")
    click.echo(
        f"{f'Tax on credit ({result.tax_rate}%)':<50} "
        f"{f'${result.total_tax_on_credit:,.2f}':>20}"
    )
    click.echo("=" * 96)
    click.echo(f"{'GRAND TOTAL':<50} {f'${result.grand_total:,.2f}':>20}")


@click.command("outage")
@click.argument("csv_file", required=False, type=click.Path(exists=True))
@click.option("--name", help="Service name (single service mode)")
@click.option("--billing-start", help="First day of the invoice period")
@click.option("--billing-end", help="Last day of the invoice period")
@click.option("--price", help="Price paid for the invoice period (e.g., 79.99)")
@click.option("--service-start", help="Day service actually became available")
@click.option(
    "--tax-rate",
    help="Tax percentage (overrides CREDITCALC_TAX_RATE, default 13)",
)
@click.pass_context
def outage_credit(
    ctx,
    csv_file: str | None,
    name: str | None,
    billing_start: str | None,
    billing_end: str | None,
    price: str | None,
    service_start: str | None,
    tax_rate: str | None,
):
    """Credit services that started after their billing period began.

    Read services from CSV_FILE (columns: name, billing_start, billing_end,
    price_paid, service_start) or describe a single service with options.

    Examples:
        creditcalc outage services.csv --tax-rate 13
        creditcalc outage --name "Internet" --billing-start 2024-01-01 \\
            --billing-end 2024-01-31 --price 79.99 --service-start 2024-01-10
    """
    single_options = (name, billing_start, billing_end, price, service_start)
    if csv_file and any(single_options):
        click.echo(
            "Error: Service options (--name, --price, etc.) cannot be combined with a CSV file.",
            err=True,
        )
        ctx.exit(1)

    try:
        rate = resolve_tax_rate(tax_rate)
    except ValueError as e:
        click.echo(f"Error: Invalid tax rate: {e}", err=True)
        ctx.exit(1)

    if csv_file:
        try:
            items = read_service_items(csv_file)
        except (ValueError, FileNotFoundError) as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
    elif any(single_options):
        items = [
            ServiceItem(
                name=name,
                price_paid=_parse_optional(ctx, parse_amount, price, "price"),
                billing_period=BillingPeriod(
                    start=_parse_optional(ctx, parse_date, billing_start, "billing start date"),
                    end=_parse_optional(ctx, parse_date, billing_end, "billing end date"),
                ),
                actual_service_start_date=_parse_optional(
                    ctx, parse_date, service_start, "service start date"
                ),
            )
        ]
    else:
        items = []

    service = CreditCalculationService()
    try:
        result = service.calculate(items, rate)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    _display_result(result)


def register_commands(cli):
    """Register outage command with main CLI."""
    cli.add_command(outage_credit)
