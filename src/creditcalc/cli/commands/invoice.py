"""Invoice item credit command."""

from datetime import date
from pathlib import Path

import click
from creditcalc.config import resolve_tax_rate
from creditcalc.cli.error_handling import handle_domain_error
from creditcalc.domain.credit import CreditCalculationService
from creditcalc.domain.csv_input import read_invoice_items
from creditcalc.domain.entities import CreditRequest, Customer, Invoice
from creditcalc.domain.errors import DomainError
from creditcalc.utils.date_parser import parse_date


def _display_result(result, invoice: Invoice):
    descriptions = {item.id: item.description for item in invoice.items}

    click.echo(f"\nInvoice {invoice.invoice_number} Credits:")
    click.echo("-" * 96)
    click.echo(
        f"{'Item':<12} {'Description':<30} {'Days':>9} {'Share':>8} "
        f"{'Original':>11} {'Credit':>11} {'Tax':>10}"
    )
    click.echo("-" * 96)
    for calc in result.calculations:
        days = f"{calc.days_credited}/{calc.days_in_billing_period}"
        click.echo(
            f"{calc.item_id:<12} {descriptions.get(calc.item_id, ''):<30.30} {days:>9} "
            f"{f'{calc.credit_percentage:.2%}':>8} {f'${calc.original_amount:,.2f}':>11} "
            f"{f'${calc.credit_amount:,.2f}':>11} {f'${calc.tax_on_credit:,.2f}':>10}"
        )
    click.echo("-" * 96)
    click.echo(f"{'Total credit':<50} {f'${result.total_credit:,.2f}':>20}")
    click.echo(
        f"{f'Tax on credit ({invoice.tax_rate}%)':<50} {f'${result.total_tax:,.2f}':>20}"
    )
    click.echo("=" * 96)
    click.echo(f"{'FINAL CREDIT':<50} {f'${result.final_credit_amount:,.2f}':>20}")
    click.echo(f"Calculated at {result.calculation_date:%Y-%m-%d %H:%M:%S %Z}")


@click.command("invoice")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option(
    "--item",
    "item_ids",
    multiple=True,
    help="Invoice item ID to credit (repeatable; default all items)",
)
@click.option("--credit-start", help="First day of a partial credit period")
@click.option("--credit-end", help="Last day of a partial credit period")
@click.option("--invoice-number", help="Invoice number (defaults to the file name)")
@click.option("--customer", default="", help="Customer name")
@click.option("--reason", default="", help="Reason for the credit")
@click.option(
    "--tax-rate",
    help="Tax percentage (overrides CREDITCALC_TAX_RATE, default 13)",
)
@click.pass_context
def invoice_credit(
    ctx,
    csv_file: str,
    item_ids: tuple[str, ...],
    credit_start: str | None,
    credit_end: str | None,
    invoice_number: str | None,
    customer: str,
    reason: str,
    tax_rate: str | None,
):
    """Credit whole or partial invoice line items.

    Read line items from CSV_FILE (columns: id, description, unit_price,
    quantity, service_start, service_end). With both --credit-start and
    --credit-end, each item is credited for that share of its service period;
    otherwise each item is credited in full.

    Examples:
        creditcalc invoice invoice.csv --item ITEM-001
        creditcalc invoice invoice.csv --item ITEM-001 --item ITEM-002 \\
            --credit-start 2024-01-10 --credit-end 2024-01-15
    """
    if bool(credit_start) != bool(credit_end):
        click.echo(
            "Error: --credit-start and --credit-end must be given together.", err=True
        )
        ctx.exit(1)

    try:
        rate = resolve_tax_rate(tax_rate)
    except ValueError as e:
        click.echo(f"Error: Invalid tax rate: {e}", err=True)
        ctx.exit(1)

    start = end = None
    if credit_start:
        try:
            start = parse_date(credit_start)
            end = parse_date(credit_end)
        except ValueError as e:
            click.echo(f"Error: Invalid credit date: {e}", err=True)
            ctx.exit(1)

    try:
        items = read_invoice_items(csv_file)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    invoice_id = invoice_number or Path(csv_file).stem
    today = date.today()
    invoice = Invoice(
        id=invoice_id,
        customer=Customer(id=customer or "customer", name=customer),
        invoice_number=invoice_id,
        invoice_date=today,
        due_date=today,
        items=tuple(items),
        tax_rate=rate,
    )
    request = CreditRequest(
        invoice_id=invoice.id,
        customer_id=invoice.customer.id,
        credit_reason=reason,
        request_date=today,
        items_to_credit=item_ids or tuple(item.id for item in items),
        credit_start_date=start,
        credit_end_date=end,
        is_partial_credit=start is not None,
    )

    service = CreditCalculationService()
    try:
        result = service.calculate_invoice_credit(invoice, request)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not result.calculations:
        click.echo("No matching invoice items found.")
        return

    _display_result(result, invoice)


def register_commands(cli):
    """Register invoice command with main CLI."""
    cli.add_command(invoice_credit)
