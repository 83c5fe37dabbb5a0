"""CSV readers for calculation input."""

import csv
from datetime import date
from pathlib import Path
from typing import Optional

from creditcalc.domain.entities import BillingPeriod, InvoiceItem, ServiceItem
from creditcalc.utils.amount_parser import parse_amount
from creditcalc.utils.date_parser import parse_date

SERVICE_COLUMNS = ("name", "billing_start", "billing_end", "price_paid", "service_start")
INVOICE_ITEM_COLUMNS = (
    "id",
    "description",
    "unit_price",
    "quantity",
    "service_start",
    "service_end",
)


def _read_rows(csv_file_path: str, required_columns: tuple[str, ...]) -> list[tuple[int, dict]]:
    """Read CSV rows as (row number, stripped values) pairs.

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
        ValueError: If the file has no header or lacks required columns
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)

        csv_columns = reader.fieldnames
        if csv_columns is None:
            raise ValueError("CSV file has no columns")

        columns = {col.strip().lower() for col in csv_columns}
        missing_columns = [col for col in required_columns if col not in columns]
        if missing_columns:
            raise ValueError(
                f"CSV file missing required columns: {', '.join(missing_columns)}"
            )

        rows = []
        # Start at 2 (header is row 1)
        for row_num, row in enumerate(reader, start=2):
            values = {
                key.strip().lower(): (value.strip() if value else None)
                for key, value in row.items()
                if key is not None
            }
            if not any(values.values()):
                continue
            rows.append((row_num, values))
        return rows


def _optional_date(row_num: int, value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValueError(f"Row {row_num}: {e}") from e


def read_service_items(csv_file_path: str) -> list[ServiceItem]:
    """Read outage-credit services from a CSV file.

    Blank cells become missing fields so that calculation-time validation
    can report all of them together.

    Args:
        csv_file_path: Path to a CSV file with columns name, billing_start,
            billing_end, price_paid, service_start

    Returns:
        Service items in file order

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
        ValueError: If a column is missing or a date or amount can't be parsed
    """
    items = []
    for row_num, values in _read_rows(csv_file_path, SERVICE_COLUMNS):
        price = None
        if values.get("price_paid"):
            try:
                price = parse_amount(values["price_paid"])
            except ValueError as e:
                raise ValueError(f"Row {row_num}: {e}") from e

        items.append(
            ServiceItem(
                name=values.get("name"),
                price_paid=price,
                billing_period=BillingPeriod(
                    start=_optional_date(row_num, values.get("billing_start")),
                    end=_optional_date(row_num, values.get("billing_end")),
                ),
                actual_service_start_date=_optional_date(
                    row_num, values.get("service_start")
                ),
            )
        )
    return items


def read_invoice_items(csv_file_path: str) -> list[InvoiceItem]:
    """Read invoice line items from a CSV file.

    Quantity defaults to 1 when blank. Every other column is required.

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
        ValueError: If a column or value is missing or can't be parsed
    """
    items = []
    for row_num, values in _read_rows(csv_file_path, INVOICE_ITEM_COLUMNS):
        for column in ("id", "unit_price", "service_start", "service_end"):
            if not values.get(column):
                raise ValueError(f"Row {row_num}: Missing {column}")

        try:
            unit_price = parse_amount(values["unit_price"])
            quantity = int(values.get("quantity") or 1)
            service_start = parse_date(values["service_start"])
            service_end = parse_date(values["service_end"])
        except ValueError as e:
            raise ValueError(f"Row {row_num}: {e}") from e

        items.append(
            InvoiceItem(
                id=values["id"],
                description=values.get("description") or "",
                unit_price=unit_price,
                quantity=quantity,
                service_start_date=service_start,
                service_end_date=service_end,
            )
        )
    return items
