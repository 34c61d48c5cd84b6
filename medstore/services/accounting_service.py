"""
Accounting Service Layer
Prices line items, totals transactions and rolls them up into tax summaries
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, List, Optional, Any

from ..errors import ValidationError
from ..models.accounting_models import TransactionType
from ..schemas.accounting_schemas import (
    LineItem, Transaction, TransactionCreate, TaxSummary
)
from ..utils.formatting import format_date_short

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")

MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

TRANSACTION_REPORT_HEADERS = [
    "Date",
    "Type",
    "Invoice Number",
    "Customer/Supplier",
    "GST Number",
    "Total Amount",
    "Tax Amount",
    "Discount Amount",
    "Net Amount",
    "Payment Method",
    "Financial Year",
]


def to_dec(val) -> Decimal:
    try:
        return Decimal(str(val if val is not None else 0))
    except InvalidOperation:
        raise ValidationError(f"Not a number: {val!r}")


def round2(val) -> Decimal:
    return to_dec(val).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _get(item: Any, name: str, default=None):
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


@dataclass
class LineTotals:
    taxable_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


@dataclass
class TransactionTotals:
    subtotal: Decimal
    total_discount_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    lines: List[LineTotals] = field(default_factory=list)


class AccountingService:
    """Pricing and reporting rules for sales and purchases"""

    @staticmethod
    def validate_line(item: Any, line_number: int = 1) -> None:
        """Reject a line that would produce a negative or nonsensical total"""
        quantity = _get(item, "quantity")
        if quantity is None or int(quantity) != quantity or quantity < 1:
            raise ValidationError(f"Line {line_number}: quantity must be a whole number of at least 1")
        if to_dec(_get(item, "price")) < 0:
            raise ValidationError(f"Line {line_number}: price cannot be negative")
        discount = to_dec(_get(item, "discount", 0))
        if discount < 0 or discount > HUNDRED:
            raise ValidationError(f"Line {line_number}: discount must be between 0-100%")
        if to_dec(_get(item, "tax_rate", 0)) < 0:
            raise ValidationError(f"Line {line_number}: tax rate cannot be negative")

    @staticmethod
    def price_line(item: Any) -> LineTotals:
        """
        taxable = qty x price less the line discount, tax on the taxable part.
        Each step is rounded to paise before the next one uses it.
        """
        AccountingService.validate_line(item)
        gross = to_dec(_get(item, "quantity")) * to_dec(_get(item, "price"))
        discount = to_dec(_get(item, "discount", 0))
        taxable = round2(gross * (1 - discount / HUNDRED))
        tax = round2(taxable * to_dec(_get(item, "tax_rate", 0)) / HUNDRED)
        return LineTotals(taxable_amount=taxable, tax_amount=tax, total_amount=taxable + tax)

    @staticmethod
    def aggregate(items: Iterable[Any], overall_discount_pct=0) -> TransactionTotals:
        """
        Total a set of lines. The overall discount comes off the summed line
        totals and does not reduce tax already charged on the lines.
        All lines are validated before anything is summed.
        """
        items = list(items)
        overall = to_dec(overall_discount_pct)
        if overall < 0 or overall > HUNDRED:
            raise ValidationError("Total discount must be between 0-100%")
        for number, item in enumerate(items, start=1):
            AccountingService.validate_line(item, number)

        lines = [AccountingService.price_line(item) for item in items]
        subtotal = sum((line.total_amount for line in lines), Decimal("0.00"))
        discount_amount = round2(subtotal * overall / HUNDRED)
        return TransactionTotals(
            subtotal=subtotal,
            total_discount_amount=discount_amount,
            tax_amount=sum((line.tax_amount for line in lines), Decimal("0.00")),
            net_amount=subtotal - discount_amount,
            lines=lines,
        )

    @staticmethod
    def financial_year_for(d: date) -> str:
        """April-March financial year label, e.g. 2025-01-10 -> '2024-2025'"""
        start = d.year if d.month >= 4 else d.year - 1
        return f"{start}-{start + 1}"

    @staticmethod
    def financial_years(today: date, back: int = 3) -> List[str]:
        current = int(AccountingService.financial_year_for(today)[:4])
        return [f"{y}-{y + 1}" for y in range(current - back + 1, current + 2)]

    @staticmethod
    def build_transaction(
        payload: TransactionCreate,
        prescription_skipped: bool = False,
        schedule_h_count: int = 0,
        transaction_id: Optional[str] = None,
    ) -> Transaction:
        """Turn a posted transaction into a stored record, recomputing every total"""
        if not payload.items:
            raise ValidationError("Transaction must contain at least one item")
        if not payload.invoice_number.strip():
            raise ValidationError("Invoice number is required")

        totals = AccountingService.aggregate(payload.items, payload.discount_percent)
        items = [
            LineItem(
                **item.model_dump(),
                taxable_amount=line.taxable_amount,
                tax_amount=line.tax_amount,
                total_amount=line.total_amount,
            )
            for item, line in zip(payload.items, totals.lines)
        ]
        return Transaction(
            id=transaction_id or uuid.uuid4().hex,
            date=payload.date,
            type=payload.type,
            invoice_number=payload.invoice_number.strip(),
            customer_name=payload.customer_name,
            supplier_name=payload.supplier_name,
            gst_number=payload.gst_number,
            payment_method=payload.payment_method,
            financial_year=payload.financial_year or AccountingService.financial_year_for(payload.date),
            notes=payload.notes,
            items=items,
            discount_percent=to_dec(payload.discount_percent),
            total_amount=totals.subtotal,
            tax_amount=totals.tax_amount,
            discount_amount=totals.total_discount_amount,
            net_amount=totals.net_amount,
            prescription_skipped=prescription_skipped,
            schedule_h_count=schedule_h_count,
            created_at=datetime.utcnow(),
        )

    @staticmethod
    def in_period(
        txn: Transaction,
        financial_year: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> bool:
        if financial_year is not None and txn.financial_year != financial_year:
            return False
        if date_from is not None and txn.date < date_from:
            return False
        if date_to is not None and txn.date > date_to:
            return False
        return True

    @staticmethod
    def summarize(
        transactions: Iterable[Transaction],
        financial_year: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> TaxSummary:
        """Tax summary for one financial year (and optional inclusive date range)"""
        rows = [t for t in transactions
                if AccountingService.in_period(t, financial_year, date_from, date_to)]
        sales = [t for t in rows if t.type == TransactionType.SELL]
        purchases = [t for t in rows if t.type == TransactionType.PURCHASE]

        logger.debug("Summarizing %d transactions (%d sales, %d purchases) for %s", len(rows), len(sales), len(purchases), financial_year)

        zero = Decimal("0.00")
        tax_collected = sum((t.tax_amount for t in sales), zero)
        tax_paid = sum((t.tax_amount for t in purchases), zero)
        return TaxSummary(
            total_sales=sum((t.net_amount for t in sales), zero),
            total_purchases=sum((t.net_amount for t in purchases), zero),
            total_tax_collected=tax_collected,
            total_tax_paid=tax_paid,
            net_tax_liability=tax_collected - tax_paid,
            total_discounts=sum((t.discount_amount for t in rows), zero),
        )

    @staticmethod
    def parse_month(month) -> Optional[int]:
        if month in (None, ""):
            return None
        text_value = str(month).strip().lower()
        if text_value.isdigit() and 1 <= int(text_value) <= 12:
            return int(text_value)
        if text_value in MONTHS:
            return MONTHS.index(text_value) + 1
        raise ValidationError(f"Unknown month '{month}'")

    @staticmethod
    def filter_transactions(
        rows: Iterable[Transaction],
        search: Optional[str] = None,
        transaction_type: str = "all",
        month=None,
    ) -> List[Transaction]:
        if transaction_type not in ("all", TransactionType.SELL.value, TransactionType.PURCHASE.value):
            raise ValidationError(f"Unknown transaction type '{transaction_type}'")
        month_number = AccountingService.parse_month(month)
        term = (search or "").strip().lower()

        def matches(t: Transaction) -> bool:
            if not term:
                return True
            names = [t.invoice_number, t.customer_name or "", t.supplier_name or ""]
            names += [item.medicine_name for item in t.items]
            return any(term in n.lower() for n in names)

        result = []
        for t in rows:
            if transaction_type != "all" and t.type.value != transaction_type:
                continue
            if month_number is not None and t.date.month != month_number:
                continue
            if matches(t):
                result.append(t)
        return result

    @staticmethod
    def export_rows(rows: Iterable[Transaction]) -> List[dict]:
        return [
            {
                "Date": format_date_short(t.date),
                "Type": t.type.value.upper(),
                "Invoice Number": t.invoice_number,
                "Customer/Supplier": t.customer_name or t.supplier_name or "N/A",
                "GST Number": t.gst_number or "N/A",
                "Total Amount": t.total_amount,
                "Tax Amount": t.tax_amount,
                "Discount Amount": t.discount_amount,
                "Net Amount": t.net_amount,
                "Payment Method": t.payment_method,
                "Financial Year": t.financial_year,
            }
            for t in rows
        ]
