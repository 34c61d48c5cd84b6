"""
Expiry / stock classification.

Everything here is a pure function of the medicine record and a calendar
date. Nothing is cached: the flags are derived again on every read so they
can never go stale across a day boundary.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from ..config import settings
from ..errors import ValidationError
from ..schemas.pharmacy_schemas import Medicine, MedicineResponse, InventoryStats, ExpiryStats
from ..utils.formatting import format_currency, format_date


class Severity(str, Enum):
    EXPIRED = "Expired"
    CRITICAL = "Critical"
    WARNING = "Warning"
    NORMAL = "Normal"


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW = "low"
    IN_STOCK = "in_stock"


INVENTORY_TABS = ("all", "lowStock", "expiring", "scheduleH")
EXPIRY_FILTERS = ("all", "expired", "critical", "warning")

# UI column -> attribute
SORT_FIELDS = {
    "name": "name",
    "stock": "stock",
    "price": "price",
    "supplier": "supplier",
    "batch": "batch",
    "expiryDate": "expiry_date",
    "expiry_date": "expiry_date",
    "daysUntilExpiry": "days_until_expiry",
    "days_until_expiry": "days_until_expiry",
}


@dataclass(frozen=True)
class ExpiryStatus:
    days_until_expiry: int
    is_expired: bool
    is_expiring_soon: bool
    is_low_stock: bool
    severity: Severity


def as_date(value) -> date:
    """Reduce a date, datetime or ISO string to a calendar date (midnight)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(settings.TIMEZONE))
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise ValidationError(f"Invalid date: {value!r}")


def days_until_expiry(expiry_date, today=None) -> int:
    today = as_date(today) if today is not None else settings.today()
    return (as_date(expiry_date) - today).days


def severity_for(days: int, critical_days: Optional[int] = None, warning_days: Optional[int] = None) -> Severity:
    critical_days = settings.EXPIRY_CRITICAL_DAYS if critical_days is None else critical_days
    warning_days = settings.EXPIRY_WARNING_DAYS if warning_days is None else warning_days
    if days < 0:
        return Severity.EXPIRED
    if days <= critical_days:
        return Severity.CRITICAL
    if days <= warning_days:
        return Severity.WARNING
    return Severity.NORMAL


def is_low_stock(stock: int, threshold: Optional[int] = None) -> bool:
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return stock < threshold


def stock_status(stock: int, threshold: Optional[int] = None) -> StockStatus:
    if stock == 0:
        return StockStatus.OUT_OF_STOCK
    if is_low_stock(stock, threshold):
        return StockStatus.LOW
    return StockStatus.IN_STOCK


def classify(expiry_date, today=None, stock: int = 0,
             low_stock_threshold: Optional[int] = None,
             warning_window_days: Optional[int] = None) -> ExpiryStatus:
    window = settings.EXPIRY_WARNING_DAYS if warning_window_days is None else warning_window_days
    if window < 0:
        raise ValidationError("Warning window must not be negative")
    days = days_until_expiry(expiry_date, today)
    return ExpiryStatus(
        days_until_expiry=days,
        is_expired=days < 0,
        is_expiring_soon=0 <= days <= window,
        is_low_stock=is_low_stock(stock, low_stock_threshold),
        severity=severity_for(days),
    )


def describe(medicine: Medicine, today=None, warning_window_days: Optional[int] = None) -> MedicineResponse:
    """Attach the derived fields to a stored medicine."""
    status = classify(medicine.expiry_date, today, medicine.stock,
                      warning_window_days=warning_window_days)
    return MedicineResponse(
        **medicine.model_dump(),
        days_until_expiry=status.days_until_expiry,
        is_expired=status.is_expired,
        is_low_stock=status.is_low_stock,
        is_expiring_soon=status.is_expiring_soon,
        severity=status.severity.value,
        stock_status=stock_status(medicine.stock).value,
        total_value=(Decimal(medicine.stock) * medicine.price).quantize(Decimal("0.01")),
    )


def describe_all(medicines: Iterable[Medicine], today=None, warning_window_days=None) -> List[MedicineResponse]:
    today = as_date(today) if today is not None else settings.today()
    return [describe(m, today, warning_window_days) for m in medicines]


def _matches(row: MedicineResponse, search: Optional[str]) -> bool:
    if not search:
        return True
    term = search.strip().lower()
    return (term in row.name.lower()
            or term in (row.supplier or "").lower()
            or term in (row.batch or "").lower())


def filter_inventory(rows: Iterable[MedicineResponse], search: Optional[str] = None, tab: str = "all") -> List[MedicineResponse]:
    if tab not in INVENTORY_TABS:
        raise ValidationError(f"Unknown inventory tab '{tab}'")
    filtered = [r for r in rows if _matches(r, search)]
    if tab == "lowStock":
        filtered = [r for r in filtered if r.is_low_stock]
    elif tab == "expiring":
        filtered = [r for r in filtered if r.is_expiring_soon]
    elif tab == "scheduleH":
        filtered = [r for r in filtered if r.schedule == "H"]
    return filtered


def filter_expiring(rows: Iterable[MedicineResponse], window: Optional[int] = None,
                    status: str = "all", search: Optional[str] = None) -> List[MedicineResponse]:
    """Medicines already expired or expiring inside the window."""
    window = settings.EXPIRY_WARNING_DAYS if window is None else window
    if status not in EXPIRY_FILTERS:
        raise ValidationError(f"Unknown expiry filter '{status}'")
    filtered = [r for r in rows if r.days_until_expiry <= window and _matches(r, search)]
    if status == "expired":
        filtered = [r for r in filtered if r.severity == Severity.EXPIRED.value]
    elif status == "critical":
        filtered = [r for r in filtered if r.severity == Severity.CRITICAL.value]
    elif status == "warning":
        filtered = [r for r in filtered if r.severity == Severity.WARNING.value]
    return filtered


def sort_medicines(rows: Iterable[MedicineResponse], field: str = "name", direction: str = "asc") -> List[MedicineResponse]:
    attr = SORT_FIELDS.get(field)
    if attr is None:
        raise ValidationError(f"Cannot sort by '{field}'")
    if direction not in ("asc", "desc"):
        raise ValidationError("Sort direction must be 'asc' or 'desc'")

    def key(row):
        value = getattr(row, attr)
        return value.lower() if isinstance(value, str) else value

    return sorted(rows, key=key, reverse=direction == "desc")


def inventory_stats(rows: Iterable[MedicineResponse]) -> InventoryStats:
    rows = list(rows)
    return InventoryStats(
        total_medicines=len(rows),
        low_stock_count=sum(1 for r in rows if r.is_low_stock),
        expiring_soon_count=sum(1 for r in rows if r.is_expiring_soon),
        schedule_h_count=sum(1 for r in rows if r.schedule == "H"),
    )


def expiry_stats(rows: Iterable[MedicineResponse]) -> ExpiryStats:
    rows = list(rows)
    return ExpiryStats(
        expiring_15_days=sum(1 for r in rows if 0 < r.days_until_expiry <= 15),
        expiring_30_days=sum(1 for r in rows if 0 < r.days_until_expiry <= 30),
        expired=sum(1 for r in rows if r.is_expired),
        total_value=sum((r.total_value for r in rows), Decimal("0.00")),
    )


EXPIRY_REPORT_HEADERS = [
    "Medicine Name",
    "Batch Number",
    "Supplier",
    "Expiry Date",
    "Days Until Expiry",
    "Current Stock",
    "Price per Unit",
    "Total Value",
    "Schedule",
    "Status",
]


def expiry_report_rows(rows: Iterable[MedicineResponse]) -> List[dict]:
    return [
        {
            "Medicine Name": r.name,
            "Batch Number": r.batch,
            "Supplier": r.supplier,
            "Expiry Date": format_date(r.expiry_date),
            "Days Until Expiry": r.days_until_expiry,
            "Current Stock": r.stock,
            "Price per Unit": format_currency(r.price),
            "Total Value": format_currency(r.total_value),
            "Schedule": r.schedule or "Regular",
            "Status": r.severity,
        }
        for r in rows
    ]
