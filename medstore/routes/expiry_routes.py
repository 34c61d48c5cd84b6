from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..config import settings
from ..deps import get_store
from ..repositories.base import Store
from ..schemas import ExpiryListResponse
from ..services import expiry_service
from ..utils.csv_export import to_csv

router = APIRouter()


def _expiring_rows(store: Store, days: int, status: str, search: Optional[str], sort: str, direction: str):
    rows = expiry_service.describe_all(store.list_medicines(), warning_window_days=days)
    rows = expiry_service.filter_expiring(rows, days, status, search)
    return expiry_service.sort_medicines(rows, sort, direction)

@router.get("/", response_model=ExpiryListResponse)
def expiring_medicines(
    days: int = Query(settings.EXPIRY_WARNING_DAYS, ge=0),
    status: str = "all",
    search: Optional[str] = None,
    sort: str = "daysUntilExpiry",
    direction: str = "asc",
    store: Store = Depends(get_store),
):
    """Medicines expired or expiring within `days`, with the stat cards."""
    rows = _expiring_rows(store, days, status, search, sort, direction)
    return ExpiryListResponse(
        medicines=rows,
        stats=expiry_service.expiry_stats(rows),
        days=days,
        total=len(rows),
    )

@router.get("/export")
def export_expiry_report(
    days: int = Query(settings.EXPIRY_WARNING_DAYS, ge=0),
    status: str = "all",
    search: Optional[str] = None,
    sort: str = "daysUntilExpiry",
    direction: str = "asc",
    store: Store = Depends(get_store),
):
    rows = _expiring_rows(store, days, status, search, sort, direction)
    content = to_csv(expiry_service.EXPIRY_REPORT_HEADERS, expiry_service.expiry_report_rows(rows))
    filename = f"expiry-report-{days}days-{settings.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
