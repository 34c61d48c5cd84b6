from fastapi import APIRouter, Depends

from ..config import settings
from ..deps import get_store
from ..repositories.base import Store
from ..schemas import DashboardStats
from ..services import expiry_service

router = APIRouter()

@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(store: Store = Depends(get_store)):
    today = settings.today()
    rows = expiry_service.describe_all(store.list_medicines(), today)
    todays = store.list_transactions(date_from=today, date_to=today)
    return DashboardStats(
        today_transactions=len(todays),
        low_stock_alerts=sum(1 for r in rows if r.is_low_stock),
        expiring_medicines=sum(1 for r in rows if r.is_expiring_soon),
        total_inventory=sum(r.stock for r in rows),
    )
