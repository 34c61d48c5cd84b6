"""
Accounting Routes
Transaction register, tax summary and CSV export per financial year
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..config import settings
from ..deps import get_store, get_transaction_service
from ..repositories.base import Store
from ..schemas import Transaction, TransactionCreate, TaxSummary, TransactionListResponse
from ..services.accounting_service import AccountingService, TRANSACTION_REPORT_HEADERS
from ..services.transaction_service import TransactionService
from ..utils.csv_export import to_csv

router = APIRouter(prefix="/accounting", tags=["Accounting"])


def _period(financial_year: Optional[str]) -> str:
    return financial_year or AccountingService.financial_year_for(settings.today())

# ============================================================================
# TRANSACTIONS
# ============================================================================

@router.get("/transactions", response_model=TransactionListResponse)
def get_transactions(
    financial_year: Optional[str] = Query(None, alias="financialYear"),
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    month: Optional[str] = None,
    search: Optional[str] = None,
    type: str = "all",
    store: Store = Depends(get_store),
):
    """
    Transactions of one financial year. The tax summary covers the whole
    period (year plus optional date range); month, search and type only
    narrow the returned list.
    """
    rows = store.list_transactions(_period(financial_year), from_date, to_date)
    summary = AccountingService.summarize(rows, _period(financial_year), from_date, to_date)
    rows = AccountingService.filter_transactions(rows, search, type, month)
    return TransactionListResponse(transactions=rows, tax_summary=summary, total=len(rows))

@router.post("/transactions", response_model=Transaction, status_code=201)
def create_transaction(
    txn_in: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service),
):
    """Record a transaction; totals are recomputed from the items"""
    return service.record(txn_in)

@router.get("/transactions/{transaction_id}", response_model=Transaction)
def get_transaction(transaction_id: str, store: Store = Depends(get_store)):
    return store.get_transaction(transaction_id)

@router.delete("/transactions/{transaction_id}")
def delete_transaction(transaction_id: str, store: Store = Depends(get_store)):
    store.delete_transaction(transaction_id)
    return {"status": "ok"}

# ============================================================================
# REPORTS
# ============================================================================

@router.get("/summary", response_model=TaxSummary)
def get_tax_summary(
    financial_year: Optional[str] = Query(None, alias="financialYear"),
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    store: Store = Depends(get_store),
):
    rows = store.list_transactions(_period(financial_year), from_date, to_date)
    return AccountingService.summarize(rows, _period(financial_year), from_date, to_date)

@router.get("/export")
def export_transactions(
    financial_year: Optional[str] = Query(None, alias="financialYear"),
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    month: Optional[str] = None,
    search: Optional[str] = None,
    type: str = "all",
    store: Store = Depends(get_store),
):
    year = _period(financial_year)
    rows = store.list_transactions(year, from_date, to_date)
    rows = AccountingService.filter_transactions(rows, search, type, month)
    content = to_csv(TRANSACTION_REPORT_HEADERS, AccountingService.export_rows(rows))
    filename = f"accounting-report-{year}-{settings.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.get("/financial-years", response_model=List[str])
def get_financial_years():
    return AccountingService.financial_years(settings.today())
