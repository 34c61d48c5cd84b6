from fastapi import APIRouter, Depends, File, Response, UploadFile

from ..deps import get_transaction_service
from ..schemas import CheckoutResponse, QuoteRequest, QuoteResponse, TransactionCreate, LineItem
from ..services.accounting_service import AccountingService
from ..services.prescription_gate import GateState
from ..services.transaction_service import Checkout, TransactionService

router = APIRouter()


def _checkout_response(checkout: Checkout) -> CheckoutResponse:
    return CheckoutResponse(
        checkout_id=checkout.id,
        state=checkout.gate.state.value,
        schedule_h_items=checkout.schedule_h_names,
        prescription_skipped=checkout.gate.prescription_skipped,
        transaction=checkout.transaction,
    )

@router.post("/quote", response_model=QuoteResponse)
def quote(req: QuoteRequest):
    """Live subtotal / discount / grand total for the transaction form"""
    totals = AccountingService.aggregate(req.items, req.discount_percent)
    return QuoteResponse(
        items=[
            LineItem(**item.model_dump(), taxable_amount=line.taxable_amount,
                     tax_amount=line.tax_amount, total_amount=line.total_amount)
            for item, line in zip(req.items, totals.lines)
        ],
        subtotal=totals.subtotal,
        total_discount_amount=totals.total_discount_amount,
        tax_amount=totals.tax_amount,
        net_amount=totals.net_amount,
    )

@router.post("/multi", response_model=CheckoutResponse, status_code=201)
def create_multi_transaction(
    txn_in: TransactionCreate,
    response: Response,
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Sells with Schedule-H lines come back 202 with a checkout id and wait for
    a prescription upload or skip; everything else is recorded (201).
    """
    checkout = service.begin(txn_in)
    if checkout.gate.state == GateState.AWAITING:
        response.status_code = 202
    return _checkout_response(checkout)

@router.get("/checkout/{checkout_id}", response_model=CheckoutResponse)
def get_checkout(checkout_id: str, service: TransactionService = Depends(get_transaction_service)):
    return _checkout_response(service.get_checkout(checkout_id))

@router.post("/checkout/{checkout_id}/prescription", response_model=CheckoutResponse, status_code=201)
async def upload_prescription(
    checkout_id: str,
    prescription: UploadFile = File(...),
    service: TransactionService = Depends(get_transaction_service),
):
    content = await prescription.read()
    checkout = service.attach_prescription(checkout_id, prescription.filename or "", prescription.content_type, content)
    return _checkout_response(checkout)

@router.post("/checkout/{checkout_id}/skip", response_model=CheckoutResponse, status_code=201)
def skip_prescription(checkout_id: str, service: TransactionService = Depends(get_transaction_service)):
    return _checkout_response(service.skip_prescription(checkout_id))
