"""
Recording sales and purchases against the store, including the Schedule-H
checkout that sits in front of a sell.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..config import settings
from ..errors import NotFoundError, ValidationError
from ..models.accounting_models import TransactionType
from ..repositories.base import Store
from ..schemas.accounting_schemas import Transaction, TransactionCreate
from .accounting_service import AccountingService
from .prescription_gate import PrescriptionGate, GateState, PRESCRIPTION_EXTENSIONS, schedule_h_items

logger = logging.getLogger(__name__)


@dataclass
class Checkout:
    id: str
    payload: TransactionCreate
    gate: PrescriptionGate
    schedule_h_names: List[str]
    transaction: Optional[Transaction] = None


class TransactionService:
    def __init__(self, store: Store, upload_dir: Optional[str] = None):
        self.store = store
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.checkouts: Dict[str, Checkout] = {}

    def _catalogue(self, payload: TransactionCreate) -> Dict[str, object]:
        """Catalogue entries for every referenced medicine; unknown ids fail."""
        catalogue = {}
        for item in payload.items:
            if item.medicine_id and item.medicine_id not in catalogue:
                catalogue[item.medicine_id] = self.store.get_medicine(item.medicine_id)
        return catalogue

    def record(self, payload: TransactionCreate, prescription_skipped: Optional[bool] = None) -> Transaction:
        """
        Price the transaction, move stock and save it. Everything is checked
        before the first write so a rejected sale leaves stock untouched.

        prescription_skipped is None when no prescription decision was taken;
        a sell with Schedule-H lines is then flagged as skipped.
        """
        catalogue = self._catalogue(payload)
        payload = payload.model_copy(update={"items": [
            i if i.medicine_name or not i.medicine_id
            else i.model_copy(update={"medicine_name": catalogue[i.medicine_id].name})
            for i in payload.items
        ]})
        h_count = len(schedule_h_items(payload.items, catalogue)) if payload.type == TransactionType.SELL else 0
        if prescription_skipped is None:
            prescription_skipped = h_count > 0
            if prescription_skipped:
                logger.warning("Sell %s has %d Schedule-H line(s) and no prescription", payload.invoice_number, h_count)
        txn = AccountingService.build_transaction(payload, prescription_skipped, h_count)

        sign = -1 if txn.type == TransactionType.SELL else 1
        new_stock = {mid: m.stock for mid, m in catalogue.items()}
        for item in txn.items:
            if item.medicine_id:
                new_stock[item.medicine_id] += sign * item.quantity
        for mid, stock in new_stock.items():
            if stock < 0:
                raise ValidationError(
                    f"Insufficient stock for {catalogue[mid].name}: {catalogue[mid].stock} available")

        changed = []
        for mid, stock in new_stock.items():
            medicine = catalogue[mid]
            if medicine.stock != stock:
                logger.info("Stock %s %s: %d -> %d", mid, medicine.name, medicine.stock, stock)
                changed.append(medicine.model_copy(update={"stock": stock}))
        self.store.record_transaction(txn, changed)
        logger.info("Recorded %s %s net=%s tax=%s", txn.type.value, txn.invoice_number, txn.net_amount, txn.tax_amount)
        return txn

    # --- Schedule-H checkout ---

    def begin(self, payload: TransactionCreate) -> Checkout:
        """
        Start a checkout. Sells carrying Schedule-H lines wait for a
        prescription decision; anything else is recorded straight away.
        """
        catalogue = self._catalogue(payload)
        # price up front so a bad line fails before the gate opens
        AccountingService.aggregate(payload.items, payload.discount_percent)

        gate = PrescriptionGate()
        checkout = Checkout(id=uuid.uuid4().hex, payload=payload, gate=gate, schedule_h_names=[])
        if payload.type == TransactionType.SELL:
            checkout.schedule_h_names = [
                i.medicine_name or catalogue[i.medicine_id].name
                for i in schedule_h_items(payload.items, catalogue)
            ]
        if not checkout.schedule_h_names:
            checkout.transaction = self.record(payload)
            return checkout

        gate.open()
        self.checkouts[checkout.id] = checkout
        return checkout

    def get_checkout(self, checkout_id: str) -> Checkout:
        checkout = self.checkouts.get(checkout_id)
        if checkout is None:
            raise NotFoundError(f"Checkout {checkout_id} not found")
        return checkout

    def _finish(self, checkout: Checkout) -> Checkout:
        try:
            checkout.transaction = self.record(checkout.payload, checkout.gate.prescription_skipped)
        except Exception:
            # the transaction was refused; the decision can be made again
            checkout.gate.state = GateState.AWAITING
            raise
        checkout.gate.complete()
        self.checkouts.pop(checkout.id, None)
        return checkout

    def attach_prescription(self, checkout_id: str, filename: str, content_type: Optional[str], content: bytes) -> Checkout:
        checkout = self.get_checkout(checkout_id)
        checkout.gate.upload(filename, content_type, len(content))

        folder = os.path.join(self.upload_dir, "prescriptions")
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(folder, f"{checkout.id}{PRESCRIPTION_EXTENSIONS[content_type.lower()]}")
        with open(path, "wb") as buffer:
            buffer.write(content)
        checkout.gate.filename = path
        return self._finish(checkout)

    def skip_prescription(self, checkout_id: str) -> Checkout:
        checkout = self.get_checkout(checkout_id)
        checkout.gate.skip()
        return self._finish(checkout)
