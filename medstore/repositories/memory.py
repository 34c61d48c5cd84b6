from datetime import date
from typing import Dict, Iterable, List, Optional

from ..errors import NotFoundError, ValidationError
from ..schemas.pharmacy_schemas import Medicine
from ..schemas.accounting_schemas import Transaction
from ..services.accounting_service import AccountingService
from .base import Store


class InMemoryStore(Store):
    """Process-local store. Records are copied in and out so callers can't mutate it."""

    def __init__(self):
        self._medicines: Dict[str, Medicine] = {}
        self._transactions: Dict[str, Transaction] = {}

    # --- medicines ---

    def list_medicines(self) -> List[Medicine]:
        return [m.model_copy(deep=True) for m in self._medicines.values()]

    def get_medicine(self, medicine_id: str) -> Medicine:
        medicine = self._medicines.get(medicine_id)
        if medicine is None:
            raise NotFoundError(f"Medicine {medicine_id} not found")
        return medicine.model_copy(deep=True)

    def save_medicine(self, medicine: Medicine) -> Medicine:
        self._medicines[medicine.id] = medicine.model_copy(deep=True)
        return medicine

    def delete_medicine(self, medicine_id: str) -> None:
        if self._medicines.pop(medicine_id, None) is None:
            raise NotFoundError(f"Medicine {medicine_id} not found")

    # --- transactions ---

    def list_transactions(
        self,
        financial_year: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Transaction]:
        rows = [t for t in self._transactions.values()
                if AccountingService.in_period(t, financial_year, date_from, date_to)]
        rows.sort(key=lambda t: (t.date, t.created_at is None, t.created_at))
        return [t.model_copy(deep=True) for t in rows]

    def get_transaction(self, transaction_id: str) -> Transaction:
        txn = self._transactions.get(transaction_id)
        if txn is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return txn.model_copy(deep=True)

    def save_transaction(self, transaction: Transaction) -> Transaction:
        self._transactions[transaction.id] = transaction.model_copy(deep=True)
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        if self._transactions.pop(transaction_id, None) is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

    def record_transaction(self, transaction: Transaction, medicines: Iterable[Medicine] = ()) -> Transaction:
        if transaction.id in self._transactions:
            raise ValidationError(f"Transaction {transaction.id} already exists")
        medicines = list(medicines)
        for medicine in medicines:
            if medicine.id not in self._medicines:
                raise NotFoundError(f"Medicine {medicine.id} not found")
        for medicine in medicines:
            self.save_medicine(medicine)
        return self.save_transaction(transaction)
