from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List, Optional

from ..schemas.pharmacy_schemas import Medicine
from ..schemas.accounting_schemas import Transaction


class MedicineRepository(ABC):
    @abstractmethod
    def list_medicines(self) -> List[Medicine]: ...

    @abstractmethod
    def get_medicine(self, medicine_id: str) -> Medicine:
        """Raises NotFoundError for an unknown id."""

    @abstractmethod
    def save_medicine(self, medicine: Medicine) -> Medicine: ...

    @abstractmethod
    def delete_medicine(self, medicine_id: str) -> None: ...


class TransactionRepository(ABC):
    @abstractmethod
    def list_transactions(
        self,
        financial_year: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Transaction]: ...

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Transaction:
        """Raises NotFoundError for an unknown id."""

    @abstractmethod
    def save_transaction(self, transaction: Transaction) -> Transaction: ...

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> None: ...


class Store(MedicineRepository, TransactionRepository):
    """Both collections behind one object, as the routes need."""

    @abstractmethod
    def record_transaction(self, transaction: Transaction, medicines: Iterable[Medicine] = ()) -> Transaction:
        """
        Insert a new transaction together with the stock changes it causes,
        all or nothing. An id that is already stored is a ValidationError.
        """
