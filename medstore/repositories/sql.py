from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, sessionmaker, selectinload

from ..database import Base
from ..errors import NotFoundError, ValidationError
from ..models import Medicine as MedicineRow, Transaction as TransactionRow, TransactionItem
from ..schemas.pharmacy_schemas import Medicine
from ..schemas.accounting_schemas import Transaction
from .base import Store


class SqlStore(Store):
    """SQLAlchemy-backed store; one short session per call."""

    def __init__(self, session_factory: sessionmaker, create_tables: bool = True):
        self.session_factory = session_factory
        if create_tables:
            Base.metadata.create_all(bind=session_factory.kw["bind"])

    # --- medicines ---

    def list_medicines(self) -> List[Medicine]:
        with self.session_factory() as db:
            rows = db.query(MedicineRow).order_by(MedicineRow.name).all()
            return [Medicine.model_validate(r) for r in rows]

    def _medicine_row(self, db: Session, medicine_id: str) -> MedicineRow:
        row = db.query(MedicineRow).filter(MedicineRow.id == medicine_id).first()
        if not row:
            raise NotFoundError(f"Medicine {medicine_id} not found")
        return row

    def get_medicine(self, medicine_id: str) -> Medicine:
        with self.session_factory() as db:
            return Medicine.model_validate(self._medicine_row(db, medicine_id))

    def _write_medicine(self, db: Session, medicine: Medicine) -> None:
        row = db.query(MedicineRow).filter(MedicineRow.id == medicine.id).first()
        if row is None:
            row = MedicineRow(id=medicine.id)
            db.add(row)
        for key, value in medicine.model_dump(exclude={"id"}).items():
            setattr(row, key, value)

    def save_medicine(self, medicine: Medicine) -> Medicine:
        with self.session_factory() as db:
            self._write_medicine(db, medicine)
            db.commit()
        return medicine

    def delete_medicine(self, medicine_id: str) -> None:
        with self.session_factory() as db:
            db.delete(self._medicine_row(db, medicine_id))
            db.commit()

    # --- transactions ---

    def list_transactions(
        self,
        financial_year: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Transaction]:
        with self.session_factory() as db:
            query = db.query(TransactionRow).options(selectinload(TransactionRow.items))
            if financial_year is not None:
                query = query.filter(TransactionRow.financial_year == financial_year)
            if date_from is not None:
                query = query.filter(TransactionRow.date >= date_from)
            if date_to is not None:
                query = query.filter(TransactionRow.date <= date_to)
            rows = query.order_by(TransactionRow.date, TransactionRow.created_at).all()
            return [Transaction.model_validate(r) for r in rows]

    def _transaction_row(self, db: Session, transaction_id: str) -> TransactionRow:
        row = db.query(TransactionRow).options(selectinload(TransactionRow.items))\
            .filter(TransactionRow.id == transaction_id).first()
        if not row:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return row

    def get_transaction(self, transaction_id: str) -> Transaction:
        with self.session_factory() as db:
            return Transaction.model_validate(self._transaction_row(db, transaction_id))

    def _write_transaction(self, db: Session, transaction: Transaction, row: Optional[TransactionRow]) -> None:
        if row is None:
            row = TransactionRow(id=transaction.id)
            db.add(row)
        for key, value in transaction.model_dump(exclude={"id", "items"}).items():
            setattr(row, key, value)
        row.items = [
            TransactionItem(line_number=number, **item.model_dump())
            for number, item in enumerate(transaction.items, start=1)
        ]

    def save_transaction(self, transaction: Transaction) -> Transaction:
        with self.session_factory() as db:
            row = db.query(TransactionRow).filter(TransactionRow.id == transaction.id).first()
            self._write_transaction(db, transaction, row)
            db.commit()
        return transaction

    def record_transaction(self, transaction: Transaction, medicines: Iterable[Medicine] = ()) -> Transaction:
        with self.session_factory() as db:
            if db.query(TransactionRow).filter(TransactionRow.id == transaction.id).first() is not None:
                raise ValidationError(f"Transaction {transaction.id} already exists")
            for medicine in medicines:
                self._medicine_row(db, medicine.id)
                self._write_medicine(db, medicine)
            self._write_transaction(db, transaction, None)
            # single commit for stock and transaction
            db.commit()
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        with self.session_factory() as db:
            db.delete(self._transaction_row(db, transaction_id))
            db.commit()
