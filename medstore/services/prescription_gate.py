"""
Schedule-H prescription gate.

A sell that contains a Schedule-H medicine has to pass through a decision:
upload a prescription or skip it. Either way the sale is recorded; the
outcome is kept only as the ``prescription_skipped`` flag.

    Idle -> AwaitingPrescriptionDecision -> Uploaded | Skipped -> Idle
"""

import logging
from enum import Enum
from typing import Iterable, List, Mapping, Optional

from ..config import settings
from ..errors import StateError, ValidationError
from ..models.accounting_models import TransactionType

logger = logging.getLogger(__name__)

PRESCRIPTION_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "application/pdf": ".pdf",
}


class GateState(str, Enum):
    IDLE = "Idle"
    AWAITING = "AwaitingPrescriptionDecision"
    UPLOADED = "Uploaded"
    SKIPPED = "Skipped"


def schedule_h_items(items: Iterable, catalogue: Mapping[str, object]) -> List:
    """Lines whose catalogue medicine is Schedule H."""
    found = []
    for item in items:
        medicine = catalogue.get(item.medicine_id) if item.medicine_id else None
        if medicine is not None and getattr(medicine, "schedule", None) == "H":
            found.append(item)
    return found


def requires_prescription(transaction_type, items: Iterable, catalogue: Mapping[str, object]) -> bool:
    if transaction_type != TransactionType.SELL:
        return False
    return len(schedule_h_items(items, catalogue)) > 0


class PrescriptionGate:
    def __init__(self, max_bytes: Optional[int] = None):
        self.max_bytes = settings.PRESCRIPTION_MAX_BYTES if max_bytes is None else max_bytes
        self.state = GateState.IDLE
        self.prescription_skipped: Optional[bool] = None
        self.filename: Optional[str] = None

    def _expect(self, *states: GateState) -> None:
        if self.state not in states:
            raise StateError(f"Prescription gate is {self.state.value}; expected {' or '.join(s.value for s in states)}")

    def open(self) -> None:
        self._expect(GateState.IDLE)
        self.prescription_skipped = None
        self.filename = None
        self.state = GateState.AWAITING
        logger.info("Prescription decision requested")

    def check_file(self, filename: str, content_type: Optional[str], size: int) -> None:
        content_type = (content_type or "").lower()
        if content_type not in PRESCRIPTION_EXTENSIONS:
            raise ValidationError("Please upload a valid image (JPG, PNG) or PDF file")
        if size <= 0:
            raise ValidationError("Prescription file is empty")
        if size > self.max_bytes:
            raise ValidationError(f"File size must be less than {self.max_bytes // (1024 * 1024)}MB")

    def upload(self, filename: str, content_type: Optional[str], size: int) -> None:
        self._expect(GateState.AWAITING)
        # a rejected file leaves the decision open
        self.check_file(filename, content_type, size)
        self.filename = filename
        self.prescription_skipped = False
        self.state = GateState.UPLOADED
        logger.info("Prescription %s accepted (%d bytes)", filename, size)

    def skip(self) -> None:
        self._expect(GateState.AWAITING)
        self.prescription_skipped = True
        self.state = GateState.SKIPPED
        logger.warning("Transaction completing without prescription upload")

    def complete(self) -> bool:
        """Return to Idle and hand back the flag for the transaction."""
        self._expect(GateState.UPLOADED, GateState.SKIPPED)
        skipped = self.prescription_skipped
        self.state = GateState.IDLE
        return skipped
