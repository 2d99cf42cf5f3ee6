"""Ports to the systems the wizard hands off to.

Receipt upload and the booking backend live outside the engine; it only
consumes their results and never retries on their behalf.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, Optional, Protocol

from .models import BookingDraft
from .payment import generate_booking_reference


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    booking_reference: Optional[str] = None
    message: str = ""


class ReceiptUploader(Protocol):
    def upload_receipt(self) -> bool: ...


class BookingBackend(Protocol):
    def submit_booking(self, draft: BookingDraft) -> SubmissionResult: ...


@dataclass(frozen=True)
class ReportedReceipt:
    """Receipt outcome reported by the page after its own upload finished."""

    receipt_confirmed: bool

    def upload_receipt(self) -> bool:
        return self.receipt_confirmed


@dataclass
class InMemoryBookingBackend:
    """Accepts every booking and keeps it in memory, keyed by reference."""

    bookings: Dict[str, BookingDraft] = field(default_factory=dict)
    _lock: RLock = field(default_factory=RLock, repr=False)

    def submit_booking(self, draft: BookingDraft) -> SubmissionResult:
        with self._lock:
            reference = generate_booking_reference()
            while reference in self.bookings:
                reference = generate_booking_reference()
            self.bookings[reference] = dataclasses.replace(draft, booking_reference=reference)
        return SubmissionResult(success=True, booking_reference=reference)
