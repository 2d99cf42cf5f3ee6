from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from .collaborators import BookingBackend, ReceiptUploader
from .errors import BackendRejectedError, ConflictError, InvariantViolation, ValidationError
from .inputs import apply_inputs, apply_payment_method
from .models import (
    BookingDraft,
    BookingOption,
    DownPaymentPolicy,
    PaymentMethod,
    PaymentPlan,
    Step,
    Transition,
    ValidationResult,
)
from .payment import amount_due_now, finalize, minimum_down_payment
from .sequencer import StepSequencer
from .storage import DraftStore, InMemorySessionStorage
from .summary import SummaryViewModel, project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentOptionQuote:
    grand_total: Decimal
    minimum_down_payment: Decimal
    payment_plan: Optional[PaymentPlan]
    down_payment_amount: Optional[Decimal]
    remaining_balance: Decimal
    amount_due_now: Decimal


def raise_for_result(result: ValidationResult) -> None:
    if result.valid:
        return
    message = next(iter(result.errors.values()))
    if result.is_invariant_violation:
        raise InvariantViolation(message, result.errors)
    raise ValidationError(message, result.errors)


class BookingWizardService:
    def __init__(
        self,
        storage: InMemorySessionStorage,
        backend: BookingBackend,
        policy: Optional[DownPaymentPolicy] = None,
    ) -> None:
        self._storage = storage
        self._backend = backend
        self._policy = policy or DownPaymentPolicy()

    def open(self, session_id: str) -> StepSequencer:
        """Rehydrate the session's draft and resume the wizard where it left off."""
        return StepSequencer(DraftStore(self._storage, session_id), self._policy)

    def start(self, session_id: str, option: BookingOption) -> StepSequencer:
        with self._storage.lock:
            store = DraftStore(self._storage, session_id)
            store.clear()
            store.save_booking_option(option)
            store.save(BookingDraft(booking_type=option))
            sequencer = self.open(session_id)
        logger.info("Wizard started", extra={"session_id": session_id, "booking_option": option.value})
        return sequencer

    def update_step(self, session_id: str, step: Step, payload: Mapping[str, Any]) -> StepSequencer:
        with self._storage.lock:
            sequencer = self.open(session_id)
            if sequencer.draft.is_submitted:
                raise ConflictError("booking already submitted")
            if step != sequencer.step:
                raise ConflictError(f"cannot edit step {int(step)} while on step {int(sequencer.step)}")
            sequencer.update(apply_inputs(sequencer.draft, step, payload))
            if step == Step.SERVICES:
                DraftStore(self._storage, session_id).discard_staged_selections()
        return sequencer

    def advance(self, session_id: str) -> Transition:
        with self._storage.lock:
            transition = self.open(session_id).advance()
        raise_for_result(transition.result)
        return transition

    def retreat(self, session_id: str) -> Transition:
        with self._storage.lock:
            return self.open(session_id).retreat()

    def summary(self, session_id: str) -> SummaryViewModel:
        return project(self.open(session_id).draft)

    def payment_option(self, session_id: str) -> PaymentOptionQuote:
        draft = self.open(session_id).draft
        return PaymentOptionQuote(
            grand_total=draft.grand_total,
            minimum_down_payment=minimum_down_payment(draft, self._policy),
            payment_plan=draft.payment_plan,
            down_payment_amount=draft.down_payment_amount,
            remaining_balance=draft.remaining_balance,
            amount_due_now=amount_due_now(draft),
        )

    def confirm_payment(self, session_id: str, method: PaymentMethod) -> Transition:
        with self._storage.lock:
            sequencer = self.open(session_id)
            if sequencer.step != Step.PAYMENT_METHOD:
                raise ConflictError("payment can only be confirmed on the payment method step")
            draft = apply_payment_method(sequencer.draft, {"payment_method": method.value})
            sequencer.update(dataclasses.replace(draft, payment_confirmed=True))
            transition = sequencer.jump_to_receipt()
        raise_for_result(transition.result)
        return transition

    def record_receipt(self, session_id: str, uploader: ReceiptUploader) -> StepSequencer:
        with self._storage.lock:
            sequencer = self.open(session_id)
            if sequencer.step != Step.RECEIPT_UPLOAD:
                raise ConflictError("receipts are uploaded on the receipt step")
            present = uploader.upload_receipt()
            sequencer.update(dataclasses.replace(sequencer.draft, receipt_present=present))
        logger.info("Receipt recorded", extra={"session_id": session_id, "receipt_present": present})
        return sequencer

    def submit(self, session_id: str) -> StepSequencer:
        with self._storage.lock:
            sequencer = self.open(session_id)
            draft = sequencer.draft
            if draft.is_submitted:
                return sequencer
            if sequencer.step != Step.SUBMISSION:
                raise ConflictError("the booking is submitted from the submission step")

            finalized = finalize(draft, draft.receipt_present)
            result = self._backend.submit_booking(finalized)
            if not result.success:
                logger.warning(
                    "Booking backend rejected submission",
                    extra={"session_id": session_id, "detail": result.message},
                )
                raise BackendRejectedError(result.message or "booking could not be submitted")
            if result.booking_reference:
                finalized = dataclasses.replace(finalized, booking_reference=result.booking_reference)

            sequencer.update(finalized)
            sequencer.advance()
            DraftStore(self._storage, session_id).discard_staged_selections()

        logger.info(
            "Booking submitted",
            extra={"session_id": session_id, "booking_reference": finalized.booking_reference},
        )
        return sequencer

    def clear(self, session_id: str) -> None:
        DraftStore(self._storage, session_id).clear()
        logger.info("Wizard cleared", extra={"session_id": session_id})
