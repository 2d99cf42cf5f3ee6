from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .aggregator import recompute
from .inputs import SERVICES_PAGES, TOUR_SERVICES_PAGE
from .models import (
    DEFAULT_DOWN_PAYMENT_POLICY,
    BookingDraft,
    BookingOption,
    DownPaymentPolicy,
    PaymentPlan,
    Step,
    Transition,
    ValidationResult,
)
from .payment import minimum_down_payment
from .storage import DraftStore
from .validators import validate

logger = logging.getLogger(__name__)

CONTACT_PAGE = "booking_form"

SUMMARY_PAGES = {
    BookingOption.PACKAGE: "package_summary",
    BookingOption.TOUR: "tour_summary",
}

EntryHook = Callable[[BookingDraft, DownPaymentPolicy], BookingDraft]


def _enter_summary(draft: BookingDraft, policy: DownPaymentPolicy) -> BookingDraft:
    return recompute(draft)


def _enter_payment_option(draft: BookingDraft, policy: DownPaymentPolicy) -> BookingDraft:
    draft = recompute(draft)
    # Keep a down amount the customer entered; otherwise start from the minimum.
    if draft.payment_plan != PaymentPlan.DOWN or draft.down_payment_amount is None:
        draft = recompute(dataclasses.replace(draft, down_payment_amount=minimum_down_payment(draft, policy)))
    return draft


@dataclass(frozen=True)
class StepDefinition:
    step: Step
    title: str
    on_enter: Optional[EntryHook] = None


STEP_DIRECTORY: Dict[Step, StepDefinition] = {
    Step.CONTACT: StepDefinition(Step.CONTACT, "Contact Information"),
    Step.SERVICES: StepDefinition(Step.SERVICES, "Service Selection"),
    Step.SUMMARY: StepDefinition(Step.SUMMARY, "Booking Summary", _enter_summary),
    Step.PAYMENT_OPTION: StepDefinition(Step.PAYMENT_OPTION, "Payment Option", _enter_payment_option),
    Step.PAYMENT_METHOD: StepDefinition(Step.PAYMENT_METHOD, "Payment Method"),
    Step.RECEIPT_UPLOAD: StepDefinition(Step.RECEIPT_UPLOAD, "Upload Receipt"),
    Step.SUBMISSION: StepDefinition(Step.SUBMISSION, "Submit Booking"),
    Step.CONFIRMATION: StepDefinition(Step.CONFIRMATION, "Confirmation"),
}


def page_for(step: Step, booking_type: Optional[BookingOption], last_page: Optional[str] = None) -> str:
    """Name of the page that hosts ``step``."""
    if step == Step.CONTACT:
        return CONTACT_PAGE
    if step == Step.SERVICES:
        return last_page or SERVICES_PAGES.get(booking_type, TOUR_SERVICES_PAGE)
    return SUMMARY_PAGES.get(booking_type, SUMMARY_PAGES[BookingOption.TOUR])


def resume_step(draft: BookingDraft) -> Step:
    if draft.is_submitted:
        return Step.CONFIRMATION
    if draft.current_step > Step.CONTACT:
        return Step(draft.current_step)
    if draft.last_page:
        # Committed from a services page but never moved on: the summary comes next.
        return Step.SUMMARY
    return Step.CONTACT


class StepSequencer:
    """Owns the current-step pointer of one session's wizard."""

    def __init__(self, store: DraftStore, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY) -> None:
        self._store = store
        self._policy = policy
        self._draft = store.load()
        self._step = resume_step(self._draft)
        self._draft.current_step = self._step

    @property
    def step(self) -> Step:
        return self._step

    @property
    def draft(self) -> BookingDraft:
        return self._draft

    @property
    def page(self) -> str:
        return page_for(self._step, self._draft.booking_type, self._draft.last_page)

    def check(self) -> ValidationResult:
        return validate(self._step, self._draft, self._policy)

    def update(self, draft: BookingDraft) -> None:
        """Replace the draft with a changed copy, recompute and persist it."""
        draft = recompute(dataclasses.replace(draft, current_step=self._step))
        self._draft = draft
        self._store.save(draft)

    def advance(self) -> Transition:
        current = self._step
        if current == Step.CONFIRMATION:
            return Transition(current, current, self.page, validate(current, self._draft, self._policy))

        result = self.check()
        if not result.valid:
            logger.info(
                "Step blocked",
                extra={"session_id": self._store.session_id, "step": int(current), "fields": sorted(result.errors)},
            )
            return Transition(current, current, self.page, result)

        return self._move_to(Step(current + 1))

    def retreat(self) -> Transition:
        current = self._step
        if current in (Step.CONTACT, Step.CONFIRMATION):
            return Transition(current, current, self.page)
        if current == Step.SUMMARY:
            # The summary is the first step hosted on the summary page; going
            # back means returning to the services page the draft came from.
            target = Step.SERVICES
        else:
            target = Step(current - 1)
        return self._move_to(target, run_entry=False)

    def jump_to_receipt(self) -> Transition:
        """Payment confirmed on the method step: go straight to the receipt upload."""
        current = self._step
        if current != Step.PAYMENT_METHOD:
            return Transition(
                current,
                current,
                self.page,
                ValidationResult({"step": "Payment can only be confirmed on the payment method step."}),
            )
        result = self.check()
        if not result.valid:
            return Transition(current, current, self.page, result)
        return self._move_to(Step.RECEIPT_UPLOAD)

    def _move_to(self, target: Step, run_entry: bool = True) -> Transition:
        source = self._step
        draft = self._draft
        definition = STEP_DIRECTORY[target]
        if run_entry and definition.on_enter is not None:
            draft = definition.on_enter(draft, self._policy)
        draft = dataclasses.replace(draft, current_step=target)

        self._step = target
        self._draft = draft
        self._store.save(draft)
        logger.info(
            "Step changed",
            extra={"session_id": self._store.session_id, "from_step": int(source), "to_step": int(target)},
        )
        return Transition(source, target, self.page)
