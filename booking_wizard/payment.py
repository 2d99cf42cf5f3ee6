from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from .errors import ReceiptMissingError
from .models import (
    DEFAULT_DOWN_PAYMENT_POLICY,
    ZERO,
    BookingDraft,
    DownPaymentPolicy,
    DraftStatus,
    PaymentPlan,
    ValidationResult,
)

logger = logging.getLogger(__name__)

DOWN_PAYMENT_FIELD = "down_payment_amount"


def format_peso(amount: Decimal) -> str:
    return f"₱{amount:,.2f}"


def minimum_down_payment(
    draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY
) -> Decimal:
    tourists = max(draft.tourist_count or 0, 0)
    return max(policy.per_tourist * tourists, policy.floor)


def validate_down_payment(
    draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY
) -> ValidationResult:
    amount = draft.down_payment_amount
    if amount is None:
        return ValidationResult({DOWN_PAYMENT_FIELD: "Down payment amount is required."})

    minimum = minimum_down_payment(draft, policy)
    if amount < minimum:
        tourists = max(draft.tourist_count or 0, 0)
        message = (
            f"Minimum down payment is {format_peso(minimum)} "
            f"({format_peso(policy.per_tourist)} per tourist x {tourists} tourist{'s' if tourists != 1 else ''}"
        )
        if minimum == policy.floor and policy.per_tourist * tourists < policy.floor:
            message += f", floor {format_peso(policy.floor)}"
        return ValidationResult({DOWN_PAYMENT_FIELD: message + ")."})
    if amount > draft.grand_total:
        return ValidationResult(
            {DOWN_PAYMENT_FIELD: f"Down payment cannot exceed total amount of {format_peso(draft.grand_total)}."}
        )
    return ValidationResult.ok()


def amount_due_now(draft: BookingDraft) -> Decimal:
    if draft.payment_plan == PaymentPlan.DOWN and draft.down_payment_amount is not None:
        return draft.down_payment_amount
    return draft.grand_total


def remaining_balance(draft: BookingDraft) -> Decimal:
    if draft.payment_plan != PaymentPlan.DOWN or draft.down_payment_amount is None:
        return ZERO
    return max(draft.grand_total - draft.down_payment_amount, ZERO)


def generate_booking_reference(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{now:%y}-{uuid4().int % 1_000_000:06d}"


def finalize(
    draft: BookingDraft,
    receipt_confirmed: bool,
    *,
    reference: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BookingDraft:
    """Mark the draft as submitted once a payment receipt exists.

    Returns a new draft; the input is left untouched. ``reference`` is the
    booking backend's reference when it returned one.
    """
    if not receipt_confirmed:
        raise ReceiptMissingError()
    if draft.is_submitted:
        return draft
    now = now or datetime.now(timezone.utc)
    finalized = dataclasses.replace(
        draft,
        booking_reference=reference or generate_booking_reference(now),
        status=DraftStatus.SUBMITTED,
        submitted_at=now,
        receipt_present=True,
    )
    logger.info("Booking finalized", extra={"booking_reference": finalized.booking_reference})
    return finalized
