"""Exit checks for each wizard step.

Every validator is a pure function of the draft. None of them mutate it;
the sequencer decides what to do with the result.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Callable, Dict, Set

from .models import (
    DEFAULT_DOWN_PAYMENT_POLICY,
    BookingDraft,
    DownPaymentPolicy,
    PaymentPlan,
    Step,
    ValidationResult,
)
from .payment import validate_down_payment
from .rates import HOTEL_NIGHTLY_RATES, INLAND_TOUR_MINIMUM_TOURISTS, TOUR_PACKAGES, VAN_FARES, VEHICLE_DAILY_RATES

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CONTACT_NUMBER_LENGTH = 11

SERVICES_FIELD = "services"

Validator = Callable[[BookingDraft, DownPaymentPolicy], ValidationResult]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email.strip().lower()))


def normalize_contact_number(raw: str) -> str:
    """Keep digits only and drop anything past the eleventh."""
    digits = re.sub(r"\D", "", raw or "")
    return digits[:CONTACT_NUMBER_LENGTH]


def enforce_inland_minimum(draft: BookingDraft) -> BookingDraft:
    if draft.inland_tours and draft.tourist_count < INLAND_TOUR_MINIMUM_TOURISTS:
        return dataclasses.replace(draft, inland_tours=[])
    return draft


def validate_contact(draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY) -> ValidationResult:
    errors: Dict[str, str] = {}
    invariant_fields: Set[str] = set()

    if not draft.first_name.strip():
        errors["first_name"] = "First Name is required."
    if not draft.last_name.strip():
        errors["last_name"] = "Last Name is required."

    if not draft.email.strip():
        errors["email"] = "Email Address is required."
    elif not is_valid_email(draft.email):
        errors["email"] = "Please enter a valid email address (e.g., name@example.com)."

    if not draft.contact_number:
        errors["contact_number"] = "Contact Number is required."
    elif not draft.contact_number.isdigit() or len(draft.contact_number) != CONTACT_NUMBER_LENGTH:
        errors["contact_number"] = f"Contact Number must be exactly {CONTACT_NUMBER_LENGTH} digits."

    if draft.arrival_date is None:
        errors["arrival_date"] = "Arrival Date is required."
    if draft.departure_date is None:
        errors["departure_date"] = "Departure Date is required."
    if draft.arrival_date and draft.departure_date and draft.departure_date <= draft.arrival_date:
        errors["departure_date"] = "Departure must be at least the day after Arrival."
        invariant_fields.add("departure_date")

    return ValidationResult(errors, frozenset(invariant_fields))


def validate_services(draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY) -> ValidationResult:
    if not draft.has_any_service:
        return ValidationResult(
            {
                SERVICES_FIELD: (
                    "Please select at least one service (Tour Package, Van Rental, "
                    "Van Rental with Tourist Franchise, or Diving)."
                )
            },
            frozenset({SERVICES_FIELD}),
        )

    errors: Dict[str, str] = {}
    invariant_fields: Set[str] = set()

    if draft.has_tours and draft.tourist_count < 1:
        errors["tourist_count"] = "Number of Tourist is required when selecting a tour."
        invariant_fields.add("tourist_count")
    elif draft.inland_tours and draft.tourist_count < INLAND_TOUR_MINIMUM_TOURISTS:
        errors["inland_tours"] = (
            f"Inland tours require at least {INLAND_TOUR_MINIMUM_TOURISTS} tourists."
        )
        invariant_fields.add("inland_tours")

    if draft.tour_package:
        if draft.tour_package not in TOUR_PACKAGES:
            errors["tour_package"] = f"Unknown package '{draft.tour_package}'."
        elif not draft.hotel:
            errors["hotel"] = "Please select a hotel for your package."
            invariant_fields.add("hotel")
    if draft.hotel and draft.hotel not in HOTEL_NIGHTLY_RATES:
        errors["hotel"] = f"Unknown hotel '{draft.hotel}'."

    if draft.has_vehicles:
        unknown = [name for name in draft.vehicles if name not in VEHICLE_DAILY_RATES]
        if unknown:
            errors["vehicles"] = f"Unknown rental vehicle: {', '.join(unknown)}."
        if not draft.rental_days or draft.rental_days < 1:
            errors["rental_days"] = "Select Rental Days is required when selecting rental vehicles."
            invariant_fields.add("rental_days")

    if draft.has_van_rental:
        van = draft.van_rental
        fare = VAN_FARES.get(van.destination)
        if fare is None:
            errors["van_rental"] = f"Unknown van destination '{van.destination}'."
        elif van.trip_type is None:
            errors["van_rental"] = "Trip type is required for van rental."
            invariant_fields.add("van_rental")
        elif van.days < 1:
            errors["van_rental"] = "Number of days is required for van rental."
            invariant_fields.add("van_rental")

    if draft.diving and draft.diver_count < 1:
        errors["diver_count"] = "Number of Divers is required when selecting diving service."
        invariant_fields.add("diver_count")

    return ValidationResult(errors, frozenset(invariant_fields))


def validate_summary(draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY) -> ValidationResult:
    return ValidationResult.ok()


def validate_payment_option(
    draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY
) -> ValidationResult:
    if draft.payment_plan is None:
        return ValidationResult({"payment_plan": "Please choose full payment or down payment."})
    if draft.payment_plan == PaymentPlan.DOWN:
        return validate_down_payment(draft, policy)
    return ValidationResult.ok()


def validate_payment_method(
    draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY
) -> ValidationResult:
    if draft.payment_method is None:
        return ValidationResult({"payment_method": "Please choose a payment method."})
    if not draft.payment_confirmed:
        return ValidationResult({"payment_confirmed": "Please confirm your payment before continuing."})
    return ValidationResult.ok()


def validate_receipt(draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY) -> ValidationResult:
    if not draft.receipt_present:
        return ValidationResult({"receipt_present": "Please upload your payment receipt."})
    return ValidationResult.ok()


def validate_submission(
    draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY
) -> ValidationResult:
    if not draft.is_submitted:
        return ValidationResult({"status": "Please submit your booking."})
    return ValidationResult.ok()


VALIDATORS: Dict[Step, Validator] = {
    Step.CONTACT: validate_contact,
    Step.SERVICES: validate_services,
    Step.SUMMARY: validate_summary,
    Step.PAYMENT_OPTION: validate_payment_option,
    Step.PAYMENT_METHOD: validate_payment_method,
    Step.RECEIPT_UPLOAD: validate_receipt,
    Step.SUBMISSION: validate_submission,
}


def validate(
    step: Step, draft: BookingDraft, policy: DownPaymentPolicy = DEFAULT_DOWN_PAYMENT_POLICY
) -> ValidationResult:
    validator = VALIDATORS.get(Step(step))
    if validator is None:
        # The confirmation step is terminal.
        return ValidationResult({"step": "The booking is already complete."})
    return validator(draft, policy)
