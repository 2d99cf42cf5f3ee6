from __future__ import annotations

import dataclasses
from decimal import Decimal
from typing import Any

import pytest

from booking_wizard.collaborators import InMemoryBookingBackend, ReportedReceipt, SubmissionResult
from booking_wizard.errors import (
    BackendRejectedError,
    ConflictError,
    InvariantViolation,
    ReceiptMissingError,
    ValidationError,
)
from booking_wizard.models import BookingDraft, BookingOption, DraftStatus, PaymentMethod, Step
from booking_wizard.service import BookingWizardService
from booking_wizard.storage import BOOKING_OPTION_KEY, STAGED_SELECTIONS_KEY, InMemorySessionStorage

SESSION = "session-1"

CONTACT = {
    "first_name": "Juan",
    "last_name": "Dela Cruz",
    "email": "juan@example.com",
    "contact_number": "09171234567",
    "arrival_date": "2025-03-01",
    "departure_date": "2025-03-03",
}


def _services(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "tourist_count": 0,
        "island_tours": [],
        "inland_tours": [],
        "snorkeling_tours": [],
        "vehicles": [],
        "rental_days": None,
        "van_rental": None,
        "diving": False,
        "diver_count": 0,
        "hotel": None,
    }
    payload.update(overrides)
    return payload


class RejectingBackend:
    def submit_booking(self, draft: BookingDraft) -> SubmissionResult:
        return SubmissionResult(success=False, message="fully booked")


@pytest.fixture
def storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def backend() -> InMemoryBookingBackend:
    return InMemoryBookingBackend()


@pytest.fixture
def service(storage: InMemorySessionStorage, backend: InMemoryBookingBackend) -> BookingWizardService:
    return BookingWizardService(storage=storage, backend=backend)


def _to_summary(service: BookingWizardService, services: dict[str, Any]) -> None:
    service.start(SESSION, BookingOption.TOUR)
    service.update_step(SESSION, Step.CONTACT, CONTACT)
    service.advance(SESSION)
    service.update_step(SESSION, Step.SERVICES, services)
    service.advance(SESSION)


def test_island_tour_total(service: BookingWizardService) -> None:
    _to_summary(service, _services(tourist_count=3, island_tours=["Coral Garden"]))

    view = service.summary(SESSION)

    assert service.open(SESSION).step == Step.SUMMARY
    assert view.line("tours").amount == "₱3,000.00"
    assert view.grand_total == "₱3,000.00"
    assert [line.category for line in view.visible_lines] == ["tours"]


def test_diving_down_payment_below_floor(service: BookingWizardService) -> None:
    _to_summary(service, _services(tourist_count=1, diving=True, diver_count=2))
    service.advance(SESSION)

    quote = service.payment_option(SESSION)
    assert quote.grand_total == Decimal("7000")
    assert quote.minimum_down_payment == Decimal("500")

    service.update_step(SESSION, Step.PAYMENT_OPTION, {"payment_plan": "down", "down_payment_amount": 300})
    with pytest.raises(ValidationError) as excinfo:
        service.advance(SESSION)
    assert "₱500.00" in excinfo.value.errors["down_payment_amount"]
    assert service.open(SESSION).step == Step.PAYMENT_OPTION


def test_vehicle_down_payment_balance(service: BookingWizardService) -> None:
    _to_summary(service, _services(vehicles=["NMAX"], rental_days=3))
    service.advance(SESSION)
    service.update_step(SESSION, Step.PAYMENT_OPTION, {"payment_plan": "down", "down_payment_amount": 1000})

    quote = service.payment_option(SESSION)

    assert quote.grand_total == Decimal("3000")
    assert quote.remaining_balance == Decimal("2000")
    assert quote.amount_due_now == Decimal("1000")


def test_services_without_selection_is_invariant_violation(service: BookingWizardService) -> None:
    service.start(SESSION, BookingOption.TOUR)
    service.update_step(SESSION, Step.CONTACT, CONTACT)
    service.advance(SESSION)
    service.update_step(SESSION, Step.SERVICES, _services())

    with pytest.raises(InvariantViolation) as excinfo:
        service.advance(SESSION)
    assert excinfo.value.code == "INVARIANT_VIOLATION"


def test_editing_other_step_conflicts(service: BookingWizardService) -> None:
    service.start(SESSION, BookingOption.TOUR)
    with pytest.raises(ConflictError):
        service.update_step(SESSION, Step.SERVICES, _services(vehicles=["ADV"], rental_days=1))


def _to_receipt(service: BookingWizardService) -> None:
    _to_summary(service, _services(vehicles=["ADV"], rental_days=2))
    service.advance(SESSION)
    service.update_step(SESSION, Step.PAYMENT_OPTION, {"payment_plan": "full"})
    service.advance(SESSION)
    service.confirm_payment(SESSION, PaymentMethod.PAYMAYA)


def test_full_booking_flow(
    service: BookingWizardService,
    storage: InMemorySessionStorage,
    backend: InMemoryBookingBackend,
) -> None:
    _to_receipt(service)
    assert service.open(SESSION).step == Step.RECEIPT_UPLOAD

    service.record_receipt(SESSION, ReportedReceipt(receipt_confirmed=True))
    service.advance(SESSION)
    storage.set_item(SESSION, STAGED_SELECTIONS_KEY, "{}")

    sequencer = service.submit(SESSION)

    draft = sequencer.draft
    assert sequencer.step == Step.CONFIRMATION
    assert draft.status == DraftStatus.SUBMITTED
    assert draft.booking_reference in backend.bookings
    assert draft.payment_method == PaymentMethod.PAYMAYA
    assert storage.get_item(SESSION, STAGED_SELECTIONS_KEY) is None
    assert storage.get_item(SESSION, BOOKING_OPTION_KEY) == "tour"

    again = service.submit(SESSION)
    assert again.draft.booking_reference == draft.booking_reference
    assert len(backend.bookings) == 1


def test_receipt_step_blocks_without_receipt(service: BookingWizardService) -> None:
    _to_receipt(service)
    service.record_receipt(SESSION, ReportedReceipt(receipt_confirmed=False))

    with pytest.raises(ValidationError):
        service.advance(SESSION)
    with pytest.raises(ConflictError):
        service.submit(SESSION)


def test_submit_without_receipt_raises(service: BookingWizardService, storage: InMemorySessionStorage) -> None:
    _to_receipt(service)
    service.record_receipt(SESSION, ReportedReceipt(receipt_confirmed=True))
    service.advance(SESSION)
    sequencer = service.open(SESSION)
    sequencer.update(dataclasses.replace(sequencer.draft, receipt_present=False))

    with pytest.raises(ReceiptMissingError):
        service.submit(SESSION)


def test_backend_rejection_keeps_draft(storage: InMemorySessionStorage) -> None:
    service = BookingWizardService(storage=storage, backend=RejectingBackend())
    _to_receipt(service)
    service.record_receipt(SESSION, ReportedReceipt(receipt_confirmed=True))
    service.advance(SESSION)

    with pytest.raises(BackendRejectedError):
        service.submit(SESSION)

    sequencer = service.open(SESSION)
    assert sequencer.step == Step.SUBMISSION
    assert sequencer.draft.status == DraftStatus.DRAFT


def test_start_replaces_previous_draft(service: BookingWizardService) -> None:
    service.start(SESSION, BookingOption.TOUR)
    service.update_step(SESSION, Step.CONTACT, CONTACT)

    sequencer = service.start(SESSION, BookingOption.PACKAGE)

    assert sequencer.step == Step.CONTACT
    assert sequencer.draft.first_name == ""
    assert sequencer.draft.booking_type == BookingOption.PACKAGE


def test_clear_forgets_session(service: BookingWizardService, storage: InMemorySessionStorage) -> None:
    service.start(SESSION, BookingOption.TOUR)
    service.clear(SESSION)
    assert storage.get_item(SESSION, BOOKING_OPTION_KEY) is None
    assert service.open(SESSION).draft.booking_type is None


def test_cleared_services_stay_cleared(service: BookingWizardService, storage: InMemorySessionStorage) -> None:
    service.start(SESSION, BookingOption.TOUR)
    storage.set_item(SESSION, STAGED_SELECTIONS_KEY, '{"diving": true, "numberOfDivers": 2}')
    service.update_step(SESSION, Step.CONTACT, CONTACT)
    service.advance(SESSION)
    assert service.open(SESSION).draft.diving

    service.update_step(SESSION, Step.SERVICES, _services())

    reopened = service.open(SESSION).draft
    assert not reopened.diving
    assert reopened.diving_amount == Decimal("0")
    assert storage.get_item(SESSION, STAGED_SELECTIONS_KEY) is None
    with pytest.raises(InvariantViolation):
        service.advance(SESSION)
    assert service.open(SESSION).step == Step.SERVICES


def test_backend_keeps_booking_under_its_reference(
    service: BookingWizardService,
    backend: InMemoryBookingBackend,
) -> None:
    _to_receipt(service)
    service.record_receipt(SESSION, ReportedReceipt(receipt_confirmed=True))
    service.advance(SESSION)

    reference = service.submit(SESSION).draft.booking_reference

    assert reference is not None
    assert backend.bookings[reference].booking_reference == reference
