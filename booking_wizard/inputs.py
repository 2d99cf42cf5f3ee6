"""Form payloads posted by each wizard page and how they change the draft.

Every field a step reads must be present in its payload, even when empty.
A payload that omits one raises ``FieldMissingError`` rather than silently
leaving the draft's previous value in place.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Type

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import BadRequestError, ConflictError, FieldMissingError
from .models import BookingDraft, BookingOption, PaymentMethod, PaymentPlan, Step, TripType, VanRental
from .validators import normalize_contact_number

PACKAGE_SERVICES_PAGE = "package_only"
TOUR_SERVICES_PAGE = "tour_only"

SERVICES_PAGES = {
    BookingOption.PACKAGE: PACKAGE_SERVICES_PAGE,
    BookingOption.TOUR: TOUR_SERVICES_PAGE,
}


class StepForm(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ContactForm(StepForm):
    first_name: str
    last_name: str
    email: str
    contact_number: str
    arrival_date: Optional[date]
    departure_date: Optional[date]

    @field_validator("arrival_date", "departure_date", mode="before")
    @classmethod
    def _blank_date_is_unset(cls, value: Any) -> Any:
        return value or None


class VanRentalForm(BaseModel):
    destination: str
    trip_type: Optional[TripType] = None
    days: int = Field(default=0, ge=0)


class ServicesForm(StepForm):
    tourist_count: int = Field(ge=0)
    vehicles: List[str]
    rental_days: Optional[int] = Field(ge=0)
    van_rental: Optional[VanRentalForm]
    diving: bool
    diver_count: int = Field(ge=0)
    hotel: Optional[str]


class PackageServicesForm(ServicesForm):
    tour_package: Optional[str]


class TourServicesForm(ServicesForm):
    island_tours: List[str]
    inland_tours: List[str]
    snorkeling_tours: List[str]


class PaymentOptionForm(StepForm):
    payment_plan: PaymentPlan
    down_payment_amount: Optional[Decimal] = Field(default=None, ge=0)


class PaymentMethodForm(StepForm):
    payment_method: PaymentMethod


def _unique(names: List[str]) -> List[str]:
    seen: List[str] = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.append(name)
    return seen


def _parse(form_type: Type[StepForm], step: Step, payload: Mapping[str, Any]) -> StepForm:
    try:
        return form_type.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        if first["type"] == "missing":
            raise FieldMissingError(field or "?", int(step)) from exc
        raise BadRequestError(first["msg"], field=field) from exc


def services_form_for(booking_type: Optional[BookingOption]) -> Type[ServicesForm]:
    if booking_type == BookingOption.PACKAGE:
        return PackageServicesForm
    return TourServicesForm


def apply_contact(draft: BookingDraft, payload: Mapping[str, Any]) -> BookingDraft:
    form = _parse(ContactForm, Step.CONTACT, payload)
    return dataclasses.replace(
        draft,
        first_name=form.first_name.strip(),
        last_name=form.last_name.strip(),
        email=form.email.strip(),
        contact_number=normalize_contact_number(form.contact_number),
        arrival_date=form.arrival_date,
        departure_date=form.departure_date,
    )


def apply_services(draft: BookingDraft, payload: Mapping[str, Any]) -> BookingDraft:
    form = _parse(services_form_for(draft.booking_type), Step.SERVICES, payload)
    van = form.van_rental
    changes: dict[str, Any] = dict(
        tourist_count=form.tourist_count,
        vehicles=_unique(form.vehicles),
        rental_days=form.rental_days or None,
        van_rental=(
            VanRental(destination=van.destination.strip(), trip_type=van.trip_type, days=van.days)
            if van is not None and van.destination.strip()
            else None
        ),
        diving=form.diving,
        diver_count=form.diver_count if form.diving else 0,
        hotel=form.hotel or None,
        last_page=SERVICES_PAGES.get(draft.booking_type, TOUR_SERVICES_PAGE),
    )
    if isinstance(form, PackageServicesForm):
        changes.update(
            tour_package=form.tour_package or None,
            island_tours=[],
            inland_tours=[],
            snorkeling_tours=[],
        )
    else:
        changes.update(
            tour_package=None,
            island_tours=_unique(form.island_tours),
            inland_tours=_unique(form.inland_tours),
            snorkeling_tours=_unique(form.snorkeling_tours),
        )
    return dataclasses.replace(draft, **changes)


def apply_payment_option(draft: BookingDraft, payload: Mapping[str, Any]) -> BookingDraft:
    form = _parse(PaymentOptionForm, Step.PAYMENT_OPTION, payload)
    if form.payment_plan == PaymentPlan.DOWN and "down_payment_amount" not in payload:
        raise FieldMissingError("down_payment_amount", int(Step.PAYMENT_OPTION))
    return dataclasses.replace(
        draft,
        payment_plan=form.payment_plan,
        down_payment_amount=form.down_payment_amount if form.payment_plan == PaymentPlan.DOWN else None,
    )


def apply_payment_method(draft: BookingDraft, payload: Mapping[str, Any]) -> BookingDraft:
    form = _parse(PaymentMethodForm, Step.PAYMENT_METHOD, payload)
    if form.payment_method == draft.payment_method:
        return draft
    # A different method needs a fresh QR confirmation.
    return dataclasses.replace(draft, payment_method=form.payment_method, payment_confirmed=False)


STEP_APPLIERS = {
    Step.CONTACT: apply_contact,
    Step.SERVICES: apply_services,
    Step.PAYMENT_OPTION: apply_payment_option,
    Step.PAYMENT_METHOD: apply_payment_method,
}


def apply_inputs(draft: BookingDraft, step: Step, payload: Mapping[str, Any]) -> BookingDraft:
    applier = STEP_APPLIERS.get(step)
    if applier is None:
        raise ConflictError(f"step {int(step)} takes no form inputs")
    return applier(draft, payload)
