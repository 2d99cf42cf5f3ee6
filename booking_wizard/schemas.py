from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .models import (
    BookingDraft,
    BookingOption,
    DraftStatus,
    PaymentMethod,
    PaymentPlan,
    Step,
    Transition,
    TripType,
    VanRental,
)
from .summary import SummaryViewModel


class VanRentalRecord(BaseModel):
    destination: str
    trip_type: Optional[TripType] = None
    days: int = 0


class DraftRecord(BaseModel):
    """Serialized form of a booking draft, stored under ``completeBookingData``."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    contact_number: str = ""
    arrival_date: Optional[date] = None
    departure_date: Optional[date] = None
    tourist_count: int = 0

    island_tours: List[str] = Field(default_factory=list)
    inland_tours: List[str] = Field(default_factory=list)
    snorkeling_tours: List[str] = Field(default_factory=list)
    tour_package: Optional[str] = None
    vehicles: List[str] = Field(default_factory=list)
    rental_days: Optional[int] = None
    van_rental: Optional[VanRentalRecord] = None
    diving: bool = False
    diver_count: int = 0
    hotel: Optional[str] = None
    hotel_nights: int = 0

    package_amount: Decimal = Decimal("0")
    vehicle_amount: Decimal = Decimal("0")
    van_amount: Decimal = Decimal("0")
    diving_amount: Decimal = Decimal("0")
    hotel_amount: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")

    payment_method: Optional[PaymentMethod] = None
    payment_plan: Optional[PaymentPlan] = None
    down_payment_amount: Optional[Decimal] = None
    remaining_balance: Decimal = Decimal("0")
    payment_confirmed: bool = False
    receipt_present: bool = False

    booking_type: Optional[BookingOption] = None
    last_page: Optional[str] = None
    current_step: int = Field(default=int(Step.CONTACT), ge=1, le=8)

    booking_reference: Optional[str] = None
    status: DraftStatus = DraftStatus.DRAFT
    submitted_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, draft: BookingDraft) -> "DraftRecord":
        van = draft.van_rental
        return cls(
            first_name=draft.first_name,
            last_name=draft.last_name,
            email=draft.email,
            contact_number=draft.contact_number,
            arrival_date=draft.arrival_date,
            departure_date=draft.departure_date,
            tourist_count=draft.tourist_count,
            island_tours=list(draft.island_tours),
            inland_tours=list(draft.inland_tours),
            snorkeling_tours=list(draft.snorkeling_tours),
            tour_package=draft.tour_package,
            vehicles=list(draft.vehicles),
            rental_days=draft.rental_days,
            van_rental=(
                VanRentalRecord(destination=van.destination, trip_type=van.trip_type, days=van.days)
                if van is not None
                else None
            ),
            diving=draft.diving,
            diver_count=draft.diver_count,
            hotel=draft.hotel,
            hotel_nights=draft.hotel_nights,
            package_amount=draft.package_amount,
            vehicle_amount=draft.vehicle_amount,
            van_amount=draft.van_amount,
            diving_amount=draft.diving_amount,
            hotel_amount=draft.hotel_amount,
            grand_total=draft.grand_total,
            payment_method=draft.payment_method,
            payment_plan=draft.payment_plan,
            down_payment_amount=draft.down_payment_amount,
            remaining_balance=draft.remaining_balance,
            payment_confirmed=draft.payment_confirmed,
            receipt_present=draft.receipt_present,
            booking_type=draft.booking_type,
            last_page=draft.last_page,
            current_step=int(draft.current_step),
            booking_reference=draft.booking_reference,
            status=draft.status,
            submitted_at=draft.submitted_at,
        )

    def to_domain(self) -> BookingDraft:
        data = self.model_dump(exclude={"van_rental", "current_step"})
        van = self.van_rental
        return BookingDraft(
            **data,
            van_rental=VanRental(van.destination, van.trip_type, van.days) if van is not None else None,
            current_step=Step(self.current_step),
        )


class StartWizardRequest(BaseModel):
    booking_option: BookingOption


class ReceiptReport(BaseModel):
    receipt_confirmed: bool


class PaymentConfirmationRequest(BaseModel):
    payment_method: PaymentMethod


class WizardStateResponse(BaseModel):
    step: int
    page: str
    draft: DraftRecord


class TransitionResponse(BaseModel):
    moved: bool
    from_step: int
    to_step: int
    page: str
    errors: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, transition: Transition) -> "TransitionResponse":
        return cls(
            moved=transition.moved,
            from_step=int(transition.from_step),
            to_step=int(transition.to_step),
            page=transition.page,
            errors=dict(transition.result.errors),
        )


class PaymentOptionResponse(BaseModel):
    grand_total: Decimal
    minimum_down_payment: Decimal
    payment_plan: Optional[PaymentPlan] = None
    down_payment_amount: Optional[Decimal] = None
    remaining_balance: Decimal
    amount_due_now: Decimal


class SummaryLineResponse(BaseModel):
    category: str
    label: str
    detail: str
    amount: str
    visible: bool


class SummaryResponse(BaseModel):
    customer_name: str
    email: str
    contact_number: str
    arrival: str
    departure: str
    nights: str
    tourists: str
    booking_type: str
    lines: List[SummaryLineResponse]
    grand_total: str
    payment_plan: str
    payment_method: str
    amount_due_now: str
    remaining_balance: str
    booking_reference: Optional[str] = None

    @classmethod
    def from_domain(cls, view: SummaryViewModel) -> "SummaryResponse":
        return cls(
            customer_name=view.customer_name,
            email=view.email,
            contact_number=view.contact_number,
            arrival=view.arrival,
            departure=view.departure,
            nights=view.nights,
            tourists=view.tourists,
            booking_type=view.booking_type,
            lines=[
                SummaryLineResponse(
                    category=line.category,
                    label=line.label,
                    detail=line.detail,
                    amount=line.amount,
                    visible=line.visible,
                )
                for line in view.lines
            ],
            grand_total=view.grand_total,
            payment_plan=view.payment_plan,
            payment_method=view.payment_method,
            amount_due_now=view.amount_due_now,
            remaining_balance=view.remaining_balance,
            booking_reference=view.booking_reference,
        )
