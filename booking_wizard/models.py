from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, List, Optional

ZERO = Decimal("0")


class Step(IntEnum):
    CONTACT = 1
    SERVICES = 2
    SUMMARY = 3
    PAYMENT_OPTION = 4
    PAYMENT_METHOD = 5
    RECEIPT_UPLOAD = 6
    SUBMISSION = 7
    CONFIRMATION = 8


class BookingOption(str, Enum):
    PACKAGE = "package"
    TOUR = "tour"


class TripType(str, Enum):
    ONE_WAY = "one_way"
    ROUND_TRIP = "round_trip"


class PaymentPlan(str, Enum):
    FULL = "full"
    DOWN = "down"


class PaymentMethod(str, Enum):
    GCASH = "gcash"
    PAYMAYA = "paymaya"
    BANKING = "banking"

    @property
    def display_name(self) -> str:
        return PAYMENT_METHOD_NAMES[self]


PAYMENT_METHOD_NAMES: Dict[PaymentMethod, str] = {
    PaymentMethod.GCASH: "GCash",
    PaymentMethod.PAYMAYA: "PayMaya",
    PaymentMethod.BANKING: "Online Banking",
}


class DraftStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class VanRental:
    destination: str
    trip_type: Optional[TripType] = None
    days: int = 0


@dataclass(frozen=True)
class DownPaymentPolicy:
    per_tourist: Decimal = Decimal("500")
    floor: Decimal = Decimal("500")


DEFAULT_DOWN_PAYMENT_POLICY = DownPaymentPolicy()


@dataclass
class BookingDraft:
    """The in-progress booking record shared by every wizard page."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    contact_number: str = ""
    arrival_date: Optional[date] = None
    departure_date: Optional[date] = None
    tourist_count: int = 0

    island_tours: List[str] = field(default_factory=list)
    inland_tours: List[str] = field(default_factory=list)
    snorkeling_tours: List[str] = field(default_factory=list)
    tour_package: Optional[str] = None
    vehicles: List[str] = field(default_factory=list)
    rental_days: Optional[int] = None
    van_rental: Optional[VanRental] = None
    diving: bool = False
    diver_count: int = 0
    hotel: Optional[str] = None
    hotel_nights: int = 0

    package_amount: Decimal = ZERO
    vehicle_amount: Decimal = ZERO
    van_amount: Decimal = ZERO
    diving_amount: Decimal = ZERO
    hotel_amount: Decimal = ZERO
    grand_total: Decimal = ZERO

    payment_method: Optional[PaymentMethod] = None
    payment_plan: Optional[PaymentPlan] = None
    down_payment_amount: Optional[Decimal] = None
    remaining_balance: Decimal = ZERO
    payment_confirmed: bool = False
    receipt_present: bool = False

    booking_type: Optional[BookingOption] = None
    last_page: Optional[str] = None
    current_step: Step = Step.CONTACT

    booking_reference: Optional[str] = None
    status: DraftStatus = DraftStatus.DRAFT
    submitted_at: Optional[datetime] = None

    @property
    def has_tours(self) -> bool:
        return bool(self.island_tours or self.inland_tours or self.snorkeling_tours or self.tour_package)

    @property
    def has_vehicles(self) -> bool:
        return bool(self.vehicles)

    @property
    def has_van_rental(self) -> bool:
        return self.van_rental is not None and bool(self.van_rental.destination)

    @property
    def has_any_service(self) -> bool:
        return self.has_tours or self.has_vehicles or self.has_van_rental or self.diving

    @property
    def is_submitted(self) -> bool:
        return self.status == DraftStatus.SUBMITTED


@dataclass(frozen=True)
class Amounts:
    package_amount: Decimal = ZERO
    vehicle_amount: Decimal = ZERO
    van_amount: Decimal = ZERO
    diving_amount: Decimal = ZERO
    hotel_amount: Decimal = ZERO

    @property
    def grand_total(self) -> Decimal:
        return self.package_amount + self.vehicle_amount + self.van_amount + self.diving_amount + self.hotel_amount


@dataclass(frozen=True)
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)
    invariant_fields: FrozenSet[str] = frozenset()

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def is_invariant_violation(self) -> bool:
        return bool(self.invariant_fields.intersection(self.errors))

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls()


@dataclass(frozen=True)
class Transition:
    from_step: Step
    to_step: Step
    page: str
    result: ValidationResult = field(default_factory=ValidationResult)

    @property
    def moved(self) -> bool:
        return self.from_step != self.to_step
