from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from .models import BookingDraft, BookingOption, PaymentPlan, TripType
from .payment import amount_due_now, format_peso
from .pricing import hotel_nights

BOOKING_TYPE_LABELS = {
    BookingOption.PACKAGE: "Package Only",
    BookingOption.TOUR: "Tour Only",
}

TRIP_TYPE_LABELS = {
    TripType.ONE_WAY: "One Way",
    TripType.ROUND_TRIP: "Roundtrip",
}


@dataclass(frozen=True)
class SummaryLine:
    category: str
    label: str
    detail: str
    amount: str
    visible: bool


@dataclass(frozen=True)
class SummaryViewModel:
    customer_name: str
    email: str
    contact_number: str
    arrival: str
    departure: str
    nights: str
    tourists: str
    booking_type: str
    lines: List[SummaryLine]
    grand_total: str
    payment_plan: str
    payment_method: str
    amount_due_now: str
    remaining_balance: str
    booking_reference: Optional[str] = None

    def line(self, category: str) -> SummaryLine:
        for line in self.lines:
            if line.category == category:
                return line
        raise KeyError(category)

    @property
    def visible_lines(self) -> List[SummaryLine]:
        return [line for line in self.lines if line.visible]


def _date_label(value: Optional[date]) -> str:
    return value.strftime("%B %d, %Y") if value else "-"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _amount_label(amount: Decimal) -> str:
    return format_peso(amount) if amount else "-"


def _tour_detail(draft: BookingDraft) -> str:
    parts = []
    if draft.tour_package:
        parts.append(f"{draft.tour_package} ({draft.hotel or 'no hotel'})")
    for title, items in (
        ("Island", draft.island_tours),
        ("Inland", draft.inland_tours),
        ("Snorkeling", draft.snorkeling_tours),
    ):
        if items:
            parts.append(f"{title}: {', '.join(items)}")
    return "; ".join(parts)


def _van_detail(draft: BookingDraft) -> str:
    van = draft.van_rental
    if van is None:
        return ""
    trip = TRIP_TYPE_LABELS.get(van.trip_type, "-") if van.trip_type else "-"
    return f"{van.destination} ({trip}, {_plural(van.days, 'Day')})"


def project(draft: BookingDraft) -> SummaryViewModel:
    hotel_shown = bool(draft.hotel) and not draft.tour_package
    stay_nights = hotel_nights(draft.arrival_date, draft.departure_date)
    lines = [
        SummaryLine(
            category="tours",
            label="Tour Package",
            detail=_tour_detail(draft),
            amount=_amount_label(draft.package_amount),
            visible=draft.has_tours,
        ),
        SummaryLine(
            category="vehicle",
            label="Vehicle Rental",
            detail=(
                f"{', '.join(draft.vehicles)} ({_plural(draft.rental_days or 0, 'Day')})" if draft.vehicles else ""
            ),
            amount=_amount_label(draft.vehicle_amount),
            visible=draft.has_vehicles,
        ),
        SummaryLine(
            category="van",
            label="Van Rental",
            detail=_van_detail(draft),
            amount=_amount_label(draft.van_amount),
            visible=draft.has_van_rental,
        ),
        SummaryLine(
            category="diving",
            label="Diving",
            detail=_plural(draft.diver_count, "Diver") if draft.diving else "",
            amount=_amount_label(draft.diving_amount),
            visible=draft.diving,
        ),
        SummaryLine(
            category="hotel",
            label="Accommodation",
            detail=f"{draft.hotel} ({_plural(draft.hotel_nights, 'Night')})" if hotel_shown else "",
            amount=_amount_label(draft.hotel_amount),
            visible=hotel_shown,
        ),
    ]

    if draft.payment_plan == PaymentPlan.DOWN:
        plan_label = "Down Payment"
    elif draft.payment_plan == PaymentPlan.FULL:
        plan_label = "Full Payment"
    else:
        plan_label = "-"

    return SummaryViewModel(
        customer_name=f"{draft.first_name} {draft.last_name}".strip(),
        email=draft.email,
        contact_number=draft.contact_number,
        arrival=_date_label(draft.arrival_date),
        departure=_date_label(draft.departure_date),
        nights=_plural(stay_nights, "Night") if stay_nights else "-",
        tourists=_plural(draft.tourist_count, "Tourist") if draft.tourist_count else "-",
        booking_type=BOOKING_TYPE_LABELS.get(draft.booking_type, "-") if draft.booking_type else "-",
        lines=lines,
        grand_total=format_peso(draft.grand_total),
        payment_plan=plan_label,
        payment_method=draft.payment_method.display_name if draft.payment_method else "-",
        amount_due_now=format_peso(amount_due_now(draft)),
        remaining_balance=format_peso(draft.remaining_balance),
        booking_reference=draft.booking_reference,
    )
