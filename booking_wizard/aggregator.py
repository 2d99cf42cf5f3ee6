from __future__ import annotations

import dataclasses

from .models import ZERO, Amounts, BookingDraft
from .payment import remaining_balance
from .pricing import (
    diving_amount,
    hotel_amount,
    hotel_nights,
    inland_tour_amount,
    island_tour_amount,
    snorkeling_tour_amount,
    tour_package_amount,
    van_amount,
    vehicle_amount,
)
from .validators import enforce_inland_minimum


def aggregate(draft: BookingDraft) -> Amounts:
    headcount = draft.tourist_count

    package = ZERO
    if draft.island_tours:
        package += island_tour_amount(headcount)
    if draft.inland_tours:
        package += inland_tour_amount(headcount)
    if draft.snorkeling_tours:
        package += snorkeling_tour_amount(headcount)
    if draft.tour_package:
        package += tour_package_amount(draft.tour_package, draft.hotel, headcount)

    vehicles = vehicle_amount(draft.vehicles, draft.rental_days) if draft.vehicles else ZERO
    van = van_amount(draft.van_rental) if draft.has_van_rental else ZERO
    diving = diving_amount(draft.diving, draft.diver_count)

    # A hotel bundled into a tour package is already priced by the package.
    hotel = ZERO
    if draft.hotel and not draft.tour_package:
        hotel = hotel_amount(draft.hotel, hotel_nights(draft.arrival_date, draft.departure_date))

    return Amounts(
        package_amount=package,
        vehicle_amount=vehicles,
        van_amount=van,
        diving_amount=diving,
        hotel_amount=hotel,
    )


def recompute(draft: BookingDraft) -> BookingDraft:
    """Re-derive every computed field after a change to the draft."""
    draft = enforce_inland_minimum(draft)
    amounts = aggregate(draft)
    updated = dataclasses.replace(
        draft,
        hotel_nights=hotel_nights(draft.arrival_date, draft.departure_date) if draft.hotel else 0,
        package_amount=amounts.package_amount,
        vehicle_amount=amounts.vehicle_amount,
        van_amount=amounts.van_amount,
        diving_amount=amounts.diving_amount,
        hotel_amount=amounts.hotel_amount,
        grand_total=amounts.grand_total,
    )
    return dataclasses.replace(updated, remaining_balance=remaining_balance(updated))
