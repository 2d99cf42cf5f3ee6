from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from .models import ZERO, VanRental
from .rates import (
    DIVING_RATE_PER_DIVER,
    HOTEL_NIGHTLY_RATES,
    INLAND_TOUR_RATES,
    ISLAND_TOUR_RATES,
    SNORKELING_TOUR_RATES,
    TOUR_PACKAGE_RATES,
    VAN_FARES,
    VEHICLE_DAILY_RATES,
    TierTable,
)

logger = logging.getLogger(__name__)


def _per_head_amount(table: TierTable, headcount: int) -> Decimal:
    if not headcount or headcount <= 0:
        return ZERO
    return table.rate_for(headcount) * headcount


def island_tour_amount(headcount: int) -> Decimal:
    return _per_head_amount(ISLAND_TOUR_RATES, headcount)


def inland_tour_amount(headcount: int) -> Decimal:
    return _per_head_amount(INLAND_TOUR_RATES, headcount)


def snorkeling_tour_amount(headcount: int) -> Decimal:
    return _per_head_amount(SNORKELING_TOUR_RATES, headcount)


def tour_package_amount(package: Optional[str], hotel: Optional[str], headcount: int) -> Decimal:
    if not package or not hotel:
        return ZERO
    table = TOUR_PACKAGE_RATES.get((hotel, package))
    if table is None:
        logger.warning("No package rate", extra={"hotel": hotel, "package": package})
        return ZERO
    return _per_head_amount(table, headcount)


def vehicle_amount(vehicles: Iterable[str], rental_days: Optional[int]) -> Decimal:
    if not rental_days or rental_days <= 0:
        return ZERO
    total = ZERO
    for name in vehicles:
        rate = VEHICLE_DAILY_RATES.get(name)
        if rate is None:
            logger.warning("No daily rate for vehicle", extra={"vehicle": name})
            continue
        total += rate * rental_days
    return total


def van_amount(van_rental: Optional[VanRental]) -> Decimal:
    """Fare for the chosen destination and trip type, times the day count."""
    if van_rental is None or not van_rental.destination or van_rental.trip_type is None:
        return ZERO
    if van_rental.days <= 0:
        return ZERO
    fare = VAN_FARES.get(van_rental.destination)
    if fare is None:
        logger.warning("No van fare for destination", extra={"destination": van_rental.destination})
        return ZERO
    return fare.fare_for(van_rental.trip_type) * van_rental.days


def diving_amount(diving: bool, diver_count: int) -> Decimal:
    if not diving or diver_count <= 0:
        return ZERO
    return DIVING_RATE_PER_DIVER * diver_count


def hotel_nights(arrival: Optional[date], departure: Optional[date]) -> int:
    if arrival is None or departure is None:
        return 0
    # Dates carry no time of day, so the day difference is already whole.
    nights = (departure - arrival).days
    return nights if nights > 0 else 0


def hotel_amount(hotel: Optional[str], nights: int) -> Decimal:
    if not hotel or nights <= 0:
        return ZERO
    rate = HOTEL_NIGHTLY_RATES.get(hotel)
    if rate is None:
        logger.warning("No nightly rate for hotel", extra={"hotel": hotel})
        return ZERO
    return rate * nights
