"""Price lists for every bookable service.

All amounts are Philippine pesos. Headcount-based services use tier tables:
each tier covers an inclusive headcount range and carries a per-head rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .models import TripType


@dataclass(frozen=True)
class Tier:
    minimum: int
    maximum: Optional[int]
    rate: Decimal

    def covers(self, count: int) -> bool:
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum


@dataclass(frozen=True)
class TierTable:
    tiers: Tuple[Tier, ...]

    def rate_for(self, count: int) -> Decimal:
        for tier in self.tiers:
            if tier.covers(count):
                return tier.rate
        return Decimal("0")


def _tiers(*rows: Tuple[int, Optional[int], int]) -> TierTable:
    return TierTable(tuple(Tier(low, high, Decimal(rate)) for low, high, rate in rows))


ISLAND_TOUR_RATES = _tiers((1, 1, 3000), (2, 2, 1600), (3, 4, 1000), (5, None, 800))

# No tier below two tourists: a single tourist cannot book the inland tour.
INLAND_TOUR_RATES = _tiers(
    (2, 2, 1500),
    (3, 3, 1100),
    (4, 4, 800),
    (5, 6, 700),
    (7, 9, 600),
    (10, None, 550),
)

SNORKELING_TOUR_RATES = _tiers((1, 1, 2400), (2, 2, 1300), (3, 4, 1000), (5, 6, 900), (7, None, 800))

INLAND_TOUR_MINIMUM_TOURISTS = 2

DIVING_RATE_PER_DIVER = Decimal("3500")

VEHICLE_DAILY_RATES: Mapping[str, Decimal] = MappingProxyType(
    {
        "ADV": Decimal("1000"),
        "NMAX": Decimal("1000"),
        "VERSYS 650": Decimal("2000"),
        "VERSYS 1000": Decimal("2500"),
        "TUKTUK": Decimal("1800"),
        "CAR": Decimal("3000"),
    }
)

HOTEL_NIGHTLY_RATES: Mapping[str, Decimal] = MappingProxyType(
    {
        "Ilaya": Decimal("2000"),
        "Bliss": Decimal("1500"),
        "The Mangyan Grand Hotel": Decimal("2500"),
        "Transient House": Decimal("1500"),
        "SouthView": Decimal("3000"),
    }
)


WITHIN_SERVICE_AREA = "within"
OUTSIDE_SERVICE_AREA = "outside"


@dataclass(frozen=True)
class VanFare:
    area: str
    one_way: Decimal
    round_trip: Decimal

    def fare_for(self, trip_type: TripType) -> Decimal:
        if trip_type == TripType.ROUND_TRIP:
            return self.round_trip
        return self.one_way


def _fare(area: str, one_way: int, round_trip: Optional[int] = None) -> VanFare:
    # Single-fare destinations cost the same whichever trip type is chosen.
    return VanFare(area, Decimal(one_way), Decimal(round_trip if round_trip is not None else one_way))


VAN_FARES: Mapping[str, VanFare] = MappingProxyType(
    {
        "Sabang": _fare(WITHIN_SERVICE_AREA, 800, 1600),
        "Muelle": _fare(WITHIN_SERVICE_AREA, 800, 1600),
        "Balatero": _fare(WITHIN_SERVICE_AREA, 1000, 2000),
        "White Beach": _fare(WITHIN_SERVICE_AREA, 1500, 3000),
        "Aninuan": _fare(WITHIN_SERVICE_AREA, 1500, 3000),
        "Ponderosa": _fare(WITHIN_SERVICE_AREA, 1800, 3000),
        "Tabinay": _fare(WITHIN_SERVICE_AREA, 800, 1500),
        "Dulangan": _fare(WITHIN_SERVICE_AREA, 1500, 3000),
        "Tamaraw Falls": _fare(WITHIN_SERVICE_AREA, 3000),
        "Tamaraw/Ponderosa/Talipanan/White Beach": _fare(WITHIN_SERVICE_AREA, 4000),
        "Windfarm": _fare(WITHIN_SERVICE_AREA, 3000),
        "Tukuran Falls": _fare(WITHIN_SERVICE_AREA, 3500),
        "Infinity Farm": _fare(WITHIN_SERVICE_AREA, 4500),
        "Lantuyan": _fare(WITHIN_SERVICE_AREA, 4500),
        "Around Puerto Galera": _fare(WITHIN_SERVICE_AREA, 4500),
        "Calapan": _fare(OUTSIDE_SERVICE_AREA, 5000),
        "Naujan": _fare(OUTSIDE_SERVICE_AREA, 6000),
        "Victoria": _fare(OUTSIDE_SERVICE_AREA, 6500),
        "Socorro": _fare(OUTSIDE_SERVICE_AREA, 7000),
        "Pola": _fare(OUTSIDE_SERVICE_AREA, 7500),
        "Pinamalayan": _fare(OUTSIDE_SERVICE_AREA, 7500),
        "Gloria": _fare(OUTSIDE_SERVICE_AREA, 8000),
        "Bansud": _fare(OUTSIDE_SERVICE_AREA, 8500),
        "Bongabong": _fare(OUTSIDE_SERVICE_AREA, 9000),
        "Roxas": _fare(OUTSIDE_SERVICE_AREA, 10000),
        "Mansalay": _fare(OUTSIDE_SERVICE_AREA, 11000),
        "Bulalacao": _fare(OUTSIDE_SERVICE_AREA, 12500),
        "San Jose": _fare(OUTSIDE_SERVICE_AREA, 15000),
        "Sablayan": _fare(OUTSIDE_SERVICE_AREA, 20000),
        "Manila Airport": _fare(OUTSIDE_SERVICE_AREA, 25000),
    }
)


# Hotel-bundled tour packages, per head. The Mangyan Grand Hotel groups
# larger parties differently from the other hotels.
_PACKAGE_RATE_ROWS = {
    "Ilaya": {
        "Package 1": ((1, 1, 6400), (2, 2, 3200), (3, 4, 2950), (5, 6, 2650), (7, 9, 2350), (10, None, 2100)),
        "Package 2": ((1, 1, 7600), (2, 2, 3800), (3, 4, 3450), (5, 6, 3150), (7, 9, 2850), (10, None, 2600)),
        "Package 3": (
            (1, 1, 5600), (2, 2, 2800), (3, 3, 2550), (4, 4, 2300), (5, 6, 1950), (7, 9, 1850), (10, None, 1650),
        ),
        "Package 4": (
            (1, 1, 6600), (2, 2, 3300), (3, 3, 3150), (4, 4, 3000), (5, 6, 2700), (7, 9, 2400), (10, None, 2100),
        ),
    },
    "Bliss": {
        "Package 1": ((1, 1, 6800), (2, 2, 3400), (3, 4, 3150), (5, 6, 2850), (7, 9, 2550), (10, None, 2300)),
        "Package 2": ((1, 1, 8000), (2, 2, 4000), (3, 4, 3650), (5, 6, 3350), (7, 9, 3050), (10, None, 2800)),
        "Package 3": (
            (1, 1, 6000), (2, 2, 3000), (3, 3, 2750), (4, 4, 2500), (5, 6, 2150), (7, 9, 2050), (10, None, 1850),
        ),
        "Package 4": (
            (1, 1, 7000), (2, 2, 3500), (3, 3, 3350), (4, 4, 3200), (5, 6, 2900), (7, 9, 2600), (10, None, 2300),
        ),
    },
    "The Mangyan Grand Hotel": {
        "Package 1": ((1, 1, 8600), (2, 2, 4300), (3, 4, 4100), (5, 8, 3900), (9, None, 3700)),
        "Package 2": ((1, 1, 11700), (2, 2, 5850), (3, 4, 5400), (5, 8, 4900), (9, None, 4700)),
        "Package 3": ((1, 1, 8100), (2, 2, 4050), (3, 4, 3850), (5, 8, 3300), (9, None, 3100)),
        "Package 4": ((1, 1, 10800), (2, 2, 5400), (3, 4, 4800), (5, 8, 4200), (9, None, 4000)),
    },
    "Transient House": {
        "Package 1": ((1, 1, 6900), (2, 2, 3450), (3, 4, 3300), (5, 6, 3100), (7, 9, 2900), (10, None, 2600)),
        "Package 2": ((1, 1, 9200), (2, 2, 4600), (3, 4, 4400), (5, 6, 4100), (7, 9, 3800), (10, None, 3500)),
        "Package 3": ((1, 1, 6900), (2, 2, 3450), (3, 4, 3300), (5, 6, 3100), (7, 9, 2900), (10, None, 2600)),
        "Package 4": ((1, 1, 9200), (2, 2, 4600), (3, 4, 4400), (5, 6, 4100), (7, 9, 3800), (10, None, 3500)),
    },
    "SouthView": {
        "Package 1": ((1, 1, 7000), (2, 2, 3500), (3, 4, 3150), (5, 6, 2850), (7, 9, 2550), (10, None, 2300)),
        "Package 2": ((1, 1, 8000), (2, 2, 4000), (3, 4, 3750), (5, 6, 3350), (7, 9, 3050), (10, None, 2800)),
        "Package 3": (
            (1, 1, 6000), (2, 2, 3000), (3, 3, 2750), (4, 4, 2500), (5, 6, 2150), (7, 9, 2050), (10, None, 1850),
        ),
        "Package 4": (
            (1, 1, 7000), (2, 2, 3500), (3, 3, 3350), (4, 4, 3200), (5, 6, 2900), (7, 9, 2600), (10, None, 2300),
        ),
    },
}

TOUR_PACKAGE_RATES: Mapping[Tuple[str, str], TierTable] = MappingProxyType(
    {
        (hotel, package): _tiers(*rows)
        for hotel, packages in _PACKAGE_RATE_ROWS.items()
        for package, rows in packages.items()
    }
)

TOUR_PACKAGES: Tuple[str, ...] = ("Package 1", "Package 2", "Package 3", "Package 4")
