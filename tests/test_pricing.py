from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from booking_wizard.models import TripType, VanRental
from booking_wizard.pricing import (
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


@pytest.mark.parametrize(
    ("headcount", "expected"),
    [(0, 0), (1, 3000), (2, 3200), (3, 3000), (4, 4000), (5, 4000), (12, 9600)],
)
def test_island_tour_tiers(headcount: int, expected: int) -> None:
    assert island_tour_amount(headcount) == Decimal(expected)


@pytest.mark.parametrize(
    ("headcount", "expected"),
    [(1, 0), (2, 3000), (3, 3300), (4, 3200), (6, 4200), (7, 4200), (9, 5400), (10, 5500)],
)
def test_inland_tour_tiers(headcount: int, expected: int) -> None:
    assert inland_tour_amount(headcount) == Decimal(expected)


@pytest.mark.parametrize(
    ("headcount", "expected"),
    [(1, 2400), (2, 2600), (4, 4000), (5, 4500), (6, 5400), (7, 5600)],
)
def test_snorkeling_tour_tiers(headcount: int, expected: int) -> None:
    assert snorkeling_tour_amount(headcount) == Decimal(expected)


def test_tour_package_priced_per_head_by_hotel() -> None:
    assert tour_package_amount("Package 1", "Ilaya", 2) == Decimal("6400")
    assert tour_package_amount("Package 2", "The Mangyan Grand Hotel", 9) == Decimal("42300")


def test_tour_package_without_known_pair_is_free() -> None:
    assert tour_package_amount("Package 1", None, 2) == Decimal("0")
    assert tour_package_amount("Package 9", "Ilaya", 2) == Decimal("0")


def test_vehicle_amount_sums_daily_rates() -> None:
    assert vehicle_amount(["NMAX"], 3) == Decimal("3000")
    assert vehicle_amount(["ADV", "CAR"], 2) == Decimal("8000")
    assert vehicle_amount(["ADV"], None) == Decimal("0")


def test_vehicle_amount_skips_unknown_vehicle() -> None:
    assert vehicle_amount(["ADV", "JETSKI"], 1) == Decimal("1000")


def test_van_amount_uses_trip_type_fare() -> None:
    assert van_amount(VanRental("Sabang", TripType.ONE_WAY, 1)) == Decimal("800")
    assert van_amount(VanRental("Sabang", TripType.ROUND_TRIP, 2)) == Decimal("3200")
    assert van_amount(VanRental("Calapan", TripType.ROUND_TRIP, 1)) == Decimal("5000")


def test_van_amount_incomplete_rental_is_free() -> None:
    assert van_amount(None) == Decimal("0")
    assert van_amount(VanRental("Sabang", None, 1)) == Decimal("0")
    assert van_amount(VanRental("Sabang", TripType.ONE_WAY, 0)) == Decimal("0")
    assert van_amount(VanRental("Atlantis", TripType.ONE_WAY, 1)) == Decimal("0")


def test_diving_amount() -> None:
    assert diving_amount(True, 2) == Decimal("7000")
    assert diving_amount(False, 2) == Decimal("0")


def test_hotel_nights_and_amount() -> None:
    nights = hotel_nights(date(2025, 3, 1), date(2025, 3, 3))
    assert nights == 2
    assert hotel_amount("SouthView", nights) == Decimal("6000")
    assert hotel_nights(date(2025, 3, 3), date(2025, 3, 1)) == 0
    assert hotel_nights(None, date(2025, 3, 1)) == 0
    assert hotel_amount("Unknown Inn", 2) == Decimal("0")
