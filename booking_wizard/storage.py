from __future__ import annotations

import json
import logging
from threading import RLock
from typing import Any, Dict, Mapping, Optional, Protocol

import pydantic

from .aggregator import recompute
from .errors import StoreCorruptError
from .models import BookingDraft, BookingOption, TripType, VanRental
from .schemas import DraftRecord

logger = logging.getLogger(__name__)

DRAFT_KEY = "completeBookingData"
BOOKING_OPTION_KEY = "bookingOption"
STAGED_SELECTIONS_KEY = "tourSelections"

WIZARD_KEYS = (DRAFT_KEY, BOOKING_OPTION_KEY, STAGED_SELECTIONS_KEY)


class SessionStorage(Protocol):
    def get_item(self, session_id: str, key: str) -> Optional[str]: ...

    def set_item(self, session_id: str, key: str, value: str) -> None: ...

    def remove_item(self, session_id: str, key: str) -> None: ...


class InMemorySessionStorage:
    """Thread-safe in-memory key-value storage partitioned by browsing session."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._sessions: Dict[str, Dict[str, str]] = {}

    @property
    def lock(self) -> RLock:
        return self._lock

    def get_item(self, session_id: str, key: str) -> Optional[str]:
        with self._lock:
            return self._sessions.get(session_id, {}).get(key)

    def set_item(self, session_id: str, key: str, value: str) -> None:
        with self._lock:
            self._sessions.setdefault(session_id, {})[key] = value

    def remove_item(self, session_id: str, key: str) -> None:
        with self._lock:
            items = self._sessions.get(session_id)
            if items is None:
                return
            items.pop(key, None)
            if not items:
                del self._sessions[session_id]


class DraftStore:
    """Whole-record load/save of one session's booking draft."""

    def __init__(self, storage: SessionStorage, session_id: str) -> None:
        self._storage = storage
        self._session_id = session_id

    @property
    def session_id(self) -> str:
        return self._session_id

    def load(self) -> BookingDraft:
        raw = self._storage.get_item(self._session_id, DRAFT_KEY)
        draft = BookingDraft()
        if raw is not None:
            try:
                draft = self._decode(raw)
            except StoreCorruptError as exc:
                logger.warning(
                    "Stored draft unreadable, starting over",
                    extra={"session_id": self._session_id, "code": exc.code, "detail": exc.message},
                )
                draft = BookingDraft()

        if draft.booking_type is None:
            draft.booking_type = self.load_booking_option()

        staged = self._load_staged_selections()
        if staged:
            draft = merge_staged_selections(draft, staged)
        return recompute(draft)

    def save(self, draft: BookingDraft) -> None:
        record = DraftRecord.from_domain(draft)
        self._storage.set_item(self._session_id, DRAFT_KEY, record.model_dump_json())

    def clear(self) -> None:
        for key in WIZARD_KEYS:
            self._storage.remove_item(self._session_id, key)

    def load_booking_option(self) -> Optional[BookingOption]:
        raw = self._storage.get_item(self._session_id, BOOKING_OPTION_KEY)
        if not raw:
            return None
        try:
            return BookingOption(raw)
        except ValueError:
            logger.warning("Ignoring unknown booking option", extra={"session_id": self._session_id, "option": raw})
            return None

    def save_booking_option(self, option: BookingOption) -> None:
        self._storage.set_item(self._session_id, BOOKING_OPTION_KEY, option.value)

    def discard_staged_selections(self) -> None:
        self._storage.remove_item(self._session_id, STAGED_SELECTIONS_KEY)

    def _decode(self, raw: str) -> BookingDraft:
        try:
            return DraftRecord.model_validate_json(raw).to_domain()
        except (pydantic.ValidationError, ValueError) as exc:
            raise StoreCorruptError(f"stored draft could not be parsed: {exc}") from exc

    def _load_staged_selections(self) -> Optional[Mapping[str, Any]]:
        raw = self._storage.get_item(self._session_id, STAGED_SELECTIONS_KEY)
        if not raw:
            return None
        try:
            staged = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable staged selections", extra={"session_id": self._session_id})
            return None
        return staged if isinstance(staged, dict) else None


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_names(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    names: list[str] = []
    for item in value:
        if isinstance(item, str) and item and item not in names:
            names.append(item)
    return names


def _staged_van_rental(staged: Mapping[str, Any]) -> Optional[VanRental]:
    place = staged.get("vanPlace")
    if not place:
        return None
    trip = {"oneway": TripType.ONE_WAY, "roundtrip": TripType.ROUND_TRIP}.get(staged.get("vanTripType") or "")
    return VanRental(destination=place, trip_type=trip, days=_as_int(staged.get("vanDays")))


def merge_staged_selections(draft: BookingDraft, staged: Mapping[str, Any]) -> BookingDraft:
    """Fill service selections the draft leaves empty from a legacy ``tourSelections`` snapshot.

    The snapshot is the camelCase record older services pages stage for
    backward navigation. Anything already present on the draft wins, and a
    draft whose services step was committed (``last_page`` set) is never
    touched, even when every service was cleared.
    """
    if draft.last_page or draft.has_any_service:
        return draft

    if not draft.tourist_count:
        draft.tourist_count = _as_int(staged.get("touristCount"))
    draft.island_tours = _as_names(staged.get("islandTours"))
    draft.inland_tours = _as_names(staged.get("inlandTours"))
    draft.snorkeling_tours = _as_names(staged.get("snorkelTours"))
    draft.tour_package = staged.get("selectedPackage") or None
    draft.vehicles = _as_names(staged.get("rentalVehicles"))
    draft.rental_days = _as_int(staged.get("rentalDays")) or None
    draft.van_rental = _staged_van_rental(staged)
    draft.diving = bool(staged.get("diving"))
    draft.diver_count = _as_int(staged.get("numberOfDivers"))
    if not draft.hotel:
        draft.hotel = staged.get("selectedHotel") or None
    return draft
