from __future__ import annotations

from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from booking_wizard.collaborators import InMemoryBookingBackend
from booking_wizard.main import app, get_service
from booking_wizard.service import BookingWizardService
from booking_wizard.storage import InMemorySessionStorage

HEADERS = {"X-Session-Id": "browser-tab-1"}


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    service = BookingWizardService(storage=InMemorySessionStorage(), backend=InMemoryBookingBackend())
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _contact_payload() -> dict[str, Any]:
    return {
        "first_name": "Juan",
        "last_name": "Dela Cruz",
        "email": "juan@example.com",
        "contact_number": "0917 123 4567",
        "arrival_date": "2025-03-01",
        "departure_date": "2025-03-03",
    }


def _services_payload() -> dict[str, Any]:
    return {
        "tourist_count": 2,
        "tour_package": "Package 1",
        "vehicles": [],
        "rental_days": None,
        "van_rental": None,
        "diving": False,
        "diver_count": 0,
        "hotel": "Ilaya",
    }


def _advance(client: TestClient) -> dict[str, Any]:
    response = client.post("/v1/wizard/advance", headers=HEADERS)
    assert response.status_code == 200, response.json()
    return response.json()


def test_package_booking_end_to_end(client: TestClient) -> None:
    started = client.post("/v1/wizard/start", json={"booking_option": "package"}, headers=HEADERS)
    assert started.status_code == 201
    assert started.json()["page"] == "booking_form"

    assert client.put("/v1/wizard/steps/1", json=_contact_payload(), headers=HEADERS).status_code == 200
    assert _advance(client)["page"] == "package_only"

    assert client.put("/v1/wizard/steps/2", json=_services_payload(), headers=HEADERS).status_code == 200
    moved = _advance(client)
    assert moved["to_step"] == 3
    assert moved["page"] == "package_summary"

    summary = client.get("/v1/wizard/summary", headers=HEADERS).json()
    assert summary["grand_total"] == "₱6,400.00"
    assert [line["category"] for line in summary["lines"] if line["visible"]] == ["tours"]

    _advance(client)
    option = client.get("/v1/wizard/payment-option", headers=HEADERS).json()
    assert option["minimum_down_payment"] == "1000"

    client.put(
        "/v1/wizard/steps/4",
        json={"payment_plan": "down", "down_payment_amount": "2000"},
        headers=HEADERS,
    )
    _advance(client)

    confirmed = client.post("/v1/wizard/payment-confirmation", json={"payment_method": "gcash"}, headers=HEADERS)
    assert confirmed.status_code == 200
    assert confirmed.json()["to_step"] == 6

    receipt = client.post("/v1/wizard/receipt", json={"receipt_confirmed": True}, headers=HEADERS)
    assert receipt.json()["draft"]["receipt_present"] is True
    _advance(client)

    submitted = client.post("/v1/wizard/submit", headers=HEADERS)
    assert submitted.status_code == 200
    body = submitted.json()
    assert body["step"] == 8
    assert body["draft"]["status"] == "submitted"
    assert body["draft"]["remaining_balance"] == "4400"
    assert body["draft"]["booking_reference"]


def test_blocked_advance_returns_error_map(client: TestClient) -> None:
    client.post("/v1/wizard/start", json={"booking_option": "tour"}, headers=HEADERS)

    response = client.post("/v1/wizard/advance", headers=HEADERS)

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_FAILED"
    assert "first_name" in body["errors"]


def test_missing_form_field(client: TestClient) -> None:
    client.post("/v1/wizard/start", json={"booking_option": "tour"}, headers=HEADERS)
    payload = _contact_payload()
    del payload["email"]

    response = client.put("/v1/wizard/steps/1", json=payload, headers=HEADERS)

    assert response.status_code == 400
    assert response.json() == {
        "code": "FIELD_MISSING",
        "message": "step 1 form is missing field 'email'",
        "field": "email",
    }


def test_editing_future_step_conflicts(client: TestClient) -> None:
    client.post("/v1/wizard/start", json={"booking_option": "package"}, headers=HEADERS)

    response = client.put("/v1/wizard/steps/2", json=_services_payload(), headers=HEADERS)

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


def test_submit_requires_submission_step(client: TestClient) -> None:
    client.post("/v1/wizard/start", json={"booking_option": "tour"}, headers=HEADERS)
    response = client.post("/v1/wizard/submit", headers=HEADERS)
    assert response.status_code == 409


def test_sessions_are_isolated_and_clearable(client: TestClient) -> None:
    client.post("/v1/wizard/start", json={"booking_option": "tour"}, headers=HEADERS)
    client.put("/v1/wizard/steps/1", json=_contact_payload(), headers=HEADERS)

    other = client.get("/v1/wizard", headers={"X-Session-Id": "browser-tab-2"}).json()
    assert other["draft"]["first_name"] == ""

    assert client.delete("/v1/wizard", headers=HEADERS).status_code == 204
    cleared = client.get("/v1/wizard", headers=HEADERS).json()
    assert cleared["step"] == 1
    assert cleared["draft"]["first_name"] == ""
    assert cleared["draft"]["booking_type"] is None


def test_retreat_from_summary_returns_to_services_page(client: TestClient) -> None:
    client.post("/v1/wizard/start", json={"booking_option": "package"}, headers=HEADERS)
    client.put("/v1/wizard/steps/1", json=_contact_payload(), headers=HEADERS)
    _advance(client)
    client.put("/v1/wizard/steps/2", json=_services_payload(), headers=HEADERS)
    _advance(client)

    response = client.post("/v1/wizard/retreat", headers=HEADERS)

    assert response.json()["to_step"] == 2
    assert response.json()["page"] == "package_only"
