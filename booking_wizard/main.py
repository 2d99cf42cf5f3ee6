from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, Header, Path, Request, Response, status
from fastapi.responses import JSONResponse

from .collaborators import InMemoryBookingBackend, ReportedReceipt
from .config import get_settings
from .errors import AppError
from .models import Step
from .schemas import (
    DraftRecord,
    PaymentConfirmationRequest,
    PaymentOptionResponse,
    ReceiptReport,
    StartWizardRequest,
    SummaryResponse,
    TransitionResponse,
    WizardStateResponse,
)
from .sequencer import StepSequencer
from .service import BookingWizardService
from .storage import InMemorySessionStorage

logging.basicConfig(level=get_settings().log_level)

app = FastAPI(title="Booking Wizard API", version="1.0.0")


def get_service() -> BookingWizardService:
    if not hasattr(get_service, "_instance"):
        get_service._instance = BookingWizardService(  # type: ignore[attr-defined]
            storage=InMemorySessionStorage(),
            backend=InMemoryBookingBackend(),
            policy=get_settings().policy,
        )
    return get_service._instance  # type: ignore[attr-defined]


def _state(sequencer: StepSequencer) -> WizardStateResponse:
    return WizardStateResponse(
        step=int(sequencer.step),
        page=sequencer.page,
        draft=DraftRecord.from_domain(sequencer.draft),
    )


@app.exception_handler(AppError)
async def handle_app_error(_: Request, exc: AppError) -> JSONResponse:
    logging.getLogger(__name__).warning("Request failed", extra={"code": exc.code, "detail": exc.message})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.post("/v1/wizard/start", response_model=WizardStateResponse, status_code=status.HTTP_201_CREATED)
async def start_wizard(
    payload: StartWizardRequest,
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> WizardStateResponse:
    return _state(service.start(session_id, payload.booking_option))


@app.get("/v1/wizard", response_model=WizardStateResponse)
async def get_wizard(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> WizardStateResponse:
    return _state(service.open(session_id))


@app.put("/v1/wizard/steps/{step}", response_model=WizardStateResponse)
async def update_step(
    step: int = Path(ge=1, le=8),
    payload: Dict[str, Any] = Body(...),
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> WizardStateResponse:
    return _state(service.update_step(session_id, Step(step), payload))


@app.post("/v1/wizard/advance", response_model=TransitionResponse)
async def advance(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> TransitionResponse:
    return TransitionResponse.from_domain(service.advance(session_id))


@app.post("/v1/wizard/retreat", response_model=TransitionResponse)
async def retreat(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> TransitionResponse:
    return TransitionResponse.from_domain(service.retreat(session_id))


@app.get("/v1/wizard/summary", response_model=SummaryResponse)
async def get_summary(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> SummaryResponse:
    return SummaryResponse.from_domain(service.summary(session_id))


@app.get("/v1/wizard/payment-option", response_model=PaymentOptionResponse)
async def get_payment_option(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> PaymentOptionResponse:
    quote = service.payment_option(session_id)
    return PaymentOptionResponse(
        grand_total=quote.grand_total,
        minimum_down_payment=quote.minimum_down_payment,
        payment_plan=quote.payment_plan,
        down_payment_amount=quote.down_payment_amount,
        remaining_balance=quote.remaining_balance,
        amount_due_now=quote.amount_due_now,
    )


@app.post("/v1/wizard/payment-confirmation", response_model=TransitionResponse)
async def confirm_payment(
    payload: PaymentConfirmationRequest,
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> TransitionResponse:
    return TransitionResponse.from_domain(service.confirm_payment(session_id, payload.payment_method))


@app.post("/v1/wizard/receipt", response_model=WizardStateResponse)
async def report_receipt(
    payload: ReceiptReport,
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> WizardStateResponse:
    return _state(service.record_receipt(session_id, ReportedReceipt(payload.receipt_confirmed)))


@app.post("/v1/wizard/submit", response_model=WizardStateResponse)
async def submit_booking(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> WizardStateResponse:
    return _state(service.submit(session_id))


@app.delete("/v1/wizard", status_code=status.HTTP_204_NO_CONTENT)
async def clear_wizard(
    service: BookingWizardService = Depends(get_service),
    session_id: str = Header(alias="X-Session-Id"),
) -> Response:
    service.clear(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
