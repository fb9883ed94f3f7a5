import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from streamline.core.logger import get_logger
from streamline.models.response import HealthResponse, SubmissionResult
from streamline.services.dispatch_service import NotificationDispatcher

form_router = APIRouter(prefix="/api", tags=["Forms"])

logger = get_logger(__name__)


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


async def read_payload(request: Request) -> dict:
    """Body as an untyped mapping; anything that is not a JSON object is empty."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(f"Unparseable JSON body on {request.url.path}")
        return {}
    return data if isinstance(data, dict) else {}


def to_response(result: SubmissionResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.model_dump())


@form_router.post("/quote", response_model=SubmissionResult)
async def submit_quote(
    payload: dict = Depends(read_payload),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.submit_quote(payload)
    return to_response(result)


@form_router.post("/contact", response_model=SubmissionResult)
async def submit_contact(
    payload: dict = Depends(read_payload),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.submit_contact(payload)
    return to_response(result)


@form_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    return HealthResponse(mail_ready=request.app.state.mail_ready)
