"""
Backend functions called directly by the site's frontend.

Served as a separate ASGI app (uvicorn app.functions.main:app) with permissive CORS,
independent of the origin allow-list of the main API.
"""
import logging
from typing import Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import Client

from app.config import settings
from app.core.log_config import configure_logging
from app.core.dependencies import get_auth_service, is_admin
from app.database.supabase_client import get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.notifications.schemas import (
    CheckLowCapacityRequest, LowCapacityResult,
    SendEventNotificationRequest, FanOutResult
)
from app.modules.notifications.service import NotificationService

configure_logging()
logger = logging.getLogger(__name__)

CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

app = FastAPI(title=f"{settings.app_name}-functions", debug=settings.debug)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=CORS_HEADERS,
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception in function %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def get_admin_caller(
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_service_supabase),
) -> Dict:
    """Caller must send a bearer token of a user holding the admin role"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")
    token = authorization.split(" ", 1)[1] if authorization.lower().startswith("bearer ") else authorization
    try:
        user_data = auth_service.get_current_user(token)
    except HTTPException:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not is_admin(user_data, supabase):
        logger.error("User is not an admin: %s", user_data["id"])
        raise HTTPException(status_code=403, detail="Admin access required")
    return user_data


@app.post("/check-low-capacity", response_model=LowCapacityResult, response_model_exclude_none=True)
async def check_low_capacity(
    body: CheckLowCapacityRequest,
    supabase: Client = Depends(get_service_supabase),
):
    """Fan out a capacity warning when an event is nearly full"""
    logger.info("Checking capacity for event: %s", body.event_id)
    return NotificationService(supabase).check_low_capacity(body.event_id, body.new_registration_user_id)


@app.post("/send-event-notification", response_model=FanOutResult, response_model_exclude_none=True)
async def send_event_notification(
    body: SendEventNotificationRequest,
    caller: Dict = Depends(get_admin_caller),
    supabase: Client = Depends(get_service_supabase),
):
    """Admin broadcast about an event to all users"""
    logger.info("Sending notifications for event %s (requested by %s)", body.event_id, caller["id"])
    return NotificationService(supabase).send_event_notification(body.event_id, body.title, body.message)
