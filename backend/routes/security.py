from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from backend.application import ClientInfo
from backend.core.schema import SecurityEvent
from backend.core.validation import validate_submission
from backend.routes.dependencies import client_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/security", tags=["security"])


@router.post("/log", status_code=201)
async def log_security_event(payload: dict, client: ClientInfo = Depends(client_info)) -> dict:
    event = validate_submission(SecurityEvent, payload)
    logger.warning(
        "Client security event %s from %s: %s (url=%s, agent=%s)",
        event.type,
        client.ip,
        event.message,
        event.url,
        event.user_agent or client.user_agent,
    )
    return {"success": True, "message": "Security log received"}


@router.get("/test")
async def security_test() -> dict:
    return {"success": True, "message": "Security API is working"}
