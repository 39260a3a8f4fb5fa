from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.application import ClientInfo, IntakeService
from backend.routes.dependencies import client_info, get_intake_service

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("/submit")
async def submit_contact(
    payload: dict,
    service: IntakeService = Depends(get_intake_service),
    client: ClientInfo = Depends(client_info),
) -> dict:
    receipt = await service.submit_contact(payload, client)
    return receipt.to_response()


@router.post("/newsletter")
async def subscribe_newsletter(
    payload: dict,
    service: IntakeService = Depends(get_intake_service),
    client: ClientInfo = Depends(client_info),
) -> dict:
    receipt = await service.subscribe_newsletter(payload, client)
    return receipt.to_response()


@router.get("/test")
async def contact_test() -> dict:
    return {"success": True, "message": "Contact API is working"}
