from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.application import ClientInfo, IntakeService
from backend.routes.dependencies import client_info, get_intake_service

router = APIRouter(prefix="/inquiries", tags=["inquiries"])


@router.post("/buyer")
async def submit_buyer_inquiry(
    payload: dict,
    service: IntakeService = Depends(get_intake_service),
    client: ClientInfo = Depends(client_info),
) -> dict:
    receipt = await service.submit_buyer_inquiry(payload, client)
    return receipt.to_response()


@router.post("/seller")
async def submit_seller_inquiry(
    payload: dict,
    service: IntakeService = Depends(get_intake_service),
    client: ClientInfo = Depends(client_info),
) -> dict:
    receipt = await service.submit_seller_inquiry(payload, client)
    return receipt.to_response()


@router.post("/mandate")
async def submit_mandate_application(
    payload: dict,
    service: IntakeService = Depends(get_intake_service),
    client: ClientInfo = Depends(client_info),
) -> dict:
    receipt = await service.submit_mandate_application(payload, client)
    return receipt.to_response()


@router.get("/status/{inquiry_id}")
async def get_inquiry_status(inquiry_id: str, service: IntakeService = Depends(get_intake_service)) -> dict:
    return {"success": True, "inquiry": service.get_inquiry_status(inquiry_id)}


@router.get("/test")
async def inquiries_test() -> dict:
    return {"success": True, "message": "Inquiries API is working"}
