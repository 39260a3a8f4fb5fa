from __future__ import annotations

from fastapi import Request

from backend.application import ClientInfo, DocumentLibrary, IntakeService


def get_intake_service(request: Request) -> IntakeService:
    return request.app.state.intake_service


def get_document_library(request: Request) -> DocumentLibrary:
    return request.app.state.document_library


def client_info(request: Request) -> ClientInfo:
    """Submitter address and agent, honouring the first proxy hop."""

    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or (request.client.host if request.client else None)
    return ClientInfo(ip=ip, user_agent=request.headers.get("user-agent"))
