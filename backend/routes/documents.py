from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.application import ClientInfo, DocumentLibrary
from backend.domain import utc_now_iso
from backend.routes.dependencies import client_info, get_document_library

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/list")
async def list_documents(library: DocumentLibrary = Depends(get_document_library)) -> dict:
    return {"success": True, "documents": library.list_documents(), "timestamp": utc_now_iso()}


@router.get("/category/{category}")
async def get_document_category(category: str, library: DocumentLibrary = Depends(get_document_library)) -> dict:
    documents = library.get_category(category)
    return {"success": True, "category": category, "documents": documents}


@router.post("/request/{document_id}")
async def request_document(
    document_id: str,
    payload: dict,
    library: DocumentLibrary = Depends(get_document_library),
    client: ClientInfo = Depends(client_info),
) -> dict:
    result = library.request_access(document_id, payload, client)
    return {
        "success": True,
        "message": "Document request received. You will receive an email with download instructions.",
        "document": result["document"],
        "reference": result["reference"],
    }


@router.get("/test")
async def documents_test(library: DocumentLibrary = Depends(get_document_library)) -> dict:
    return {"success": True, "message": "Documents API is working", "availableCategories": library.categories}
