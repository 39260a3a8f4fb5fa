"""Static compliance document catalog and access requests."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from backend.application.errors import DocumentCategoryNotFound, DocumentNotFound
from backend.application.intake import ClientInfo
from backend.core.identifiers import generate_id
from backend.core.schema import DocumentAccessRequest
from backend.core.validation import validate_submission
from backend.domain import Collection
from backend.infrastructure import RecordRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Document:
    id: str
    name: str
    file: str
    description: str


DOCUMENT_CATALOG: dict[str, tuple[Document, ...]] = {
    "ndas": (
        Document("mutual-nda", "Mutual Non-Disclosure Agreement", "mutual-nda.pdf", "For mutual confidentiality between parties"),
        Document("seller-nda", "Seller Non-Disclosure Agreement", "seller-nda.pdf", "For seller confidentiality"),
    ),
    "agreements": (
        Document("ncnnda", "Non-Circumvention Non-Disclosure Agreement", "ncnnda.pdf", "NCNDA for broker protection"),
        Document("imfpa", "Irrevocable Master Fee Protection Agreement", "imfpa.pdf", "IMFPA for commission protection"),
        Document("broker-agreement", "Broker Agreement", "broker-agreement.pdf", "Standard broker agreement"),
    ),
    "compliance": (
        Document("kyc-policy", "KYC Policy", "kyc-policy.pdf", "Know Your Customer policy"),
        Document("aml-policy", "AML Policy", "aml-policy.pdf", "Anti-Money Laundering policy"),
        Document("sanctions-policy", "Sanctions Policy", "sanctions-policy.pdf", "International sanctions compliance"),
    ),
    "company": (
        Document("company-profile", "Company Profile", "company-profile.pdf", "Websutech company overview"),
    ),
}


class DocumentLibrary:
    def __init__(self, repository: RecordRepository, catalog: dict[str, tuple[Document, ...]] | None = None) -> None:
        self._repository = repository
        self._catalog = catalog if catalog is not None else DOCUMENT_CATALOG

    @property
    def categories(self) -> list[str]:
        return list(self._catalog)

    def list_documents(self) -> dict[str, list[dict[str, Any]]]:
        return {category: [asdict(doc) for doc in docs] for category, docs in self._catalog.items()}

    def get_category(self, category: str) -> list[dict[str, Any]]:
        docs = self._catalog.get(category)
        if docs is None:
            raise DocumentCategoryNotFound(category)
        return [asdict(doc) for doc in docs]

    def find(self, document_id: str) -> tuple[str, Document]:
        for category, docs in self._catalog.items():
            for doc in docs:
                if doc.id == document_id:
                    return category, doc
        raise DocumentNotFound(document_id)

    def request_access(self, document_id: str, payload: dict[str, Any], client: ClientInfo | None = None) -> dict[str, Any]:
        """Record who asked for a document; download links are sent out of band."""

        category, document = self.find(document_id)
        form = validate_submission(DocumentAccessRequest, payload)
        client = client or ClientInfo()

        reference = generate_id("DOC")
        self._repository.put(
            Collection.DOCUMENTS,
            {
                "id": reference,
                "documentId": document.id,
                "documentName": document.name,
                "category": category,
                "requesterName": form.name,
                "requesterEmail": form.email,
                "requesterCompany": form.company,
                **client.as_record(),
            },
        )
        logger.info("Document request %s: %s by %s", reference, document.name, form.email)
        return {"reference": reference, "document": document.name, "category": category}
