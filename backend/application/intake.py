"""Application service for the public intake forms.

Every form follows the same path: validate, (contact only) check for a
double-submit, persist, notify, respond. A failed acknowledgment email turns
into :class:`NotificationDeliveryFailure` even though the record has already
been stored; the operations alert is best-effort.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from backend.application.dedupe import DuplicateSubmissionFilter
from backend.application.errors import InquiryNotFound, NotificationDeliveryFailure
from backend.application.notifications import DispatchReport, NotificationDispatcher, NotificationKind
from backend.core.identifiers import generate_id
from backend.core.schema import (
    BuyerInquiryRequest,
    ContactSubmission,
    MandateApplicationRequest,
    NewsletterSubscription,
    SellerInquiryRequest,
)
from backend.core.validation import validate_submission
from backend.domain import Collection, InquiryKind
from backend.infrastructure import RecordRepository

logger = logging.getLogger(__name__)


NEXT_STEPS: dict[NotificationKind, list[str]] = {
    NotificationKind.CONTACT: [
        "We will respond to your message within 24 hours",
        "Check your email for confirmation",
    ],
    NotificationKind.NEWSLETTER: [
        "Check your inbox for the welcome email",
        "Market updates will arrive in upcoming issues",
    ],
    NotificationKind.BUYER_INQUIRY: [
        "Our team will review your inquiry within 24 hours",
        "We will prepare a Mutual NDA for signing",
        "After NDA execution, we will share available offers",
        "You will receive formal offers from verified suppliers",
    ],
    NotificationKind.SELLER_INQUIRY: [
        "Our team will verify your company and product details",
        "We may request specifications and certifications",
        "Verified offers are matched with qualified buyers",
    ],
    NotificationKind.MANDATE: [
        "Your application will be reviewed by our partnerships team",
        "We will contact you to complete KYC verification",
        "Approved mandates receive a broker agreement for signature",
    ],
}

ID_PREFIXES: dict[NotificationKind, str] = {
    NotificationKind.CONTACT: "CONTACT",
    NotificationKind.NEWSLETTER: "NEWS",
    NotificationKind.BUYER_INQUIRY: "BUY",
    NotificationKind.SELLER_INQUIRY: "SELL",
    NotificationKind.MANDATE: "MANDATE",
}

# response field naming differs per form; existing clients read these keys
ID_FIELDS: dict[NotificationKind, str] = {
    NotificationKind.CONTACT: "messageId",
    NotificationKind.NEWSLETTER: "subscriptionId",
    NotificationKind.BUYER_INQUIRY: "inquiryId",
    NotificationKind.SELLER_INQUIRY: "inquiryId",
    NotificationKind.MANDATE: "mandateId",
}

SUCCESS_MESSAGES: dict[NotificationKind, str] = {
    NotificationKind.CONTACT: "Contact message sent successfully",
    NotificationKind.NEWSLETTER: "Successfully subscribed to newsletter",
    NotificationKind.BUYER_INQUIRY: "Buyer inquiry submitted successfully",
    NotificationKind.SELLER_INQUIRY: "Seller inquiry submitted successfully",
    NotificationKind.MANDATE: "Mandate application submitted successfully",
}

FAILURE_MESSAGES: dict[NotificationKind, str] = {
    NotificationKind.CONTACT: "Failed to send contact message",
    NotificationKind.NEWSLETTER: "Failed to subscribe to newsletter",
    NotificationKind.BUYER_INQUIRY: "Failed to submit buyer inquiry",
    NotificationKind.SELLER_INQUIRY: "Failed to submit seller inquiry",
    NotificationKind.MANDATE: "Failed to submit mandate application",
}

DUPLICATE_MESSAGE = "Your message was already received successfully!"


@dataclass(slots=True)
class ClientInfo:
    """Where a submission came from."""

    ip: str | None = None
    user_agent: str | None = None

    def as_record(self) -> dict[str, str | None]:
        return {"clientIp": self.ip, "userAgent": self.user_agent}


@dataclass(slots=True)
class IntakeReceipt:
    kind: NotificationKind
    record_id: str
    next_steps: list[str] = field(default_factory=list)
    duplicate: bool = False
    report: DispatchReport | None = None

    @property
    def id_field(self) -> str:
        return ID_FIELDS[self.kind]

    @property
    def message(self) -> str:
        return DUPLICATE_MESSAGE if self.duplicate else SUCCESS_MESSAGES[self.kind]

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": True,
            "message": self.message,
            self.id_field: self.record_id,
            "nextSteps": list(self.next_steps),
        }
        if self.duplicate:
            body["duplicate"] = True
        elif self.kind is NotificationKind.CONTACT:
            body["emailSent"] = True
        return body


def status_projection(record: dict[str, Any]) -> dict[str, Any]:
    """Public view of an inquiry; never exposes the submitter's contact fields."""

    return {
        "id": record.get("id"),
        "kind": record.get("kind"),
        "status": record.get("status"),
        "createdAt": record.get("createdAt"),
        "product": record.get("specificProduct") or record.get("productDescription"),
        "company": record.get("companyName"),
    }


class IntakeService:
    """Coordinates the intake use cases."""

    def __init__(
        self,
        repository: RecordRepository,
        dispatcher: NotificationDispatcher,
        duplicates: DuplicateSubmissionFilter,
    ) -> None:
        self._repository = repository
        self._dispatcher = dispatcher
        self._duplicates = duplicates

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    async def _notify(
        self,
        kind: NotificationKind,
        record_id: str,
        recipient: str,
        data: dict[str, Any],
    ) -> IntakeReceipt:
        next_steps = NEXT_STEPS[kind]
        report = await self._dispatcher.dispatch(kind, recipient, {"reference": record_id, "next_steps": next_steps, **data})
        if not report.acknowledged:
            raise NotificationDeliveryFailure(kind, record_id, report.submitter)
        return IntakeReceipt(kind=kind, record_id=record_id, next_steps=next_steps, report=report)

    def _store_inquiry(self, kind: InquiryKind, record_id: str, fields: dict[str, Any], client: ClientInfo, status: str) -> None:
        record = {**fields, "id": record_id, "kind": kind.value, "status": status, **client.as_record()}
        self._repository.put(Collection.INQUIRIES, record)

    # ------------------------------------------------------------------
    # contact & newsletter
    # ------------------------------------------------------------------
    async def submit_contact(self, payload: dict[str, Any], client: ClientInfo | None = None) -> IntakeReceipt:
        kind = NotificationKind.CONTACT
        form = validate_submission(ContactSubmission, payload)
        client = client or ClientInfo()

        fingerprint = DuplicateSubmissionFilter.fingerprint(form.email, form.subject, form.message)
        message_id, duplicate = self._duplicates.claim(fingerprint, generate_id(ID_PREFIXES[kind]))
        if duplicate:
            logger.warning("Duplicate contact submission from %s within %.0fs, reusing %s", form.email, self._duplicates.window, message_id)
            return IntakeReceipt(kind=kind, record_id=message_id, next_steps=NEXT_STEPS[kind], duplicate=True)

        record = {**form.to_record(), "id": message_id, "status": "new", **client.as_record()}
        self._repository.put(Collection.CONTACTS, record)
        logger.info("Contact form submitted: %s from %s (%s)", message_id, form.email, form.category)

        return await self._notify(
            kind,
            message_id,
            form.email,
            {
                "recipient_name": form.name,
                "subject": form.subject,
                "category": form.category,
                "alert_fields": [
                    ("From", f"{form.name} ({form.email})"),
                    ("Category", form.category),
                    ("Subject", form.subject),
                ],
                "body": form.message,
            },
        )

    async def subscribe_newsletter(self, payload: dict[str, Any], client: ClientInfo | None = None) -> IntakeReceipt:
        kind = NotificationKind.NEWSLETTER
        form = validate_submission(NewsletterSubscription, payload)
        client = client or ClientInfo()

        if self._repository.find_user_by_email(form.email) is not None:
            logger.info("Newsletter email %s is already subscribed; storing another subscription", form.email)

        subscription_id = generate_id(ID_PREFIXES[kind])
        record = {**form.to_record(), "id": subscription_id, "type": "newsletter", "active": True, **client.as_record()}
        self._repository.put(Collection.USERS, record)
        logger.info("Newsletter subscription %s for %s", subscription_id, form.email)

        return await self._notify(
            kind,
            subscription_id,
            form.email,
            {
                "recipient_name": form.name,
                "email": form.email,
                "alert_fields": [("Email", form.email), ("Name", form.name or "Anonymous")],
            },
        )

    # ------------------------------------------------------------------
    # inquiries
    # ------------------------------------------------------------------
    async def submit_buyer_inquiry(self, payload: dict[str, Any], client: ClientInfo | None = None) -> IntakeReceipt:
        kind = NotificationKind.BUYER_INQUIRY
        form = validate_submission(BuyerInquiryRequest, payload)
        product = form.product_label
        inquiry_id = generate_id(ID_PREFIXES[kind])

        fields = {**form.to_record(), "specificProduct": product}
        self._store_inquiry(InquiryKind.BUYER, inquiry_id, fields, client or ClientInfo(), status="new")
        logger.info("Buyer inquiry %s: %s for %s", inquiry_id, form.company_name, product)

        return await self._notify(
            kind,
            inquiry_id,
            form.email,
            {
                "recipient_name": form.contact_person,
                "product": product,
                "alert_fields": [
                    ("Company", form.company_name),
                    ("Contact", f"{form.contact_person} ({form.email}, {form.phone})"),
                    ("Country", form.country),
                    ("Category", form.product_category),
                    ("Product", product),
                    ("Quantity", form.quantity),
                    ("Target Price", form.target_price),
                    ("Delivery Location", form.delivery_location),
                    ("Payment Terms", form.payment_terms),
                    ("Urgency", form.urgency),
                ],
                "body": form.additional_requirements,
            },
        )

    async def submit_seller_inquiry(self, payload: dict[str, Any], client: ClientInfo | None = None) -> IntakeReceipt:
        kind = NotificationKind.SELLER_INQUIRY
        form = validate_submission(SellerInquiryRequest, payload)
        product = form.product_label
        inquiry_id = generate_id(ID_PREFIXES[kind])

        self._store_inquiry(InquiryKind.SELLER, inquiry_id, form.to_record(), client or ClientInfo(), status="new")
        logger.info("Seller inquiry %s: %s offering %s", inquiry_id, form.company_name, product)

        return await self._notify(
            kind,
            inquiry_id,
            form.email,
            {
                "recipient_name": form.contact_person,
                "product": product,
                "alert_fields": [
                    ("Company", form.company_name),
                    ("Contact", f"{form.contact_person} ({form.email}, {form.phone})"),
                    ("Product", form.product_description),
                    ("Quantity Available", form.quantity_available),
                    ("Certification", form.certification),
                ],
                "body": None,
            },
        )

    async def submit_mandate_application(self, payload: dict[str, Any], client: ClientInfo | None = None) -> IntakeReceipt:
        kind = NotificationKind.MANDATE
        form = validate_submission(MandateApplicationRequest, payload)
        mandate_id = generate_id(ID_PREFIXES[kind])

        self._store_inquiry(InquiryKind.MANDATE, mandate_id, form.to_record(), client or ClientInfo(), status="pending_review")
        logger.info("Mandate application %s from %s", mandate_id, form.company_name)

        return await self._notify(
            kind,
            mandate_id,
            form.email,
            {
                "recipient_name": form.contact_person,
                "applicant_company": form.company_name,
                "alert_fields": [
                    ("Company", form.company_name),
                    ("Contact", f"{form.contact_person} ({form.email})"),
                    ("Phone", form.phone),
                    ("Country", form.country),
                    ("Experience", form.experience),
                    ("Network", form.network),
                    ("References", form.references),
                ],
                "body": form.additional_info,
            },
        )

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------
    def get_inquiry_status(self, inquiry_id: str) -> dict[str, Any]:
        record = self._repository.get(Collection.INQUIRIES, inquiry_id)
        if record is None:
            raise InquiryNotFound(inquiry_id)
        return status_projection(record)

    def list_inquiries(self, kind: str | None = None, status: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
        def matches(record: dict[str, Any]) -> bool:
            if kind and record.get("kind") != kind:
                return False
            if status and record.get("status") != status:
                return False
            return True

        records = self._repository.list(Collection.INQUIRIES, matches)
        records.sort(key=lambda item: str(item.get("createdAt") or ""), reverse=True)
        return [status_projection(record) for record in records[: max(limit, 0)]]
