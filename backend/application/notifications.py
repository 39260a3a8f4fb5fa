"""Acknowledgment + operations alert emails for accepted submissions."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from backend.infrastructure import DeliveryOutcome, EmailRenderer, Mailer

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"[\r\n]+")


def _single_line(value: str | int) -> str | int:
    # header values may not contain line breaks
    return _LINE_BREAKS.sub(" ", value) if isinstance(value, str) else value


class NotificationKind(str, Enum):
    CONTACT = "contact"
    NEWSLETTER = "newsletter"
    BUYER_INQUIRY = "buyer_inquiry"
    SELLER_INQUIRY = "seller_inquiry"
    MANDATE = "mandate"


@dataclass(frozen=True, slots=True)
class NotificationProfile:
    acknowledgment_template: str
    acknowledgment_subject: str
    alert_title: str
    alert_subject: str
    action: str


PROFILES: dict[NotificationKind, NotificationProfile] = {
    NotificationKind.CONTACT: NotificationProfile(
        acknowledgment_template="contact_ack.html",
        acknowledgment_subject="Thank You for Your Inquiry - {reference}",
        alert_title="New Contact Message",
        alert_subject="New Contact Message: {subject}",
        action="Reply to the sender within 24 hours.",
    ),
    NotificationKind.NEWSLETTER: NotificationProfile(
        acknowledgment_template="newsletter_ack.html",
        acknowledgment_subject="Welcome to the {company_name} Newsletter",
        alert_title="New Newsletter Subscriber",
        alert_subject="New Newsletter Subscriber: {email}",
        action="No action required.",
    ),
    NotificationKind.BUYER_INQUIRY: NotificationProfile(
        acknowledgment_template="buyer_ack.html",
        acknowledgment_subject="Inquiry Confirmation - {product} ({reference})",
        alert_title="New Buyer Inquiry",
        alert_subject="New Buyer Inquiry: {product} - {reference}",
        action="Please contact the buyer within 24 hours.",
    ),
    NotificationKind.SELLER_INQUIRY: NotificationProfile(
        acknowledgment_template="seller_ack.html",
        acknowledgment_subject="Seller Registration Confirmation - {product} ({reference})",
        alert_title="New Seller Inquiry",
        alert_subject="New Seller Inquiry: {product} - {reference}",
        action="Verify the seller and request product documentation.",
    ),
    NotificationKind.MANDATE: NotificationProfile(
        acknowledgment_template="mandate_ack.html",
        acknowledgment_subject="Mandate Application Received - {reference}",
        alert_title="New Mandate Application",
        alert_subject="New Mandate Application - {applicant_company} ({reference})",
        action="Review the application and run KYC checks.",
    ),
}


@dataclass(slots=True)
class DispatchReport:
    submitter: DeliveryOutcome
    operations: DeliveryOutcome

    @property
    def acknowledged(self) -> bool:
        return self.submitter.delivered


class NotificationDispatcher:
    """Send the submitter acknowledgment, then the operations alert.

    Both sends are always attempted and reported independently; neither
    raises on delivery failure.
    """

    def __init__(self, mailer: Mailer, renderer: EmailRenderer, ops_address: str, company_name: str = "") -> None:
        self._mailer = mailer
        self._renderer = renderer
        self._ops_address = ops_address
        self._company_name = company_name

    async def dispatch(self, kind: NotificationKind, recipient: str, data: dict[str, Any]) -> DispatchReport:
        """Notify ``recipient`` and the operations mailbox about a submission.

        ``data`` must contain ``reference`` plus whatever the kind's templates
        and subject lines use; ``alert_fields`` (label/value pairs) and
        ``body`` feed the operations alert.
        """

        profile = PROFILES[kind]
        context = {"next_steps": [], **data}
        subject_vars = {"company_name": self._company_name}
        subject_vars.update((key, _single_line(value)) for key, value in context.items() if isinstance(value, (str, int)))

        acknowledgment = await self._mailer.send(
            to=recipient,
            subject=profile.acknowledgment_subject.format(**subject_vars),
            html=self._renderer.render(profile.acknowledgment_template, context),
        )
        if acknowledgment.delivered:
            logger.info("%s acknowledgment for %s delivered", kind.value, context["reference"])
        else:
            logger.error("%s acknowledgment for %s failed: %s", kind.value, context["reference"], acknowledgment.error_kind)

        alert_context = {
            "alert_title": profile.alert_title,
            "reference": context["reference"],
            "fields": [(label, value) for label, value in context.get("alert_fields", []) if value not in (None, "")],
            "body": context.get("body"),
            "action": profile.action,
        }
        operations = await self._mailer.send(
            to=self._ops_address,
            subject=profile.alert_subject.format(**subject_vars),
            html=self._renderer.render("ops_alert.html", alert_context),
        )
        if not operations.delivered:
            logger.warning("%s operations alert for %s failed (non-critical): %s", kind.value, context["reference"], operations.error_kind)

        return DispatchReport(submitter=acknowledgment, operations=operations)
