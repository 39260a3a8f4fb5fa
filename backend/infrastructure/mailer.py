"""Outbound email delivery over SMTP."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from enum import Enum
from typing import Protocol

import aiosmtplib

from backend.core.settings import Settings

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    AUTH = "auth"
    CONNECTION = "connection"
    RELAY_POLICY = "relay-policy"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class DeliveryOutcome:
    """Result of a single send attempt."""

    delivered: bool
    provider_message_id: str | None = None
    error_kind: FailureKind | None = None
    dev_mode: bool = False
    detail: str | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "delivered": self.delivered,
            "providerMessageId": self.provider_message_id,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "devMode": self.dev_mode,
        }


class MailTransport(Protocol):
    """Contract for anything able to hand a message to a mail server."""

    async def send(self, message: EmailMessage) -> None: ...


class SMTPMailTransport:
    """Deliver messages through an authenticated SMTP relay."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def send(self, message: EmailMessage) -> None:
        settings = self._settings
        await aiosmtplib.send(
            message,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_secure,
            start_tls=False if settings.smtp_secure else None,
            validate_certs=settings.smtp_validate_certs,
            timeout=settings.mail_timeout,
        )


def classify_failure(exc: BaseException) -> FailureKind:
    """Map a transport exception onto the small failure taxonomy."""

    if isinstance(exc, aiosmtplib.SMTPAuthenticationError):
        return FailureKind.AUTH
    if isinstance(exc, (aiosmtplib.SMTPSenderRefused, aiosmtplib.SMTPRecipientsRefused, aiosmtplib.SMTPRecipientRefused)):
        return FailureKind.RELAY_POLICY
    if isinstance(exc, aiosmtplib.SMTPResponseException):
        if exc.code == 553 or "relay" in str(exc.message).lower():
            return FailureKind.RELAY_POLICY
        if exc.code in (530, 535):
            return FailureKind.AUTH
        return FailureKind.UNKNOWN
    if isinstance(
        exc,
        (
            aiosmtplib.SMTPConnectError,
            aiosmtplib.SMTPServerDisconnected,
            aiosmtplib.SMTPTimeoutError,
            TimeoutError,
            OSError,
        ),
    ):
        return FailureKind.CONNECTION
    return FailureKind.UNKNOWN


class Mailer:
    """Send one message, reporting the outcome instead of raising.

    Without SMTP credentials the mailer logs the would-be message and reports
    a simulated delivery, so intake keeps working in environments where
    outbound mail is not configured.
    """

    def __init__(self, settings: Settings, transport: MailTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport or SMTPMailTransport(settings)

    @property
    def dev_mode(self) -> bool:
        return not self._settings.mail_configured

    def build_message(self, *, to: str, subject: str, html: str, text: str | None = None) -> EmailMessage:
        settings = self._settings
        # the relay rejects senders that differ from the authenticated user
        sender = settings.smtp_user or settings.ops_email
        domain = sender.rpartition("@")[2] or None
        message = EmailMessage()
        message["From"] = formataddr((settings.company_name, sender))
        message["To"] = to
        message["Subject"] = subject
        message["Reply-To"] = settings.reply_to or sender
        message["Message-ID"] = make_msgid(domain=domain)
        message.set_content(text or "This message requires an HTML capable email client.")
        message.add_alternative(html, subtype="html")
        return message

    async def send(self, *, to: str, subject: str, html: str, text: str | None = None) -> DeliveryOutcome:
        if self.dev_mode:
            logger.info("[dev mode] email not sent (SMTP credentials missing): to=%s subject=%r preview=%r", to, subject, html[:100])
            return DeliveryOutcome(delivered=True, dev_mode=True, detail="Email logged in development mode")

        try:
            message = self.build_message(to=to, subject=subject, html=html, text=text)
            await asyncio.wait_for(self._transport.send(message), timeout=self._settings.mail_timeout)
        except Exception as exc:  # noqa: BLE001 - every failure is reported as an outcome
            kind = classify_failure(exc)
            logger.error("Email to %s failed (%s): %s", to, kind.value, exc)
            if kind is FailureKind.RELAY_POLICY:
                logger.info("Relay policy rejection: sender must match SMTP_USER (%s)", self._settings.smtp_user)
            return DeliveryOutcome(delivered=False, error_kind=kind, detail=str(exc) or exc.__class__.__name__)

        message_id = message["Message-ID"]
        logger.info("Email sent to %s: %s", to, message_id)
        return DeliveryOutcome(delivered=True, provider_message_id=message_id)
