"""Errors raised by the application services."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from backend.application.notifications import NotificationKind
    from backend.infrastructure import DeliveryOutcome


class NotFoundError(LookupError):
    """Raised when a looked-up record or catalog entry does not exist."""

    message = "Not found"

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"{self.message}: {identifier}")


class InquiryNotFound(NotFoundError):
    message = "Inquiry not found"


class DocumentNotFound(NotFoundError):
    message = "Document not found"


class DocumentCategoryNotFound(NotFoundError):
    message = "Document category not found"


class NotificationDeliveryFailure(RuntimeError):
    """The submitter acknowledgment could not be delivered.

    The submission itself is already stored when this is raised.
    """

    def __init__(self, kind: "NotificationKind", record_id: str, outcome: "DeliveryOutcome") -> None:
        self.kind = kind
        self.record_id = record_id
        self.outcome = outcome
        reason = outcome.error_kind.value if outcome.error_kind else "unknown"
        super().__init__(f"acknowledgment for {record_id} not delivered ({reason})")
