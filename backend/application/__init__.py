"""Application services."""

from .dedupe import DuplicateSubmissionFilter
from .documents import DOCUMENT_CATALOG, DocumentLibrary
from .errors import (
    DocumentCategoryNotFound,
    DocumentNotFound,
    InquiryNotFound,
    NotFoundError,
    NotificationDeliveryFailure,
)
from .intake import FAILURE_MESSAGES, ClientInfo, IntakeReceipt, IntakeService
from .notifications import DispatchReport, NotificationDispatcher, NotificationKind

__all__ = [
    "ClientInfo",
    "DOCUMENT_CATALOG",
    "DispatchReport",
    "DocumentCategoryNotFound",
    "DocumentLibrary",
    "DocumentNotFound",
    "DuplicateSubmissionFilter",
    "FAILURE_MESSAGES",
    "InquiryNotFound",
    "IntakeReceipt",
    "IntakeService",
    "NotFoundError",
    "NotificationDeliveryFailure",
    "NotificationDispatcher",
    "NotificationKind",
]
