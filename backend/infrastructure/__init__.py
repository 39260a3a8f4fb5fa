"""Infrastructure layer exports."""

from .mailer import (
    DeliveryOutcome,
    FailureKind,
    Mailer,
    MailTransport,
    SMTPMailTransport,
    classify_failure,
)
from .storage import (
    InMemoryRecordRepository,
    JsonFileRecordRepository,
    PersistenceWriteFailure,
    RecordRepository,
)
from .templates import EmailRenderer

__all__ = [
    "DeliveryOutcome",
    "EmailRenderer",
    "FailureKind",
    "InMemoryRecordRepository",
    "JsonFileRecordRepository",
    "MailTransport",
    "Mailer",
    "PersistenceWriteFailure",
    "RecordRepository",
    "SMTPMailTransport",
    "classify_failure",
]
