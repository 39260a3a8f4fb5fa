"""Domain entities for the intake store."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class Collection(str, Enum):
    """Named collections held by the store, keyed as in the snapshot file."""

    INQUIRIES = "inquiries"
    CONTACTS = "contacts"
    USERS = "users"
    DOCUMENTS = "documents"

    @property
    def default_prefix(self) -> str:
        return _DEFAULT_PREFIXES[self]

    @property
    def creation_stamps(self) -> tuple[str, ...]:
        """Extra timestamp fields set once when a record is first stored."""

        return _CREATION_STAMPS.get(self, ())


_DEFAULT_PREFIXES = {
    Collection.INQUIRIES: "INQ",
    Collection.CONTACTS: "CONTACT",
    Collection.USERS: "USER",
    Collection.DOCUMENTS: "DOC",
}

_CREATION_STAMPS = {
    Collection.USERS: ("subscribedAt",),
    Collection.DOCUMENTS: ("requestedAt",),
}


class InquiryKind(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    MANDATE = "mandate"


@dataclass(slots=True)
class StoreState:
    """The whole persisted aggregate: four collections plus a save stamp."""

    inquiries: dict[str, dict[str, Any]] = field(default_factory=dict)
    contacts: dict[str, dict[str, Any]] = field(default_factory=dict)
    users: dict[str, dict[str, Any]] = field(default_factory=dict)
    documents: dict[str, dict[str, Any]] = field(default_factory=dict)
    last_updated: str = field(default_factory=utc_now_iso)

    def collection(self, name: Collection) -> dict[str, dict[str, Any]]:
        return getattr(self, name.value)

    def to_json(self) -> dict[str, Any]:
        return {
            "inquiries": self.inquiries,
            "contacts": self.contacts,
            "users": self.users,
            "documents": self.documents,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "StoreState":
        state = cls()
        for name in Collection:
            items = data.get(name.value)
            if isinstance(items, dict):
                setattr(state, name.value, {str(key): dict(value) for key, value in items.items() if isinstance(value, dict)})
        last_updated = data.get("lastUpdated")
        if isinstance(last_updated, str):
            state.last_updated = last_updated
        return state
