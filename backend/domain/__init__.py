"""Domain layer definitions."""

from .records import Collection, InquiryKind, StoreState, utc_now_iso

__all__ = [
    "Collection",
    "InquiryKind",
    "StoreState",
    "utc_now_iso",
]
