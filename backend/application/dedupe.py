"""Short-lived suppression of accidental contact form double-submits."""
from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass
from typing import Callable

Fingerprint = tuple[str, str, str]

_WHITESPACE = re.compile(r"\s")


@dataclass(slots=True)
class _Entry:
    recorded_at: float
    message_id: str


class DuplicateSubmissionFilter:
    """Remember recent contact submissions by fingerprint.

    A submission whose fingerprint was recorded less than ``window`` seconds
    ago is a duplicate and maps back to the original message id. Entries are
    evicted lazily once older than ``retention`` seconds. State is
    process-local and lost on restart.
    """

    PREFIX_LENGTH = 50

    def __init__(
        self,
        window: float = 5.0,
        retention: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window = window
        self.retention = retention
        self.clock = clock
        self._entries: dict[Fingerprint, _Entry] = {}
        self._lock = threading.Lock()

    @classmethod
    def fingerprint(cls, email: str, subject: str, message: str | None) -> Fingerprint:
        prefix = _WHITESPACE.sub("", (message or "")[: cls.PREFIX_LENGTH])
        return (email, subject, prefix)

    def _evict(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if now - entry.recorded_at > self.retention]
        for key in expired:
            del self._entries[key]

    def claim(self, fingerprint: Fingerprint, candidate_id: str) -> tuple[str, bool]:
        """Return ``(message_id, is_duplicate)`` for a new submission."""

        with self._lock:
            now = self.clock()
            self._evict(now)
            entry = self._entries.get(fingerprint)
            if entry is not None and now - entry.recorded_at < self.window:
                return entry.message_id, True
            self._entries[fingerprint] = _Entry(recorded_at=now, message_id=candidate_id)
            return candidate_id, False

    def __len__(self) -> int:
        with self._lock:
            self._evict(self.clock())
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
