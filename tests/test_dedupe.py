from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.application import DuplicateSubmissionFilter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_fingerprint_uses_whitespace_free_prefix():
    first = DuplicateSubmissionFilter.fingerprint("a@example.com", "Hi", "Hello there  friend")
    second = DuplicateSubmissionFilter.fingerprint("a@example.com", "Hi", "Hellothere\nfriend")

    assert first == second
    long_message = "x" * 50 + " tail that differs"
    assert DuplicateSubmissionFilter.fingerprint("a@example.com", "Hi", long_message) == (
        DuplicateSubmissionFilter.fingerprint("a@example.com", "Hi", "x" * 50 + "another tail")
    )


def test_second_claim_inside_window_is_duplicate():
    clock = FakeClock()
    duplicates = DuplicateSubmissionFilter(window=5, retention=60, clock=clock)
    key = DuplicateSubmissionFilter.fingerprint("a@example.com", "Hi", "Hello")

    assert duplicates.claim(key, "CONTACT-1") == ("CONTACT-1", False)
    clock.now += 2
    assert duplicates.claim(key, "CONTACT-2") == ("CONTACT-1", True)


def test_claim_after_window_is_new():
    clock = FakeClock()
    duplicates = DuplicateSubmissionFilter(window=5, retention=60, clock=clock)
    key = DuplicateSubmissionFilter.fingerprint("a@example.com", "Hi", "Hello")

    duplicates.claim(key, "CONTACT-1")
    clock.now += 6
    assert duplicates.claim(key, "CONTACT-2") == ("CONTACT-2", False)
    clock.now += 1
    assert duplicates.claim(key, "CONTACT-3") == ("CONTACT-2", True)


def test_duplicates_do_not_extend_the_window():
    clock = FakeClock()
    duplicates = DuplicateSubmissionFilter(window=5, retention=60, clock=clock)
    key = ("a@example.com", "Hi", "Hello")

    duplicates.claim(key, "CONTACT-1")
    clock.now += 4
    assert duplicates.claim(key, "CONTACT-2")[1] is True
    clock.now += 2
    assert duplicates.claim(key, "CONTACT-3") == ("CONTACT-3", False)


def test_entries_are_evicted_after_retention():
    clock = FakeClock()
    duplicates = DuplicateSubmissionFilter(window=5, retention=60, clock=clock)
    duplicates.claim(("a@example.com", "Hi", "one"), "CONTACT-1")
    clock.now += 30
    duplicates.claim(("b@example.com", "Hi", "two"), "CONTACT-2")

    assert len(duplicates) == 2
    clock.now += 31
    assert len(duplicates) == 1
    duplicates.clear()
    assert len(duplicates) == 0


def test_different_fingerprints_are_independent():
    duplicates = DuplicateSubmissionFilter(clock=FakeClock())

    assert duplicates.claim(("a@example.com", "Hi", "one"), "CONTACT-1")[1] is False
    assert duplicates.claim(("a@example.com", "Hi", "two"), "CONTACT-2")[1] is False
