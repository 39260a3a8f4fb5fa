from __future__ import annotations

import secrets
import time


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def generate_id(prefix: str) -> str:
    """Return ``{prefix}-{epochMillis}-{8 hex chars}``.

    The random suffix only keeps ids distinct; it is not a secret.
    """

    return f"{prefix}-{epoch_millis()}-{secrets.token_hex(4)}"
