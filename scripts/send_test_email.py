#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.logging_config import setup_logging
from backend.core.settings import get_settings
from backend.infrastructure import Mailer


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Send a test email through the configured SMTP relay")
    parser.add_argument("--to", default=settings.ops_email, help="recipient address")
    parser.add_argument("--subject", default=f"Test email from {settings.company_name} Dev")
    parser.add_argument("--timeout", type=float, default=settings.mail_timeout, help="seconds before giving up")
    args = parser.parse_args()

    setup_logging(settings)
    settings.mail_timeout = args.timeout
    mailer = Mailer(settings)
    print(f"SMTP_USER present: {bool(settings.smtp_user)}")
    print(f"Sending test email to {args.to}...")

    outcome = asyncio.run(
        mailer.send(
            to=args.to,
            subject=args.subject,
            html=(
                f"<p>This is a test email from the {settings.company_name} dev environment. "
                "If you received this, email sending is working.</p>"
            ),
        )
    )
    print(f"Result: {outcome.as_dict()}")
    if not outcome.delivered:
        print(f"Test email error: {outcome.detail}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
