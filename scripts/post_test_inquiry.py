#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import os
import sys

import httpx

PAYLOAD = {
    "companyName": "Test Co",
    "contactPerson": "QA Tester",
    "email": "test-buyer@example.com",
    "phone": "+12025550123",
    "country": "AE",
    "productCategory": "petroleum",
    "specificProducts": ["EN590 Diesel"],
    "quantity": "1000 MT",
    "ndaAgreed": "true",
}


def main() -> int:
    parser = argparse.ArgumentParser(description="POST a sample buyer inquiry to a running server")
    parser.add_argument(
        "--url",
        default=os.getenv("TARGET_URL", "http://localhost:3000/api/inquiries/buyer"),
        help="endpoint to call (defaults to $TARGET_URL)",
    )
    parser.add_argument("--timeout", type=float, default=30.0)
    args = parser.parse_args()

    print("POST", args.url)
    try:
        response = httpx.post(args.url, json=PAYLOAD, timeout=args.timeout)
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1

    print("HTTP", response.status_code, response.reason_phrase)
    try:
        body = response.json()
    except ValueError:
        print("Response body (non-JSON):")
        print(response.text)
    else:
        print("Response JSON:")
        print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
