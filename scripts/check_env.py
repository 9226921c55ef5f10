#!/usr/bin/env python3
"""
Environment check for production deploys.
Usage: python scripts/check_env.py --warn-optional
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Iterable, List, Tuple


REQUIRED: List[Tuple[str, ...]] = [
    ("TWILIO_ACCOUNT_SID",),
    ("TWILIO_AUTH_TOKEN",),
    ("TWILIO_FROM",),
    # Somebody has to receive the reports.
    ("REPORT_RECIPIENT_IDS", "REPORT_RECEIVER_ID"),
]

OPTIONAL = [
    "DATABASE_URL",
    "TIMEZONE",
    "REMINDER_DAY_OF_WEEK",
    "REMINDER_HOUR",
    "REMINDER_MINUTE",
]


def _is_set(key: str) -> bool:
    return bool((os.getenv(key) or "").strip())


def _missing(groups: Iterable[Tuple[str, ...]]) -> List[str]:
    missing: List[str] = []
    for group in groups:
        if any(_is_set(k) for k in group):
            continue
        if len(group) == 1:
            missing.append(group[0])
        else:
            missing.append(" | ".join(group))
    return missing


def _warn_optional(keys: Iterable[str]) -> None:
    missing = [k for k in keys if not _is_set(k)]
    if not missing:
        return
    print("[env-check] Optional vars missing (defaults apply):")
    for k in missing:
        print(f"  - {k}")


def _format_problems() -> List[str]:
    problems: List[str] = []
    sender = (os.getenv("TWILIO_FROM") or "").strip()
    if sender and not sender.startswith("whatsapp:"):
        problems.append("TWILIO_FROM should look like whatsapp:+E164")
    for token in (os.getenv("REPORT_RECIPIENT_IDS") or "").split(","):
        token = token.strip()
        if token and not token.isdigit():
            problems.append(f"REPORT_RECIPIENT_IDS contains a non-numeric id: {token!r}")
    return problems


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate required environment variables.")
    parser.add_argument(
        "--warn-optional",
        action="store_true",
        help="Also list optional variables that are missing",
    )
    args = parser.parse_args(argv)

    missing = _missing(REQUIRED)
    if missing:
        print("[env-check] Missing required environment variables:")
        for item in missing:
            print(f"  - {item}")
        return 1

    problems = _format_problems()
    if problems:
        print("[env-check] Invalid values:")
        for item in problems:
            print(f"  - {item}")
        return 1

    if args.warn_optional:
        _warn_optional(OPTIONAL)

    print("[env-check] OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
