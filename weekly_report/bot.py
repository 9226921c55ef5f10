"""
Process-wide wiring of the report wizard: SQL store, Twilio sender, configured
recipients and a clock in the configured time zone.
"""
from __future__ import annotations

from datetime import date, datetime

from .config import DEFAULT_TZ, receiver_ids
from .db import SessionLocal
from .nudges import reminders_enabled, send_message
from .store import SqlStateStore
from .wizard import ReportWizard

_WIZARD: ReportWizard | None = None


def local_today() -> date:
    return datetime.now(DEFAULT_TZ).date()


def build_wizard() -> ReportWizard:
    return ReportWizard(
        store=SqlStateStore(SessionLocal),
        send=send_message,
        recipients=receiver_ids(),
        today=local_today,
        reminders_enabled=reminders_enabled,
    )


def get_wizard() -> ReportWizard:
    global _WIZARD
    if _WIZARD is None:
        _WIZARD = build_wizard()
        print(f"[bot] wizard ready; recipients={_WIZARD.recipients or 'none'}")
    return _WIZARD
