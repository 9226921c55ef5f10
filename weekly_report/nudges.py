# weekly_report/nudges.py
from __future__ import annotations

import os
import re
import threading
import time

from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from .config import settings
from .db import SessionLocal
from .debug_utils import debug_log
from .models import User

# ──────────────────────────────────────────────────────────────────────────────
# WhatsApp sending
# ──────────────────────────────────────────────────────────────────────────────

E164 = re.compile(r"^\+?[1-9]\d{7,14}$")  # simple E.164 validator
MIN_SEND_GAP_SEC = float(os.getenv("WHATSAPP_MIN_SEND_GAP", "0.4"))
_SEND_LOCK_GUARD = threading.Lock()
_SEND_LOCKS: dict[str, threading.Lock] = {}
_LAST_SEND_MONO: dict[str, float] = {}
_CLIENT: Client | None = None


def _lock_for_destination(dest: str) -> threading.Lock:
    with _SEND_LOCK_GUARD:
        lock = _SEND_LOCKS.get(dest)
        if lock is None:
            lock = threading.Lock()
            _SEND_LOCKS[dest] = lock
        return lock


def _throttle_destination(dest: str):
    last = _LAST_SEND_MONO.get(dest, 0.0)
    gap = MIN_SEND_GAP_SEC - (time.monotonic() - last)
    if gap > 0:
        time.sleep(gap)


def normalize_whatsapp_phone(raw: str | None) -> str | None:
    """
    Return a number in the 'whatsapp:+441234567890' format, or None.
    """
    if not raw:
        return None
    s = str(raw).strip()
    if s.startswith("whatsapp:"):
        num = s.split("whatsapp:", 1)[1]
        if E164.match(num):
            return s
        return None
    if E164.match(s):
        return f"whatsapp:{s if s.startswith('+') else '+' + s}"
    return None


def _twilio_client() -> Client:
    global _CLIENT
    if _CLIENT is None:
        _CLIENT = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
    return _CLIENT


def send_whatsapp(text: str, to: str | None = None) -> str:
    """
    Send one WhatsApp message through Twilio and return its SID.
    Requires an explicit, valid `to`; Twilio errors propagate to the caller.
    """
    if not text or not str(text).strip():
        raise ValueError("Message text is empty")

    to_norm = normalize_whatsapp_phone(to) if to else None
    if not to_norm:
        raise ValueError("Recipient phone missing or invalid (expected E.164).")

    client = _twilio_client()
    lock = _lock_for_destination(to_norm)
    with lock:
        _throttle_destination(to_norm)
        try:
            msg = client.messages.create(
                from_=settings.TWILIO_FROM,
                body=text,
                to=to_norm,
            )
        except TwilioRestException as exc:
            code = getattr(exc, "code", None)
            print(f"[nudges] Twilio send failed to {to_norm}: {exc.msg if hasattr(exc, 'msg') else exc} (code={code})")
            if code == 63016:
                print("[nudges] WhatsApp session expired (>24h). Freeform messages need an open session.")
            raise
        _LAST_SEND_MONO[to_norm] = time.monotonic()

    sid = getattr(msg, "sid", "") or ""
    debug_log("outbound", {"to": to_norm, "sid": sid, "text": text}, tag="nudges")
    return sid


def phone_for_user(user_id: int) -> str | None:
    with SessionLocal() as s:
        user = s.get(User, user_id)
        return user.phone if user else None


def send_message(recipient_id: int, text: str) -> str:
    """
    Deliver `text` to a user id (the identity the wizard works with).
    Raises ValueError when the id has no known phone.
    """
    phone = phone_for_user(recipient_id)
    if not phone:
        raise ValueError(f"No phone on record for user id {recipient_id}")
    return send_whatsapp(text=text, to=phone)


def reminders_enabled(user_id: int) -> bool:
    """Unknown ids count as enabled; the send itself decides whether they are reachable."""
    with SessionLocal() as s:
        user = s.get(User, user_id)
        if user is None:
            return True
        return bool(user.reminders_active)
