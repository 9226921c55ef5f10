# weekly_report/api.py
from __future__ import annotations

import traceback
from datetime import datetime, timezone
from urllib.parse import parse_qs

from fastapi import FastAPI, APIRouter, Request, Response

from . import prompts
from .bot import get_wizard
from .db import SessionLocal, init_db
from .models import User
from .nudges import send_message
from .scheduler import start_scheduler, shutdown_scheduler, schedule_weekly_reminder

APP_START_DT = datetime.now(timezone.utc)

# Inbound routing keys (lower-cased, trimmed)
WEEK_CHOICE_PAYLOADS = {"week_current": "current", "week_previous": "previous"}
WEEK_CHOICE_LABELS = {"current week": "current", "previous week": "previous"}
START_REPORT_PAYLOADS = {"trigger_report"}
START_REPORT_COMMANDS = {"report", "/report", prompts.REPORT_BUTTON_LABEL}
MENU_COMMANDS = {"start", "/start", "menu"}
MYID_COMMANDS = {"myid", "/myid"}
STOP_REMINDERS_COMMANDS = {"stop reminders"}
RESUME_REMINDERS_COMMANDS = {"resume reminders"}


def _uptime_seconds() -> int:
    return int((datetime.now(timezone.utc) - APP_START_DT).total_seconds())


def _dbg(msg: str):
    try:
        print(f"[webhook] {msg}")
    except Exception:
        pass


app = FastAPI(title="Weekly Report Bot")
router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# Startup / shutdown
# ──────────────────────────────────────────────────────────────────────────────

@app.on_event("startup")
def on_startup():
    init_db()
    start_scheduler()
    schedule_weekly_reminder()
    get_wizard()
    print("\n" + "═" * 72)
    print("🚀 Weekly report bot started")
    print("═" * 72 + "\n")


@app.on_event("shutdown")
def on_shutdown():
    shutdown_scheduler()


# ──────────────────────────────────────────────────────────────────────────────
# Users
# ──────────────────────────────────────────────────────────────────────────────

def _get_or_create_user(phone_e164: str, display_name: str | None = None) -> tuple[int, str | None]:
    """Find or create a User by E.164 phone; returns (user id, display name)."""
    phone_e164 = phone_e164.strip()
    if phone_e164 and not phone_e164.startswith("+"):
        phone_e164 = "+" + phone_e164
    display_name = (display_name or "").strip() or None
    with SessionLocal() as s:
        u = s.query(User).filter(User.phone == phone_e164).first()
        if not u:
            u = User(phone=phone_e164, display_name=display_name, reminders_active=True)
            s.add(u)
            s.commit()
            s.refresh(u)
            _dbg(f"new user id={u.id} phone={phone_e164}")
        elif display_name and u.display_name != display_name:
            u.display_name = display_name
            s.commit()
            s.refresh(u)
        return u.id, u.display_name


def _set_reminders(user_id: int, active: bool) -> None:
    with SessionLocal() as s:
        u = s.get(User, user_id)
        if u:
            u.reminders_active = active
            s.commit()


def _reply(user_id: int, text: str) -> None:
    try:
        send_message(user_id, text)
    except Exception as e:
        print(f"[webhook] reply to {user_id} failed: {e!r}")


# ──────────────────────────────────────────────────────────────────────────────
# Twilio inbound
# ──────────────────────────────────────────────────────────────────────────────

def route_message(user_id: int, body: str, button_payload: str = "", display_name: str | None = None) -> str:
    """
    Dispatch one inbound message to the wizard or a utility command.
    Returns a short label of the route taken (used for logging and tests).

    While a question is waiting for its answer, plain words ("report", "menu",
    "current week", ...) are answers; only button payloads and slash commands
    still act as commands.
    """
    wizard = get_wizard()
    lower_body = body.strip().lower()
    payload = button_payload.strip().lower()
    if wizard.is_answering(user_id) and not lower_body.startswith("/"):
        lower_body = ""

    kind = WEEK_CHOICE_PAYLOADS.get(payload) or WEEK_CHOICE_LABELS.get(lower_body)
    if kind:
        wizard.choose_week(user_id, kind)
        return "week_choice"

    if payload in START_REPORT_PAYLOADS or lower_body in START_REPORT_COMMANDS:
        wizard.start_report(user_id)
        return "start_report"

    if lower_body in MENU_COMMANDS:
        _reply(user_id, prompts.MENU_TEXT)
        return "menu"

    if lower_body in MYID_COMMANDS:
        _reply(user_id, prompts.my_id_text(user_id))
        return "myid"

    if lower_body in STOP_REMINDERS_COMMANDS:
        _set_reminders(user_id, False)
        _reply(user_id, prompts.REMINDERS_STOPPED)
        return "stop_reminders"

    if lower_body in RESUME_REMINDERS_COMMANDS:
        _set_reminders(user_id, True)
        _reply(user_id, prompts.REMINDERS_RESUMED)
        return "resume_reminders"

    if wizard.handle_text(user_id, body, display_name=display_name):
        return "wizard"

    _reply(user_id, prompts.MENU_TEXT)
    return "menu"


@router.post("/webhooks/twilio")
async def twilio_inbound(request: Request):
    """
    Accepts x-www-form-urlencoded payloads from Twilio (WhatsApp/SMS).
    Resolves/creates the sender, then routes the message.
    """
    try:
        raw = (await request.body()).decode("utf-8")
        data = parse_qs(raw, keep_blank_values=True)

        body = (data.get("Body", [""])[0] or "").strip()
        from_raw = (data.get("From", [""])[0] or "").strip()
        profile_name = (data.get("ProfileName", [""])[0] or "").strip()
        button_payload = (data.get("ButtonPayload", [""])[0] or "").strip()
        if not from_raw:
            return Response(content="", media_type="text/plain", status_code=400)

        phone = from_raw.replace("whatsapp:", "") if from_raw.startswith("whatsapp:") else from_raw
        user_id, display_name = _get_or_create_user(phone, profile_name)

        route = route_message(user_id, body, button_payload=button_payload, display_name=display_name)
        _dbg(f"user_id={user_id} route={route}")
        return Response(content="", media_type="text/plain", status_code=200)

    except Exception:
        traceback.print_exc()
        return Response(content="", media_type="text/plain", status_code=500)


app.include_router(router)


# ──────────────────────────────────────────────────────────────────────────────
# Health / Root
# ──────────────────────────────────────────────────────────────────────────────

@app.get("/health")
def health():
    return {"ok": True, "uptime_seconds": _uptime_seconds()}


@app.get("/")
def root():
    return {"service": "weekly-report-bot", "webhook": "/webhooks/twilio"}
