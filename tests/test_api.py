"""
Tests for the Twilio webhook and inbound routing.
"""
from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient

from weekly_report import api, bot, prompts
from weekly_report.db import SessionLocal, init_db
from weekly_report.models import User
from weekly_report.wizard import ReportWizard, WizardState

from conftest import FIXED_TODAY, MemoryStateStore, RecordingSender


@pytest.fixture
def fake_bot(monkeypatch):
    init_db()
    store = MemoryStateStore()
    sender = RecordingSender()
    wizard = ReportWizard(store=store, send=sender, recipients=[900], today=lambda: FIXED_TODAY)
    monkeypatch.setattr(bot, "_WIZARD", wizard)
    monkeypatch.setattr(api, "send_message", sender)
    return wizard, store, sender


@pytest.fixture
def client():
    return TestClient(api.app)


def _post(client, body, sender_phone="whatsapp:+447700900123", **extra):
    form = {"From": sender_phone, "Body": body, **extra}
    return client.post(
        "/webhooks/twilio",
        content=urlencode(form),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )


def _user_id(phone):
    with SessionLocal() as s:
        return s.query(User).filter(User.phone == phone).one().id


def test_missing_from_is_bad_request(client, fake_bot):
    resp = client.post(
        "/webhooks/twilio",
        content="Body=hi",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 400


def test_report_command_starts_wizard(client, fake_bot):
    _, store, sender = fake_bot
    resp = _post(client, "Report", ProfileName="Anna")
    assert resp.status_code == 200

    uid = _user_id("+447700900123")
    assert store.load(uid).state_name == WizardState.CHOOSE_WEEK.value
    assert sender.last_for(uid) == prompts.CHOOSE_WEEK

    with SessionLocal() as s:
        assert s.get(User, uid).display_name == "Anna"


def test_week_button_payload_and_label(client, fake_bot):
    _, store, _ = fake_bot
    _post(client, "report", sender_phone="whatsapp:+447700900124")
    uid = _user_id("+447700900124")

    _post(client, "Current week", sender_phone="whatsapp:+447700900124", ButtonPayload="WEEK_previous")
    assert store.load(uid).answers["week"] == {"start": "2026-10-05", "end": "2026-10-11"}


def test_week_label_routes_to_choice(fake_bot):
    wizard, store, _ = fake_bot
    wizard.start_report(77)
    assert api.route_message(77, "current week") == "week_choice"
    assert store.load(77).state_name == WizardState.ASK_RESTING_HR.value


def test_trigger_report_payload(fake_bot):
    _, store, _ = fake_bot
    assert api.route_message(78, "Yes, start", button_payload="TRIGGER_REPORT") == "start_report"
    assert store.load(78) is not None


def test_myid_and_menu(fake_bot):
    _, _, sender = fake_bot
    assert api.route_message(79, "/myid") == "myid"
    assert sender.last_for(79) == prompts.my_id_text(79)
    assert api.route_message(79, "menu") == "menu"
    assert sender.last_for(79) == prompts.MENU_TEXT


def test_free_text_without_conversation_gets_menu(fake_bot):
    _, _, sender = fake_bot
    assert api.route_message(80, "hello there") == "menu"
    assert sender.last_for(80) == prompts.MENU_TEXT


def test_free_text_in_conversation_goes_to_wizard(fake_bot):
    wizard, store, sender = fake_bot
    wizard.start_report(81)
    wizard.choose_week(81, "current")
    assert api.route_message(81, "1/2/3") == "wizard"
    assert sender.last_for(81) == prompts.NEED_SEVEN_VALUES
    assert store.load(81).state_name == WizardState.ASK_RESTING_HR.value


ANSWERS_BEFORE_QUESTIONS = [
    "45/45/46/48/49/43/45",
    "7/7/7/7/7/7/7",
    "8",
    "7",
    "no comments",
    "no comments",
    "good week",
    "no changes",
    "no wishes",
]


def _start_and_answer(wizard, user_id, answers):
    wizard.start_report(user_id)
    wizard.choose_week(user_id, "current")
    for text in answers:
        wizard.handle_text(user_id, text)


def test_command_word_at_last_question_is_an_answer(fake_bot):
    """'Report' typed as the final answer completes the report instead of restarting it."""
    wizard, store, sender = fake_bot
    _start_and_answer(wizard, 82, ANSWERS_BEFORE_QUESTIONS)
    assert store.load(82).state_name == WizardState.ASK_QUESTIONS.value

    assert api.route_message(82, "Report") == "wizard"
    assert store.load(82) is None
    assert sender.last_for(900).endswith("Questions for the coach:\nReport")


def test_menu_word_mid_report_is_an_answer(fake_bot):
    wizard, store, _ = fake_bot
    _start_and_answer(wizard, 83, ANSWERS_BEFORE_QUESTIONS[:4])
    assert store.load(83).state_name == WizardState.ASK_FOOD.value

    assert api.route_message(83, "menu") == "wizard"
    state = store.load(83)
    assert state.state_name == WizardState.ASK_PAIN.value
    assert state.answers["food"] == "menu"


def test_slash_command_mid_report_still_restarts(fake_bot):
    wizard, store, _ = fake_bot
    _start_and_answer(wizard, 84, ANSWERS_BEFORE_QUESTIONS[:3])

    assert api.route_message(84, "/report") == "start_report"
    assert store.rows[84] == (WizardState.CHOOSE_WEEK.value, {})


def test_week_button_mid_report_keeps_answers(fake_bot):
    wizard, store, sender = fake_bot
    _start_and_answer(wizard, 85, ANSWERS_BEFORE_QUESTIONS[:2])
    before = store.rows[85]

    assert api.route_message(85, "Previous week", button_payload="WEEK_previous") == "week_choice"
    assert store.rows[85] == before
    assert sender.last_for(85) == prompts.WEEK_ALREADY_CHOSEN


def test_stop_and_resume_reminders(client, fake_bot):
    _, _, sender = fake_bot
    phone = "whatsapp:+447700900125"
    _post(client, "stop reminders", sender_phone=phone)
    uid = _user_id("+447700900125")
    with SessionLocal() as s:
        assert s.get(User, uid).reminders_active is False
    assert sender.last_for(uid) == prompts.REMINDERS_STOPPED

    _post(client, "Resume reminders", sender_phone=phone)
    with SessionLocal() as s:
        assert s.get(User, uid).reminders_active is True


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
