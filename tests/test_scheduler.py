"""
Tests for the weekly reminder job wiring.
"""
from weekly_report import bot, prompts, scheduler
from weekly_report.wizard import ReportWizard

from conftest import MemoryStateStore, RecordingSender


def test_schedule_weekly_reminder_registers_cron_job(monkeypatch):
    calls = []
    monkeypatch.setattr(scheduler.scheduler, "add_job", lambda func, **kw: calls.append((func, kw)))

    scheduler.schedule_weekly_reminder(day_of_week="sun", hour=20, minute=0)

    func, kw = calls[0]
    assert func is scheduler.run_weekly_reminder
    assert kw["trigger"] == "cron"
    assert (kw["day_of_week"], kw["hour"], kw["minute"]) == ("sun", 20, 0)
    assert kw["id"] == scheduler.REMINDER_JOB_ID
    assert kw["replace_existing"] is True
    assert kw["timezone"] == scheduler.DEFAULT_TZ


def test_run_weekly_reminder_broadcasts(monkeypatch):
    sender = RecordingSender(failing={2})
    wizard = ReportWizard(store=MemoryStateStore(), send=sender, recipients=[1, 2, 3])
    monkeypatch.setattr(bot, "_WIZARD", wizard)

    scheduler.run_weekly_reminder()

    assert sender.texts_for(1) == [prompts.REMINDER_TEXT]
    assert sender.texts_for(3) == [prompts.REMINDER_TEXT]
