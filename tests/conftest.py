"""
Shared fixtures. The environment is set before any weekly_report import so the
settings object (which requires Twilio credentials) can be built.
"""
import os
import sys
import tempfile
from datetime import date

_TMP_DIR = tempfile.mkdtemp(prefix="weekly_report_tests_")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "ACtest")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-token")
os.environ.setdefault("TWILIO_FROM", "whatsapp:+14155238886")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekly_report.models import Base
from weekly_report.store import SqlStateStore, UserState
from weekly_report.wizard import ReportWizard

# Wednesday; its week runs Monday 2026-10-12 .. Sunday 2026-10-18
FIXED_TODAY = date(2026, 10, 14)


class MemoryStateStore:
    """Dict-backed stand-in for SqlStateStore."""

    def __init__(self):
        self.rows = {}

    def load(self, user_id):
        row = self.rows.get(user_id)
        if row is None:
            return None
        state_name, answers = row
        return UserState(user_id=user_id, state_name=state_name, answers=dict(answers))

    def save(self, user_id, state_name, answers):
        self.rows[user_id] = (state_name, dict(answers))

    def delete(self, user_id):
        self.rows.pop(user_id, None)


class RecordingSender:
    """Collects (recipient_id, text); raises for ids listed in `failing`."""

    def __init__(self, failing=()):
        self.messages = []
        self.failing = set(failing)

    def __call__(self, recipient_id, text):
        if recipient_id in self.failing:
            raise RuntimeError(f"cannot reach {recipient_id}")
        self.messages.append((recipient_id, text))
        return "SM-test"

    def texts_for(self, recipient_id):
        return [t for rid, t in self.messages if rid == recipient_id]

    def last_for(self, recipient_id):
        texts = self.texts_for(recipient_id)
        return texts[-1] if texts else None


@pytest.fixture
def memory_store():
    return MemoryStateStore()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def wizard(memory_store, sender):
    return ReportWizard(store=memory_store, send=sender, recipients=[900, 901], today=lambda: FIXED_TODAY)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SqlStateStore(session_factory)
