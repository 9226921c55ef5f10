"""
Tests for the SQL-backed conversation store.
"""
from datetime import datetime, timedelta, timezone

from sqlalchemy import event

from weekly_report.models import Conversation
from weekly_report.store import SqlStateStore


def test_load_missing_user_returns_none(sql_store):
    assert sql_store.load(1) is None


def test_save_inserts_then_overwrites(sql_store, session_factory):
    sql_store.save(7, "choose_week", {})
    state = sql_store.load(7)
    assert state.state_name == "choose_week"
    assert state.answers == {}
    assert state.updated_at is not None

    sql_store.save(7, "ask_sleep", {"resting_hr": {"kind": "not_tracked"}})
    state = sql_store.load(7)
    assert state.state_name == "ask_sleep"
    assert state.answers == {"resting_hr": {"kind": "not_tracked"}}

    with session_factory() as s:
        assert s.query(Conversation).filter(Conversation.user_id == 7).count() == 1


def test_users_are_isolated(sql_store):
    sql_store.save(1, "ask_mood", {"mood": 3})
    sql_store.save(2, "ask_body", {"mood": 9})
    sql_store.delete(1)

    assert sql_store.load(1) is None
    assert sql_store.load(2).answers == {"mood": 9}


def test_delete_is_noop_when_absent(sql_store):
    sql_store.delete(404)
    assert sql_store.load(404) is None


def test_state_survives_a_new_store_instance(session_factory):
    SqlStateStore(session_factory).save(5, "ask_food", {"body": 7.0, "food": "pasta"})
    reloaded = SqlStateStore(session_factory).load(5)
    assert reloaded.state_name == "ask_food"
    assert reloaded.answers["food"] == "pasta"


def test_unreadable_payload_is_treated_as_absent(sql_store, session_factory):
    with session_factory() as s:
        s.add(Conversation(user_id=9, step="ask_mood", payload="{not json"))
        s.commit()
    assert sql_store.load(9) is None


def test_save_stamps_aware_utc_time(sql_store):
    """updated_at is written as an aware UTC timestamp on insert and on update."""
    written = []

    def _capture(mapper, connection, target):
        written.append(target.updated_at)

    event.listen(Conversation, "before_insert", _capture)
    event.listen(Conversation, "before_update", _capture)
    try:
        sql_store.save(11, "choose_week", {})
        sql_store.save(11, "ask_resting_hr", {})
    finally:
        event.remove(Conversation, "before_insert", _capture)
        event.remove(Conversation, "before_update", _capture)

    assert len(written) == 2
    now = datetime.now(timezone.utc)
    for stamp in written:
        assert stamp.tzinfo is not None
        assert stamp.utcoffset() == timedelta(0)
        assert now - stamp < timedelta(minutes=1)
