"""
Durable per-user conversation state for the report wizard.

One `conversations` row per user: current step plus the answers collected so far
(JSON). No row means no report in progress.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session, sessionmaker

from .models import Conversation


@dataclass
class UserState:
    user_id: int
    state_name: str
    answers: dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[datetime] = None


class SqlStateStore:
    """load / save (upsert) / delete against the `conversations` table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _row(self, session: Session, user_id: int) -> Optional[Conversation]:
        return session.get(Conversation, user_id)

    def load(self, user_id: int) -> Optional[UserState]:
        with self._session_factory() as s:
            row = self._row(s, user_id)
            if row is None:
                return None
            try:
                answers = json.loads(row.payload) if row.payload else {}
            except (TypeError, ValueError) as e:
                print(f"[store] unreadable payload for user {user_id}, treating as no conversation: {e!r}")
                return None
            if not isinstance(answers, dict):
                print(f"[store] payload for user {user_id} is not an object, treating as no conversation")
                return None
            return UserState(user_id=user_id, state_name=row.step, answers=answers, updated_at=row.updated_at)

    def save(self, user_id: int, state_name: str, answers: dict[str, Any]) -> None:
        payload = json.dumps(answers, ensure_ascii=False)
        with self._session_factory() as s:
            row = self._row(s, user_id)
            now = datetime.now(timezone.utc)
            if row:
                row.step = state_name
                row.payload = payload
                row.updated_at = now
            else:
                s.add(Conversation(user_id=user_id, step=state_name, payload=payload, updated_at=now))
            s.commit()

    def delete(self, user_id: int) -> None:
        with self._session_factory() as s:
            row = self._row(s, user_id)
            if row:
                s.delete(row)
                s.commit()
