"""
Weekly report wizard: a per-user state machine over a fixed list of questions.

Stateful flow: choose week → resting HR → sleep → mood → body → food → pain →
week comment → plan edits → wishes → questions → report sent, state cleared.

The wizard keeps no state of its own. Conversation state lives in the injected
store, messages go out through the injected `send(recipient_id, text)`.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from . import prompts
from .answers import WEEK_KINDS, AnswerSet, week_range
from .debug_utils import debug_log
from .reporting import format_report
from .store import UserState
from .validators import (
    Accepted,
    Validator,
    optional_text,
    parse_rating,
    parse_seven_numbers,
    parse_week_comment,
)

Sender = Callable[[int, str], Any]


class WizardState(str, Enum):
    CHOOSE_WEEK = "choose_week"
    ASK_RESTING_HR = "ask_resting_hr"
    ASK_SLEEP = "ask_sleep"
    ASK_MOOD = "ask_mood"
    ASK_BODY = "ask_body"
    ASK_FOOD = "ask_food"
    ASK_PAIN = "ask_pain"
    ASK_WEEK_COMMENT = "ask_week_comment"
    ASK_PLAN_EDITS = "ask_plan_edits"
    ASK_WISHES = "ask_wishes"
    ASK_QUESTIONS = "ask_questions"


@dataclass(frozen=True)
class Step:
    validator: Validator
    field: str
    next_state: Optional[WizardState]  # None: last question, report follows
    prompt: str                        # question sent when entering this state


STEPS: dict[WizardState, Step] = {
    WizardState.ASK_RESTING_HR: Step(parse_seven_numbers, "resting_hr", WizardState.ASK_SLEEP, prompts.ASK_RESTING_HR),
    WizardState.ASK_SLEEP: Step(parse_seven_numbers, "sleep", WizardState.ASK_MOOD, prompts.ASK_SLEEP),
    WizardState.ASK_MOOD: Step(parse_rating, "mood", WizardState.ASK_BODY, prompts.ASK_MOOD),
    WizardState.ASK_BODY: Step(parse_rating, "body", WizardState.ASK_FOOD, prompts.ASK_BODY),
    WizardState.ASK_FOOD: Step(optional_text(prompts.NO_COMMENTS_PHRASES), "food", WizardState.ASK_PAIN, prompts.ASK_FOOD),
    WizardState.ASK_PAIN: Step(optional_text(prompts.NO_COMMENTS_PHRASES), "pain", WizardState.ASK_WEEK_COMMENT, prompts.ASK_PAIN),
    WizardState.ASK_WEEK_COMMENT: Step(parse_week_comment, "week_comment", WizardState.ASK_PLAN_EDITS, prompts.ASK_WEEK_COMMENT),
    WizardState.ASK_PLAN_EDITS: Step(optional_text(prompts.NO_CHANGES_PHRASES), "plan_edits", WizardState.ASK_WISHES, prompts.ASK_PLAN_EDITS),
    WizardState.ASK_WISHES: Step(optional_text(prompts.NO_WISHES_PHRASES), "wishes", WizardState.ASK_QUESTIONS, prompts.ASK_WISHES),
    WizardState.ASK_QUESTIONS: Step(optional_text(prompts.NO_QUESTIONS_PHRASES), "questions", None, prompts.ASK_QUESTIONS),
}

FIRST_QUESTION = WizardState.ASK_RESTING_HR


def state_order() -> list[WizardState]:
    """Walk the transition table from the week choice to the last question."""
    order = [WizardState.CHOOSE_WEEK]
    current: Optional[WizardState] = FIRST_QUESTION
    while current is not None:
        order.append(current)
        current = STEPS[current].next_state
    return order


def _to_json(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if callable(to_dict) else value


class ReportWizard:
    def __init__(
        self,
        store,
        send: Sender,
        recipients: Iterable[int] = (),
        today: Optional[Callable[[], date]] = None,
        reminders_enabled: Optional[Callable[[int], bool]] = None,
    ):
        self.store = store
        self.send = send
        self.recipients = list(dict.fromkeys(recipients))
        self.today = today or date.today
        self.reminders_enabled = reminders_enabled

    # ──────────────────────────────────────────────────────────────────────
    # Delivery
    # ──────────────────────────────────────────────────────────────────────

    def _deliver(self, recipient_id: int, text: str) -> bool:
        try:
            self.send(recipient_id, text)
            return True
        except Exception as e:
            print(f"[wizard] delivery to {recipient_id} failed: {e!r}")
            return False

    def _load(self, user_id: int) -> Optional[UserState]:
        state = self.store.load(user_id)
        if state is None:
            return None
        try:
            WizardState(state.state_name)
        except ValueError:
            print(f"[wizard] unknown stored step {state.state_name!r} for user {user_id}, ignoring")
            return None
        return state

    def is_answering(self, user_id: int) -> bool:
        """True once the week is chosen and a question is waiting for its answer."""
        state = self._load(user_id)
        return state is not None and state.state_name != WizardState.CHOOSE_WEEK.value

    # ──────────────────────────────────────────────────────────────────────
    # Entry points
    # ──────────────────────────────────────────────────────────────────────

    def start_report(self, user_id: int) -> None:
        """Begin (or restart) a report; any abandoned conversation is overwritten."""
        self.store.save(user_id, WizardState.CHOOSE_WEEK.value, {})
        debug_log("report started", {"user_id": user_id}, tag="wizard")
        self._deliver(user_id, prompts.CHOOSE_WEEK)

    def choose_week(self, user_id: int, kind: str) -> bool:
        state = self._load(user_id)
        if state is None:
            self._deliver(user_id, prompts.RESTART_HINT)
            return False
        if state.state_name != WizardState.CHOOSE_WEEK.value:
            self._deliver(user_id, prompts.WEEK_ALREADY_CHOSEN)
            return False
        if kind not in WEEK_KINDS:
            self._deliver(user_id, prompts.PICK_WEEK_HINT)
            return False
        answers = dict(state.answers)
        answers["week"] = week_range(kind, self.today()).to_dict()
        self.store.save(user_id, FIRST_QUESTION.value, answers)
        debug_log("week chosen", {"user_id": user_id, "kind": kind, "week": answers["week"]}, tag="wizard")
        self._deliver(user_id, prompts.CHOOSE_WEEK_ACK)
        self._deliver(user_id, STEPS[FIRST_QUESTION].prompt)
        return True

    def handle_text(self, user_id: int, text: str, display_name: Optional[str] = None) -> bool:
        """
        Feed one free-text message into the user's conversation.
        Returns False when there is no report in progress (nothing is sent).
        """
        state = self._load(user_id)
        if state is None:
            return False
        current = WizardState(state.state_name)
        if current == WizardState.CHOOSE_WEEK:
            self._deliver(user_id, prompts.PICK_WEEK_HINT)
            return True

        step = STEPS[current]
        result = step.validator(text)
        if not isinstance(result, Accepted):
            debug_log("answer rejected", {"user_id": user_id, "step": current.value, "reason": result.reason}, tag="wizard")
            self._deliver(user_id, result.reason)
            return True

        answers = dict(state.answers)
        answers[step.field] = _to_json(result.value)

        if step.next_state is None:
            self._complete(user_id, answers, display_name)
            return True

        self.store.save(user_id, step.next_state.value, answers)
        self._deliver(user_id, STEPS[step.next_state].prompt)
        return True

    def broadcast_reminder(self) -> int:
        """Send the weekly reminder to every recipient; returns how many sends succeeded."""
        sent = 0
        for rid in self.recipients:
            if self.reminders_enabled is not None:
                try:
                    if not self.reminders_enabled(rid):
                        print(f"[wizard] reminders off for {rid}, skipping")
                        continue
                except Exception as e:
                    print(f"[wizard] reminder flag lookup failed for {rid}: {e!r}")
            if self._deliver(rid, prompts.REMINDER_TEXT):
                sent += 1
        print(f"[wizard] reminder sent to {sent}/{len(self.recipients)} recipients")
        return sent

    # ──────────────────────────────────────────────────────────────────────
    # Completion
    # ──────────────────────────────────────────────────────────────────────

    def _complete(self, user_id: int, answers: dict[str, Any], display_name: Optional[str]) -> None:
        report = format_report(AnswerSet.from_answers(answers))

        self._deliver(user_id, prompts.REPORT_ACCEPTED)
        self._deliver(user_id, prompts.REPORT_HEADER + report)

        header = prompts.recipient_header(display_name, user_id)
        delivered = [rid for rid in self.recipients if self._deliver(rid, header + report)]
        print(f"[wizard] report from user {user_id} delivered to {len(delivered)}/{len(self.recipients)} recipients")

        self.store.delete(user_id)
        self._deliver(user_id, prompts.MENU_TEXT)
