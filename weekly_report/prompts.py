"""
User-facing copy for the report flow (data-in/data-out; no DB calls).

Sections:
1) Menu / commands
2) Question prompts, one per wizard step
3) Rejection reasons
4) Sentinel phrases ("not tracked", "no comments", ...)
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
# Menu / commands
# ---------------------------------------------------------------------------

REPORT_BUTTON_LABEL = "fill in report"

MENU_TEXT = (
    "Menu:\n"
    "• *report* – fill in your weekly report\n"
    "• *myid* – show your id\n"
    "• *stop reminders* / *resume reminders* – weekly reminder on/off"
)


def my_id_text(user_id: int) -> str:
    return f"Your id: {user_id}"


REMINDERS_STOPPED = "Weekly reminders are off. Send *resume reminders* to turn them back on."
REMINDERS_RESUMED = "Weekly reminders are on again."

REMINDER_TEXT = "Time for your weekly report 🙂 Reply *report* to start."

# ---------------------------------------------------------------------------
# Question prompts
# ---------------------------------------------------------------------------

CHOOSE_WEEK = (
    "Which week is this report for?\n"
    "Reply *current week* or *previous week*."
)
CHOOSE_WEEK_ACK = "Got it 🙂 Let's begin, this takes a couple of minutes."

ASK_RESTING_HR = (
    "Resting heart rate for each day, like this:\n"
    "45 / 45 / 46 / 48 / 49 / 43 / 45\n\n"
    "If you don't know or your watch doesn't track it, reply *not tracked*."
)
ASK_SLEEP = (
    "Now sleep per day (hours), like this:\n"
    "6.5 / 7.5 / 8 / 9 / 10 / 5.5 / 4.5\n\n"
    "If you don't know, reply *not tracked*."
)
ASK_MOOD = "Your emotional state on a 1–10 scale (1 = very bad, 10 = great)."
ASK_BODY = "Now your physical state 1–10 (1 = really hard, 10 = top shape)."
ASK_FOOD = "A short note on nutrition this week (or reply *no comments*)."
ASK_PAIN = "Any pain, discomfort or injuries? If not, reply *no comments*."
ASK_WEEK_COMMENT = (
    "Now an overall comment on the week: how it went, what felt easy or hard, "
    "what you noticed. This one is required 🙂"
)
ASK_PLAN_EDITS = (
    "About the sessions already planned: does anything need adjusting?\n"
    "For example move, shorten, replace or swap sessions.\n\n"
    "If everything fits, reply *no changes*."
)
ASK_WISHES = (
    "Any wishes for next week's plan? (e.g. which day suits the long run, "
    "where you'd like it lighter or harder)\n\n"
    "If not, reply *no wishes*."
)
ASK_QUESTIONS = "Any questions for the coach? If not, reply *no questions*."

REPORT_ACCEPTED = "✅ Report received. Sending it to you and to the coach."
REPORT_HEADER = "🧾 Your report:\n\n"


def recipient_header(display_name: str | None, user_id: int) -> str:
    name = (display_name or "").strip() or "no name"
    return f"📩 New report from {name} (id: {user_id})\n\n"


# ---------------------------------------------------------------------------
# Rejections / protocol mismatches
# ---------------------------------------------------------------------------

NEED_SEVEN_VALUES = "Need 7 values separated by / (one per day)."
ALL_MUST_BE_NUMBERS = "All values must be numbers."
RATING_RANGE = "Rating must be a number from 1 to 10."
COMMENT_TOO_SHORT = "Comment is too short, add a bit more detail."

RESTART_HINT = "No report in progress. Send *report* to start."
WEEK_ALREADY_CHOSEN = "The week is already chosen. Send */report* to start over."
PICK_WEEK_HINT = "Please choose the week first: reply *current week* or *previous week*."

# ---------------------------------------------------------------------------
# Sentinel phrases (matched case-insensitively after trimming)
# ---------------------------------------------------------------------------

NOT_TRACKED_PHRASES = frozenset({"not tracked"})
NO_COMMENTS_PHRASES = frozenset({"no comments"})
NO_CHANGES_PHRASES = frozenset({"no changes"})
NO_WISHES_PHRASES = frozenset({"no wishes"})
NO_QUESTIONS_PHRASES = frozenset({"no questions"})
