#!/usr/bin/env python3
"""
Rehearse the weekly report conversation locally, without Twilio or a server.

Examples
  python run_report_script.py                      # interactive, current week
  python run_report_script.py --week previous
  python run_report_script.py --answers answers.txt --recipient 2 --recipient 3
"""
from __future__ import annotations

import os
import sys
import argparse

# Ensure project root is on sys.path
ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekly_report.models import Base
from weekly_report.store import SqlStateStore
from weekly_report.wizard import ReportWizard

SIM_USER_ID = 1


def _console_send(recipient_id: int, text: str) -> None:
    label = "you" if recipient_id == SIM_USER_ID else f"recipient {recipient_id}"
    print(f"\n[bot → {label}]\n{text}")


def _build(recipients: list[int]) -> ReportWizard:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    store = SqlStateStore(sessionmaker(bind=engine, autoflush=False))
    return ReportWizard(store=store, send=_console_send, recipients=recipients)


def _read_answers(path: str) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return [line.rstrip("\n") for line in f if line.strip()]


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the weekly report wizard in the console.")
    parser.add_argument("--week", choices=["current", "previous"], default="current")
    parser.add_argument("--answers", help="File with one answer per line (replayed instead of prompting)")
    parser.add_argument("--recipient", type=int, action="append", default=[], help="Recipient id (repeatable)")
    parser.add_argument("--name", default="Simulator", help="Display name used in the recipient header")
    args = parser.parse_args()

    wizard = _build(args.recipient)
    wizard.start_report(SIM_USER_ID)
    wizard.choose_week(SIM_USER_ID, args.week)

    scripted = _read_answers(args.answers) if args.answers else None
    while wizard.store.load(SIM_USER_ID) is not None:
        if scripted is not None:
            if not scripted:
                print("\n[simulate] answers file exhausted before the report finished.")
                return
            text = scripted.pop(0)
            print(f"\n[you] {text}")
        else:
            try:
                text = input("\n> ")
            except (EOFError, KeyboardInterrupt):
                print("\n[simulate] aborted; conversation left unfinished.")
                return
        wizard.handle_text(SIM_USER_ID, text, display_name=args.name)
    print("\n[simulate] report complete.")


if __name__ == "__main__":
    main()
