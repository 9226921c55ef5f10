from __future__ import annotations

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# ──────────────────────────────────────────────────────────────────────────────
# Users (transport identity + reminder flag)
# ──────────────────────────────────────────────────────────────────────────────
class User(Base):
    __tablename__ = "users"
    id               = Column(Integer, primary_key=True)
    phone            = Column(String(64), unique=True, nullable=False, index=True)
    display_name     = Column(String(160), nullable=True)   # WhatsApp ProfileName
    reminders_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    created_at       = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at       = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

# ──────────────────────────────────────────────────────────────────────────────
# Report conversations: one row per user while a report is being filled in
# ──────────────────────────────────────────────────────────────────────────────
class Conversation(Base):
    __tablename__ = "conversations"
    user_id    = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    step       = Column(String(32), nullable=False)         # WizardState value
    payload    = Column(Text, nullable=False)               # answers, JSON
    updated_at = Column(DateTime(timezone=True), server_default=func.now(),
                        onupdate=func.now(), nullable=False)
