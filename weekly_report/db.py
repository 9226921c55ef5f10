# weekly_report/db.py
from __future__ import annotations
import os

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

# ──────────────────────────────────────────────────────────────────────────────
# DATABASE URL
# ──────────────────────────────────────────────────────────────────────────────

# Prefer env var; fall back to config.py; else a local SQLite file.
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    from .config import settings
    DATABASE_URL = settings.DATABASE_URL or "sqlite:///./weekly_report.db"

# ──────────────────────────────────────────────────────────────────────────────
# SQLAlchemy engine/session
# ──────────────────────────────────────────────────────────────────────────────
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, pool_pre_ping=True, future=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────
def _is_postgres() -> bool:
    try:
        return engine.url.get_backend_name().startswith("postgres")
    except Exception:
        return False

def _table_exists(conn, table_name: str) -> bool:
    """
    Works on Postgres and SQLite. Uses information_schema for PG and sqlite_master for SQLite.
    """
    try:
        if _is_postgres():
            res = conn.execute(text("""
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_schema = 'public' AND table_name = :t
                )
            """), {"t": table_name}).scalar()
            return bool(res)
        else:
            res = conn.execute(text("""
                SELECT 1 FROM sqlite_master WHERE type='table' AND name=:t
            """), {"t": table_name}).first()
            return bool(res)
    except Exception:
        return False

def init_db() -> None:
    """
    Create tables at app startup (idempotent).
    """
    # Import here to avoid circular import at module import time
    from .models import Base

    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        missing = [t for t in ("users", "conversations") if not _table_exists(conn, t)]
    if missing:
        print(f"[db] WARN: tables missing after create_all: {', '.join(missing)}")
