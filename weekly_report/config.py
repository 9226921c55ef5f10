# weekly_report/config.py
import zoneinfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    # ── Database
    DATABASE_URL: str = "sqlite:///./weekly_report.db"

    # Twilio (required: the process must not start without a transport credential)
    TWILIO_ACCOUNT_SID: str
    TWILIO_AUTH_TOKEN: str
    TWILIO_FROM: str

    # Report recipients: numeric user ids, comma separated (e.g. "3,17")
    REPORT_RECIPIENT_IDS: str = Field("", env="REPORT_RECIPIENT_IDS")
    # Optional single fallback receiver, ignored when <= 0
    REPORT_RECEIVER_ID: int = Field(0, env="REPORT_RECEIVER_ID")

    # Weekly reminder (cron fields, evaluated in TIMEZONE)
    TIMEZONE: str = Field("Europe/Amsterdam", env="TIMEZONE")
    REMINDER_DAY_OF_WEEK: str = Field("sun", env="REMINDER_DAY_OF_WEEK")
    REMINDER_HOUR: int = Field(20, env="REMINDER_HOUR")
    REMINDER_MINUTE: int = Field(0, env="REMINDER_MINUTE")

    # Debug logging
    WEEKLY_REPORT_DEBUG: bool = Field(False, env="WEEKLY_REPORT_DEBUG")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # ignore unexpected keys instead of erroring
    )


def parse_receiver_ids(raw: str | None, fallback_id: int | None = 0) -> list[int]:
    """
    Recipient ids from a comma-separated string plus the fallback receiver.
    Non-numeric tokens are dropped; order is kept, duplicates removed.
    """
    out: list[int] = []
    for token in (raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        try:
            rid = int(token)
        except ValueError:
            print(f"[config] ignoring non-numeric recipient id: {token!r}")
            continue
        if rid not in out:
            out.append(rid)
    if fallback_id and fallback_id > 0 and fallback_id not in out:
        out.append(fallback_id)
    return out


settings = Settings()
DEFAULT_TZ = zoneinfo.ZoneInfo(settings.TIMEZONE)


def receiver_ids() -> list[int]:
    return parse_receiver_ids(settings.REPORT_RECIPIENT_IDS, settings.REPORT_RECEIVER_ID)
