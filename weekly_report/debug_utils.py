import json
import os
from typing import Any, Optional

# Long free text (whole reports) is cut in debug output
PREVIEW_CHARS = 160


def _truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    return _truthy(os.getenv("WEEKLY_REPORT_DEBUG"))


def _clip(value: Any) -> Any:
    if isinstance(value, str) and len(value) > PREVIEW_CHARS:
        return value[:PREVIEW_CHARS] + "…"
    if isinstance(value, dict):
        return {k: _clip(v) for k, v in value.items()}
    return value


def debug_log(message: str, payload: Optional[dict[str, Any]] = None, tag: str = "debug") -> None:
    """Print `[tag] message :: {json}` when WEEKLY_REPORT_DEBUG is on; never raises."""
    if not debug_enabled():
        return
    try:
        line = f"[{tag}] {message}"
        if payload is not None:
            try:
                line += " :: " + json.dumps(_clip(payload), ensure_ascii=False, default=str)
            except (TypeError, ValueError):
                line += f" :: {payload!r}"
        print(line)
    except Exception:
        pass
