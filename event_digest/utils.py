from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from .config import WEEK_WINDOW_DAYS
from .models import DateWindow

logger = logging.getLogger(__name__)

_OFFSET_WITHOUT_COLON = re.compile(r"([+-]\d{2})(\d{2})$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _utc_today(now: Optional[datetime]) -> date:
    current = now or utc_now()
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(timezone.utc).date()


def _at(day: date, clock: time) -> datetime:
    return datetime.combine(day, clock, tzinfo=timezone.utc)


def today_window(now: Optional[datetime] = None) -> DateWindow:
    today = _utc_today(now)
    return DateWindow(start=_at(today, time(0, 0, 0)), end=_at(today, time(23, 59, 59)))


def week_window(now: Optional[datetime] = None, days: int = WEEK_WINDOW_DAYS) -> DateWindow:
    """
    From today 00:00:00Z up to midnight UTC `days` days later.

    Same bounds the repository applies to bare YYYY-MM-DD dates.
    """
    today = _utc_today(now)
    return DateWindow(start=_at(today, time(0, 0, 0)), end=_at(today + timedelta(days=days), time(0, 0, 0)))


def parse_prismic_date(value: Any) -> Optional[datetime]:
    """
    Convert a Prismic Date ("2024-06-01") or Timestamp ("2024-06-01T18:30:00+0000")
    field to an aware datetime. Returns None for empty or unparseable values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _OFFSET_WITHOUT_COLON.sub(r"\1:\2", text) if "T" in text else text
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Unparseable Prismic date value: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def as_plain_text(value: Any) -> Optional[str]:
    """
    Key Text fields come as plain strings; Rich Text/Title fields come as a list
    of blocks. Both are flattened to a single string.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        parts = [block.get("text", "") for block in value if isinstance(block, dict)]
        text = " ".join(p for p in parts if p)
        return text or None
    return str(value)
