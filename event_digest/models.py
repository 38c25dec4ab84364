from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class Event:
    id: str
    title: Optional[str]
    time_start: Optional[str]  # raw Prismic Date or Timestamp field
    place_event_txt: Optional[str] = None


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}")

    def as_query_bounds(self) -> tuple[str, str]:
        return _to_iso_z(self.start), _to_iso_z(self.end)


@dataclass
class EventView:
    title: Optional[str]
    date_start: str
    location: Optional[str]

    def as_template_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "dateStart": self.date_start, "location": self.location}


@dataclass
class EmailContext:
    events: List[EventView] = field(default_factory=list)

    def as_template_context(self) -> Dict[str, Any]:
        return {"events": [view.as_template_dict() for view in self.events]}


@dataclass
class DeliveryResult:
    status: str  # "sent" | "failed"
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"


@dataclass
class JobReport:
    job: str
    status: str  # "sent" | "skipped" | "fetch_failed" | "send_failed" | "failed"
    event_count: int = 0
    error: Optional[str] = None


def _to_iso_z(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
