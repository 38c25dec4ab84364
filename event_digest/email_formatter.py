from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from babel.dates import format_datetime
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .config import DISPLAY_TIMEZONE, LANG
from .models import EmailContext, Event, EventView
from .utils import parse_prismic_date

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates" / "emails"

# 例: "1 juin 2024 à 20:30"
LONG_DATE_PATTERN = "d MMMM y 'à' HH:mm"
NO_DATE_LABEL = "Date non communiquée"


def format_long_date(value: Any, locale: str = LANG, timezone: str = DISPLAY_TIMEZONE) -> str:
    instant = parse_prismic_date(value)
    if instant is None:
        return NO_DATE_LABEL
    try:
        local = instant.astimezone(ZoneInfo(timezone))
        return format_datetime(local, LONG_DATE_PATTERN, tzinfo=local.tzinfo, locale=locale.replace("-", "_"))
    except OverflowError:
        # near datetime.min/max the offset pushes the instant out of range
        return NO_DATE_LABEL


def build_email_context(events: Sequence[Event]) -> EmailContext:
    return EmailContext(
        events=[
            EventView(
                title=event.title,
                date_start=format_long_date(event.time_start),
                location=event.place_event_txt,
            )
            for event in events
        ]
    )


def build_environment(templates_dir: Optional[Path] = None) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_email_body(env: Environment, template_name: str, context: EmailContext) -> Tuple[str, str]:
    """Return (text_body, html_body) rendered from `<name>.txt` and `<name>.html`."""
    values = context.as_template_context()
    text_body = env.get_template(f"{template_name}.txt").render(**values)
    html_body = env.get_template(f"{template_name}.html").render(**values)
    return text_body, html_body
