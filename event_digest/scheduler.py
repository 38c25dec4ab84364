from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence

import schedule

from .config import DAILY_AT, DAILY_SUBJECT, LANG, WEEKLY_AT, WEEKLY_SUBJECT
from .models import DateWindow, DeliveryResult, Event, JobReport
from .prismic_client import PrismicError
from .utils import today_window, week_window

logger = logging.getLogger(__name__)


class EventSource(Protocol):
    def fetch_events(self, lang: str, window: DateWindow) -> List[Event]: ...


class DigestSender(Protocol):
    def send_digest(self, subject: str, template_name: str, events: Sequence[Event]) -> DeliveryResult: ...


@dataclass(frozen=True)
class DigestJob:
    name: str
    subject: str
    template: str
    window_factory: Callable[[Optional[datetime]], DateWindow]


DAILY_JOB = DigestJob(name="daily", subject=DAILY_SUBJECT, template="daily", window_factory=today_window)
WEEKLY_JOB = DigestJob(name="weekly", subject=WEEKLY_SUBJECT, template="weekly", window_factory=week_window)


def run_digest_job(
    job: DigestJob,
    client: EventSource,
    mailer: DigestSender,
    lang: str = LANG,
    now: Optional[datetime] = None,
) -> JobReport:
    tag = f"[{job.name.upper()} JOB]"
    try:
        window = job.window_factory(now)
        start, end = window.as_query_bounds()
        logger.info("%s fetching events between %s and %s", tag, start, end)
        events = client.fetch_events(lang, window)
        if not events:
            logger.info("%s no events in window; nothing to send.", tag)
            return JobReport(job=job.name, status="skipped")

        logger.info("%s %s event(s) found; sending digest.", tag, len(events))
        result = mailer.send_digest(job.subject, job.template, events)
        if not result.is_success():
            logger.error("%s digest not sent: %s", tag, result.error)
            return JobReport(job=job.name, status="send_failed", event_count=len(events), error=result.error)
        return JobReport(job=job.name, status="sent", event_count=len(events))
    except PrismicError as exc:
        logger.error("%s error: %s", tag, exc)
        return JobReport(job=job.name, status="fetch_failed", error=str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s unexpected failure: %s", tag, exc)
        return JobReport(job=job.name, status="failed", error=str(exc))


def register_jobs(
    scheduler: schedule.Scheduler,
    client: EventSource,
    mailer: DigestSender,
    lang: str = LANG,
) -> List[schedule.Job]:
    """
    Daily at 07:00 and Mondays at 07:00, process local time.
    """
    daily = scheduler.every().day.at(DAILY_AT).do(run_digest_job, DAILY_JOB, client, mailer, lang)
    weekly = scheduler.every().monday.at(WEEKLY_AT).do(run_digest_job, WEEKLY_JOB, client, mailer, lang)
    for job in (daily, weekly):
        logger.info("Scheduled %s", job)
    return [daily, weekly]


def run_forever(scheduler: schedule.Scheduler, poll_seconds: float = 30.0) -> None:
    logger.info("Scheduler started with %s job(s)", len(scheduler.jobs))
    while True:
        scheduler.run_pending()
        time.sleep(poll_seconds)
