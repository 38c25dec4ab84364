from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from event_digest.models import DateWindow
from event_digest.utils import as_plain_text, parse_prismic_date, today_window, week_window

UTC = timezone.utc


def test_today_window_covers_whole_utc_day():
    window = today_window(datetime(2024, 6, 3, 6, 59, tzinfo=UTC))
    assert window.as_query_bounds() == ("2024-06-03T00:00:00Z", "2024-06-03T23:59:59Z")
    assert window.start <= window.end


def test_today_window_uses_utc_date_for_non_utc_clock():
    paris_early_morning = datetime(2024, 6, 3, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    window = today_window(paris_early_morning)
    assert window.as_query_bounds()[0] == "2024-06-02T00:00:00Z"


def test_week_window_spans_seven_days():
    window = week_window(datetime(2024, 6, 3, 7, 0, tzinfo=UTC))
    assert window.as_query_bounds() == ("2024-06-03T00:00:00Z", "2024-06-10T00:00:00Z")
    assert window.start <= window.end


def test_windows_accept_naive_now_as_utc():
    window = week_window(datetime(2024, 12, 30, 7, 0))
    assert window.as_query_bounds() == ("2024-12-30T00:00:00Z", "2025-01-06T00:00:00Z")


def test_windows_default_to_current_time():
    for window in (today_window(), week_window()):
        assert window.start <= window.end
        assert window.start.tzinfo is not None


def test_date_window_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        DateWindow(start=datetime(2024, 6, 2, tzinfo=UTC), end=datetime(2024, 6, 1, tzinfo=UTC))


def test_parse_prismic_timestamp_with_compact_offset():
    parsed = parse_prismic_date("2024-06-01T18:30:00+0000")
    assert parsed == datetime(2024, 6, 1, 18, 30, tzinfo=UTC)


def test_parse_prismic_timestamp_with_z_suffix():
    assert parse_prismic_date("2024-06-01T18:30:00Z") == datetime(2024, 6, 1, 18, 30, tzinfo=UTC)


def test_parse_prismic_date_only_is_midnight_utc():
    assert parse_prismic_date("2024-06-01") == datetime(2024, 6, 1, tzinfo=UTC)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", 42])
def test_parse_prismic_date_returns_none_for_missing_or_invalid(value):
    assert parse_prismic_date(value) is None


def test_as_plain_text_flattens_rich_text_blocks():
    blocks = [{"type": "heading1", "text": "Nuit des étoiles", "spans": []}, {"type": "paragraph", "text": "2024"}]
    assert as_plain_text(blocks) == "Nuit des étoiles 2024"
    assert as_plain_text("Observatoire") == "Observatoire"
    assert as_plain_text(None) is None
    assert as_plain_text([]) is None
