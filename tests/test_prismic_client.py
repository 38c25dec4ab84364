from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from event_digest.models import DateWindow
from event_digest.prismic_client import (
    PrismicApiError,
    PrismicClient,
    PrismicConnectionError,
    endpoint_for,
)

WINDOW = DateWindow(
    start=datetime(2024, 6, 1, tzinfo=timezone.utc),
    end=datetime(2024, 6, 1, 23, 59, 59, tzinfo=timezone.utc),
)
REFS = {"refs": [{"id": "preview", "ref": "preview-ref"}, {"id": "master", "ref": "master-ref", "isMasterRef": True}]}


def _doc(idx: int) -> dict:
    return {
        "id": f"doc{idx}",
        "type": "event",
        "data": {
            "title": f"Soirée {idx}",
            "time_start": f"2024-06-01T1{idx}:00:00+0000",
            "place_event_txt": "Observatoire",
        },
    }


def _client(handler, **kwargs) -> PrismicClient:
    return PrismicClient("sam-site", transport=httpx.MockTransport(handler), **kwargs)


def test_endpoint_for_name_and_url():
    assert endpoint_for("sam-site") == "https://sam-site.cdn.prismic.io/api/v2"
    assert endpoint_for("https://sam-site.cdn.prismic.io/api/v2/") == "https://sam-site.cdn.prismic.io/api/v2"
    assert endpoint_for("https://sam-site.prismic.io") == "https://sam-site.prismic.io/api/v2"


def test_fetch_events_builds_query_and_pages():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.rstrip("/") == "/api/v2":
            return httpx.Response(200, json=REFS)
        assert request.url.path == "/api/v2/documents/search"
        seen.append(request.url.params)
        page = int(request.url.params["page"])
        docs = [_doc(1), _doc(2)] if page == 1 else [_doc(3)]
        return httpx.Response(200, json={"page": page, "total_pages": 2, "results": docs})

    client = _client(handler)
    events = client.fetch_events("fr-FR", WINDOW)
    client.close()

    assert [e.id for e in events] == ["doc1", "doc2", "doc3"]
    assert events[0].title == "Soirée 1"
    assert events[0].time_start == "2024-06-01T11:00:00+0000"
    assert events[0].place_event_txt == "Observatoire"

    assert len(seen) == 2
    params = seen[0]
    assert params["ref"] == "master-ref"
    assert params["lang"] == "fr-FR"
    assert params["orderings"] == "[my.event.time_start]"
    assert params.get_list("q") == [
        '[[at(document.type, "event")]]',
        '[[date.between(my.event.time_start, "2024-06-01T00:00:00Z", "2024-06-01T23:59:59Z")]]',
    ]
    assert "access_token" not in params


def test_fetch_events_sends_access_token():
    tokens = []

    def handler(request: httpx.Request) -> httpx.Response:
        tokens.append(request.url.params.get("access_token"))
        if request.url.path.rstrip("/") == "/api/v2":
            return httpx.Response(200, json=REFS)
        return httpx.Response(200, json={"page": 1, "total_pages": 1, "results": []})

    client = _client(handler, access_token="secret-token")
    assert client.fetch_events("fr-FR", WINDOW) == []
    assert tokens == ["secret-token", "secret-token"]


def test_fetch_events_handles_missing_fields():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.rstrip("/") == "/api/v2":
            return httpx.Response(200, json=REFS)
        return httpx.Response(200, json={"total_pages": 1, "results": [{"id": "bare", "data": {}}]})

    events = _client(handler).fetch_events("fr-FR", WINDOW)
    assert events[0].title is None
    assert events[0].time_start is None
    assert events[0].place_event_txt is None


def test_fetch_events_raises_api_error_on_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.rstrip("/") == "/api/v2":
            return httpx.Response(200, json=REFS)
        return httpx.Response(400, json={"error": "bad predicate"})

    with pytest.raises(PrismicApiError):
        _client(handler).fetch_events("fr-FR", WINDOW)


def test_fetch_events_raises_api_error_without_master_ref():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"refs": []})

    with pytest.raises(PrismicApiError):
        _client(handler).fetch_events("fr-FR", WINDOW)


def test_fetch_events_raises_connection_error_on_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(PrismicConnectionError):
        _client(handler).fetch_events("fr-FR", WINDOW)
