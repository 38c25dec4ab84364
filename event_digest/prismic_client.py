from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from .config import EVENT_TYPE
from .models import DateWindow, Event
from .utils import as_plain_text

logger = logging.getLogger(__name__)


class PrismicError(Exception):
    """Raised when Prismic operations fail."""


class PrismicConnectionError(PrismicError):
    """Raised when Prismic is unreachable (network/timeout)."""


class PrismicApiError(PrismicError):
    """Raised when Prismic returns an error response or an unexpected payload."""


def endpoint_for(repository: str) -> str:
    """
    Accept either a repository name ("my-repo") or a full API endpoint
    ("https://my-repo.cdn.prismic.io/api/v2").
    """
    repository = repository.strip().rstrip("/")
    if repository.startswith(("http://", "https://")):
        if not repository.endswith("/api/v2"):
            repository = f"{repository}/api/v2"
        return repository
    return f"https://{repository}.cdn.prismic.io/api/v2"


class PrismicClient:
    def __init__(
        self,
        repository: str,
        access_token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._endpoint = endpoint_for(repository)
        self._access_token = access_token
        self._client = httpx.Client(base_url=self._endpoint, timeout=20.0, transport=transport)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def close(self) -> None:
        self._client.close()

    def fetch_events(
        self,
        lang: str,
        window: DateWindow,
        type_name: str = EVENT_TYPE,
        page_size: int = 100,
        max_pages: int = 20,
    ) -> List[Event]:
        start, end = window.as_query_bounds()
        field = f"my.{type_name}.time_start"
        ref = self._master_ref()
        params: list[tuple[str, Any]] = [
            ("ref", ref),
            ("q", f'[[at(document.type, "{type_name}")]]'),
            ("q", f'[[date.between({field}, "{start}", "{end}")]]'),
            ("orderings", f"[{field}]"),
            ("lang", lang),
            ("pageSize", page_size),
        ]
        if self._access_token:
            params.append(("access_token", self._access_token))

        events: List[Event] = []
        for page in range(1, max_pages + 1):
            data = self._get_json("/documents/search", params=[*params, ("page", page)])
            results = data.get("results")
            if not isinstance(results, list):
                raise PrismicApiError("Prismic search response has no 'results' list.")
            logger.info("Fetched %s %s documents from page %s", len(results), type_name, page)
            events.extend(self._to_model(raw) for raw in results)
            total_pages = data.get("total_pages") or 1
            if page >= total_pages:
                break
        else:
            logger.warning("Stopped paging after %s pages; results may be incomplete.", max_pages)
        return events

    def _master_ref(self) -> str:
        params = {"access_token": self._access_token} if self._access_token else None
        data = self._get_json("", params=params)
        for ref in data.get("refs", []):
            if ref.get("isMasterRef"):
                return ref["ref"]
        raise PrismicApiError("Prismic API did not return a master ref.")

    def _get_json(self, path: str, **kwargs) -> dict:
        try:
            response = self._client.get(path, **kwargs)
            response.raise_for_status()
        except httpx.RequestError as exc:
            raise PrismicConnectionError(f"Prismic request failed: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise PrismicApiError(f"Prismic request returned error: {exc}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise PrismicApiError(f"Prismic returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise PrismicApiError("Prismic returned an unexpected payload.")
        return data

    @staticmethod
    def _to_model(raw: dict) -> Event:
        data = raw.get("data") or {}
        return Event(
            id=raw.get("id", ""),
            title=as_plain_text(data.get("title")),
            time_start=data.get("time_start") or None,
            place_event_txt=as_plain_text(data.get("place_event_txt")),
        )
