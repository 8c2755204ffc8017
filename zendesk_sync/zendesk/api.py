"""Zendesk Help Center API helpers."""

from __future__ import annotations

import json
from typing import Any, Mapping

from zendesk_sync.core.http_client import HttpClient
from zendesk_sync.settings import PublishSettings


class ZendeskApiError(RuntimeError):
    """Raised when a successful Zendesk response does not have the expected shape."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


def _as_id(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class ZendeskApi:
    """Endpoints used to synchronize one section of a Help Center.

    Methods return ``None`` when the underlying request failed; the HTTP
    client has already logged the reason.
    """

    def __init__(self, client: HttpClient, publish: PublishSettings) -> None:
        self._client = client
        self._locale = publish.locale
        self._section_id = publish.section_id

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def section_id(self) -> int:
        return self._section_id

    def section_articles_url(self) -> str:
        return self._client.url(
            "help_center", self._locale, "sections", self._section_id, "articles.json"
        )

    def translation_url(self, article_id: int) -> str:
        return self._client.url(
            "help_center", "articles", article_id, "translations", f"{self._locale}.json"
        )

    def article_url(self, article_id: int) -> str:
        return self._client.url("help_center", self._locale, "articles", f"{article_id}.json")

    def search_url(self) -> str:
        return self._client.url("search.json")

    def list_articles_page(self, page: int = 1) -> dict[str, Any] | None:
        params = None if page <= 1 else {"page": str(page)}
        return self._client.get(self.section_articles_url(), params=params)

    def create_article(
        self, article: Mapping[str, Any], *, notify_subscribers: bool
    ) -> int | None:
        payload = {"article": dict(article), "notify_subscribers": notify_subscribers}
        data = self._client.post(self.section_articles_url(), payload)
        if data is None:
            return None
        return self._envelope_id(data, "article")

    def update_translation(self, article_id: int, translation: Mapping[str, Any]) -> int | None:
        data = self._client.put(self.translation_url(article_id), dict(translation))
        if data is None:
            return None
        return self._envelope_id(data, "translation")

    def update_article(self, article_id: int, article: Mapping[str, Any]) -> int | None:
        data = self._client.put(self.article_url(article_id), {"article": dict(article)})
        if data is None:
            return None
        return self._envelope_id(data, "article")

    def search_users(self, query: str) -> list[Any] | None:
        data = self._client.get(self.search_url(), params={"query": query})
        if data is None:
            return None
        results = data.get("results")
        if not isinstance(results, list):
            return None
        return results

    def _envelope_id(self, data: Mapping[str, Any], key: str) -> int:
        envelope = data.get(key)
        if not isinstance(envelope, Mapping):
            raise ZendeskApiError(f"Response is missing the '{key}' object", details={"keys": sorted(data)})
        identifier = _as_id(envelope.get("id"))
        if identifier is None:
            raise ZendeskApiError(
                f"Response '{key}' object has no numeric id", details={"id": envelope.get("id")}
            )
        return identifier
