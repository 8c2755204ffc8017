"""Shared fakes for exercising the Zendesk adapters without a network."""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Mapping

import pytest

from zendesk_sync.settings import PublishSettings

_TRANSLATION_PATH = re.compile(r"^/help_center/articles/(?P<id>\d+)/translations/(?P<locale>[^/]+)\.json$")
_ARTICLE_PATH = re.compile(r"^/help_center/(?P<locale>[^/]+)/articles/(?P<id>\d+)\.json$")
_ARTICLE_FIELDS = ("label_names", "position", "promoted", "comments_disabled", "author_id")


class FakeHelpCenter:
    """In-memory stand-in for the HTTP client, backed by a tiny Help Center model.

    ``fail`` holds the operations that should answer as failed requests:
    ``"list"``, ``"create"``, ``"translation"``, ``"article"``, ``"search"``.
    """

    base_url = "https://example.zendesk.com/api/v2"

    def __init__(self, *, locale: str = "en-us", section_id: int = 789, page_size: int = 30) -> None:
        self.locale = locale
        self.section_id = section_id
        self.page_size = page_size
        self.articles: dict[int, dict[str, Any]] = {}
        self.users: list[dict[str, Any]] = []
        self.calls: list[tuple[str, str, Any]] = []
        self.fail: set[str] = set()
        self.broken_pages: set[int] = set()
        self.next_id = 100

    @property
    def listing_path(self) -> str:
        return f"/help_center/{self.locale}/sections/{self.section_id}/articles.json"

    @property
    def writes(self) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] != "GET"]

    def calls_to(self, method: str, path: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] == method and call[1] == path]

    def add_article(self, article: Mapping[str, Any]) -> dict[str, Any]:
        stored = {"promoted": False, "comments_disabled": False, "body": "", **article}
        self.articles[stored["id"]] = stored
        return stored

    def url(self, *segments: object) -> str:
        return "/".join([self.base_url, *(str(segment) for segment in segments)])

    def get(self, url: str, params: Mapping[str, str] | None = None) -> dict[str, Any] | None:
        path = self._path(url)
        self.calls.append(("GET", path, dict(params or {})))
        if path == self.listing_path:
            return self._listing(int((params or {}).get("page", 1)))
        if path == "/search.json":
            if "search" in self.fail:
                return None
            query = (params or {})["query"]
            return {"results": [copy.deepcopy(user) for user in self.users if _matches(user, query)]}
        return None

    def post(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any] | None:
        path = self._path(url)
        self.calls.append(("POST", path, copy.deepcopy(dict(payload))))
        if path != self.listing_path or "create" in self.fail:
            return None
        article = dict(payload["article"])
        article_id = self.next_id
        self.next_id += 1
        self.add_article({"id": article_id, **article})
        return {"article": {"id": article_id}}

    def put(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any] | None:
        path = self._path(url)
        self.calls.append(("PUT", path, copy.deepcopy(dict(payload))))
        translation = _TRANSLATION_PATH.match(path)
        if translation:
            article = self.articles.get(int(translation.group("id")))
            if article is None or "translation" in self.fail:
                return None
            article.update({key: payload[key] for key in ("title", "body") if key in payload})
            return {"translation": {"id": 5000 + article["id"]}}
        match = _ARTICLE_PATH.match(path)
        if match:
            article = self.articles.get(int(match.group("id")))
            if article is None or "article" in self.fail:
                return None
            fields = payload["article"]
            article.update({key: fields[key] for key in _ARTICLE_FIELDS if key in fields})
            return {"article": {"id": article["id"]}}
        return None

    def _listing(self, page: int) -> dict[str, Any] | None:
        if "list" in self.fail or page in self.broken_pages:
            return None
        items = list(self.articles.values())
        page_count = max(1, -(-len(items) // self.page_size))
        start = (page - 1) * self.page_size
        chunk = items[start : start + self.page_size]
        return {
            "articles": copy.deepcopy(chunk),
            "page": page,
            "page_count": page_count,
            "count": len(items),
        }

    def _path(self, url: str) -> str:
        assert url.startswith(self.base_url), url
        return url[len(self.base_url) :]


def _matches(user: Mapping[str, Any], query: str) -> bool:
    criteria = query.removeprefix("type:user ")
    if criteria.startswith("email:"):
        return user.get("email") == criteria[len("email:") :]
    name, *tags = criteria[len("name:") :].split(" tags:")
    return user.get("name") == name and all(tag in user.get("tags", []) for tag in tags)


@pytest.fixture
def help_center() -> FakeHelpCenter:
    return FakeHelpCenter()


@pytest.fixture
def publish_settings() -> PublishSettings:
    return PublishSettings(section_id=789, user_segment_id=123, permission_group_id=456)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
