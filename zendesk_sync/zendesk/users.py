"""Resolution of article authors to Zendesk users."""

from __future__ import annotations

from typing import Any, Mapping

from zendesk_sync.services.article_models import Author
from zendesk_sync.utils.logging import get_logger

from .api import ZendeskApi

LOGGER = get_logger(__name__)


class AuthorCache:
    """Run-scoped memo of author key to user id, remembering misses too."""

    _NOT_FOUND = object()

    def __init__(self) -> None:
        self._entries: dict[str, object] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> int | None:
        value = self._entries.get(key)
        if value is None or value is self._NOT_FOUND:
            return None
        return value  # type: ignore[return-value]

    def store(self, key: str, user_id: int | None) -> None:
        self._entries[key] = self._NOT_FOUND if user_id is None else user_id


def build_search_query(author: Author) -> str | None:
    if author.email:
        return f"type:user email:{author.email}"
    if author.name:
        terms = [f"type:user name:{author.name}"]
        terms.extend(f"tags:{tag}" for tag in author.tags)
        return " ".join(terms)
    return None


class AuthorResolver:
    """Looks authors up through the search endpoint, one request per distinct key."""

    def __init__(self, api: ZendeskApi) -> None:
        self._api = api

    def resolve(self, author: Author, cache: AuthorCache) -> int | None:
        key = author.cache_key
        if key is None:
            return None
        if key in cache:
            return cache.get(key)

        user_id = self._search(author)
        cache.store(key, user_id)
        if user_id is None:
            LOGGER.warning(
                "No Zendesk user found for author %s",
                key,
                extra={"event": "author.not_found"},
            )
        return user_id

    def _search(self, author: Author) -> int | None:
        query = build_search_query(author)
        if query is None:
            return None
        results = self._api.search_users(query)
        if not results:
            return None
        return _user_id(results[0])


def _user_id(user: Any) -> int | None:
    if not isinstance(user, Mapping):
        return None
    value = user.get("id")
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None
