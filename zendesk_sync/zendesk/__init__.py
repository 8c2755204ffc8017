"""Zendesk Help Center adapters."""

from __future__ import annotations

from .api import ZendeskApi, ZendeskApiError
from .articles import ArticleIndex
from .users import AuthorCache, AuthorResolver, build_search_query

__all__ = [
    "ArticleIndex",
    "AuthorCache",
    "AuthorResolver",
    "ZendeskApi",
    "ZendeskApiError",
    "build_search_query",
]
