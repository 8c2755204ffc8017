from __future__ import annotations

import logging

import pytest

from zendesk_sync.services.article_components import MetadataCodec
from zendesk_sync.services.article_models import MetadataBlock
from zendesk_sync.zendesk import ArticleIndex, ZendeskApi


def _body(slug: str, digest: str = "d") -> str:
    return MetadataCodec().embed("<p>Body</p>", MetadataBlock(slug=slug, digest=digest))


def test_build_walks_every_page_in_order(help_center, publish_settings) -> None:
    help_center.page_size = 2
    for number in range(5):
        help_center.add_article({"id": number + 1, "body": _body(f"slug-{number}")})

    index = ArticleIndex.build(ZendeskApi(help_center, publish_settings))

    listing = help_center.calls_to("GET", help_center.listing_path)
    assert [params for _, _, params in listing] == [{}, {"page": "2"}, {"page": "3"}]
    assert len(index) == 5
    assert [article["id"] for article in index.articles] == [1, 2, 3, 4, 5]
    assert sorted(index.by_id) == [1, 2, 3, 4, 5]
    assert sorted(index.by_slug) == [f"slug-{number}" for number in range(5)]


def test_failed_page_is_skipped(help_center, publish_settings, caplog: pytest.LogCaptureFixture) -> None:
    help_center.page_size = 1
    for number in range(3):
        help_center.add_article({"id": number + 1, "body": _body(f"slug-{number}")})
    help_center.broken_pages.add(2)

    with caplog.at_level(logging.WARNING):
        index = ArticleIndex.build(ZendeskApi(help_center, publish_settings))

    assert sorted(index.by_id) == [1, 3]
    assert "slug-1" not in index.by_slug
    assert "page 2 of 3" in caplog.text


def test_failed_first_page_yields_empty_index(help_center, publish_settings) -> None:
    help_center.add_article({"id": 1, "body": _body("slug")})
    help_center.fail.add("list")

    index = ArticleIndex.build(ZendeskApi(help_center, publish_settings))

    assert len(index) == 0
    assert index.find(remote_id=None, slug="slug") is None
    assert len(help_center.calls) == 1


def test_articles_without_metadata_are_only_indexed_by_id() -> None:
    index = ArticleIndex.from_articles(
        [
            {"id": 10, "body": "<p>Written in the Help Center editor</p>"},
            {"id": 11, "body": None},
            {"id": "12", "body": _body("string-id")},
        ]
    )

    assert sorted(index.by_id) == [10, 11]
    assert list(index.by_slug) == ["string-id"]


def test_find_prefers_remote_id_over_slug() -> None:
    first = {"id": 1, "body": _body("shared")}
    second = {"id": 2, "body": _body("other")}
    index = ArticleIndex.from_articles([first, second])

    assert index.find(remote_id=2, slug="shared") is second
    assert index.find(remote_id=None, slug="shared") is first
    assert index.find(remote_id=3, slug="shared") is None
    assert index.find(remote_id=None, slug="missing") is None
