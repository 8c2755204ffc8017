"""Snapshot of the remote articles of a section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from zendesk_sync.services.article_components import MetadataCodec
from zendesk_sync.utils.logging import get_logger

from .api import ZendeskApi

LOGGER = get_logger(__name__)

RemoteArticle = Mapping[str, Any]


def _articles_of(page: Mapping[str, Any]) -> list[RemoteArticle]:
    articles = page.get("articles")
    if not isinstance(articles, list):
        return []
    return [item for item in articles if isinstance(item, Mapping)]


def _page_count(page: Mapping[str, Any]) -> int:
    value = page.get("page_count")
    if isinstance(value, int) and not isinstance(value, bool) and value > 1:
        return value
    return 1


@dataclass(slots=True)
class ArticleIndex:
    """Remote articles indexed by id and by the slug recovered from their body.

    Built once at the start of a run; all decisions of the run are taken
    against this snapshot.
    """

    articles: list[RemoteArticle] = field(default_factory=list)
    by_id: dict[int, RemoteArticle] = field(default_factory=dict)
    by_slug: dict[str, RemoteArticle] = field(default_factory=dict)

    @classmethod
    def from_articles(
        cls, articles: Sequence[RemoteArticle], *, codec: MetadataCodec | None = None
    ) -> "ArticleIndex":
        codec = codec or MetadataCodec()
        index = cls(articles=list(articles))
        for article in index.articles:
            article_id = article.get("id")
            if isinstance(article_id, int) and not isinstance(article_id, bool):
                index.by_id[article_id] = article
            metadata = codec.extract(article.get("body"))
            if metadata is not None and metadata.slug:
                index.by_slug[metadata.slug] = article
        return index

    @classmethod
    def build(cls, api: ZendeskApi, *, codec: MetadataCodec | None = None) -> "ArticleIndex":
        first = api.list_articles_page(1)
        if first is None:
            LOGGER.warning(
                "Unable to list existing articles, every article will be created",
                extra={"event": "index.unavailable", "section_id": api.section_id},
            )
            return cls()

        page_count = _page_count(first)
        articles = _articles_of(first)
        for page_number in range(2, page_count + 1):
            page = api.list_articles_page(page_number)
            if page is None:
                # A missing page only hides its articles from matching; they may be re-created.
                LOGGER.warning(
                    "Unable to fetch page %d of %d of the article listing",
                    page_number,
                    page_count,
                    extra={"event": "index.page_failed", "page": page_number},
                )
                continue
            articles.extend(_articles_of(page))

        LOGGER.info(
            "Fetched %d existing articles",
            len(articles),
            extra={"event": "index.built", "pages": page_count, "section_id": api.section_id},
        )
        return cls.from_articles(articles, codec=codec)

    def find(self, *, remote_id: int | None, slug: str) -> RemoteArticle | None:
        if remote_id is not None:
            return self.by_id.get(remote_id)
        return self.by_slug.get(slug)

    def __len__(self) -> int:
        return len(self.articles)
