"""Workflow that synchronizes local articles with a Help Center section."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from zendesk_sync.services.article_components import DigestComputer, MetadataCodec
from zendesk_sync.services.article_models import (
    ArticleAttributes,
    MetadataBlock,
    SyncOutcome,
    SyncReport,
)
from zendesk_sync.settings import PublishSettings
from zendesk_sync.utils.logging import get_logger
from zendesk_sync.zendesk import (
    ArticleIndex,
    AuthorCache,
    AuthorResolver,
    ZendeskApi,
    ZendeskApiError,
)

LOGGER = get_logger(__name__)

DRY_RUN_REASON = "dry-run"


class SyncEngine:
    """Decides, per local article, whether to create, update or skip it remotely.

    A run works against a single snapshot of the remote section taken when it
    starts. Articles are processed in the order they are given; a failure is
    recorded for the article concerned and the run moves on.
    """

    def __init__(
        self,
        api: ZendeskApi,
        publish: PublishSettings,
        *,
        resolver: AuthorResolver | None = None,
        codec: MetadataCodec | None = None,
        digest_computer: DigestComputer | None = None,
        dry_run: bool = False,
    ) -> None:
        self._api = api
        self._publish = publish
        self._resolver = resolver or AuthorResolver(api)
        self._codec = codec or MetadataCodec()
        self._digests = digest_computer or DigestComputer()
        self._dry_run = dry_run

    def run(self, articles: Iterable[ArticleAttributes]) -> SyncReport:
        report = SyncReport()
        pending = list(articles)
        if not pending:
            LOGGER.info("No article to upload", extra={"event": "sync.empty"})
            return report

        index = ArticleIndex.build(self._api, codec=self._codec)
        cache = AuthorCache()
        for article in pending:
            report.add(self.sync_article(article, index, cache))

        summary = report.summary()
        LOGGER.info(
            "Synchronization finished: %d created, %d updated, %d skipped, %d failed",
            summary["created"],
            summary["updated"],
            summary["skipped"],
            summary["failed"],
            extra={"event": "sync.finished", "summary": summary},
        )
        return report

    def write_fields(self, article: ArticleAttributes, cache: AuthorCache) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "label_names": list(article.tags),
            "position": article.position,
            "promoted": article.promoted,
            "comments_disabled": article.comments_disabled,
        }
        if article.author is not None:
            author_id = self._resolver.resolve(article.author, cache)
            if author_id is not None:
                fields["author_id"] = author_id
        return fields

    def translation_fields(self, article: ArticleAttributes, digest: str) -> dict[str, Any]:
        return {
            "title": article.title,
            "body": self._codec.embed(article.content, MetadataBlock(slug=article.slug, digest=digest)),
            "user_segment_id": self._publish.user_segment_id,
            "permission_group_id": self._publish.permission_group_id,
        }

    def compute_digest(self, article: ArticleAttributes, fields: Mapping[str, Any]) -> str:
        return self._digests.compute(
            fields,
            article.title,
            article.content,
            self._publish.user_segment_id,
            self._publish.permission_group_id,
        )

    def sync_article(
        self, article: ArticleAttributes, index: ArticleIndex, cache: AuthorCache
    ) -> SyncOutcome:
        fields = self.write_fields(article, cache)
        digest = self.compute_digest(article, fields)
        translation = self.translation_fields(article, digest)

        existing = index.find(remote_id=article.remote_id, slug=article.slug)
        if existing is None:
            return self._create(article, fields, translation)

        article_id = existing.get("id")
        if not isinstance(article_id, int) or isinstance(article_id, bool):
            LOGGER.error(
                "Matched remote article for slug: %s has no numeric id",
                article.slug,
                extra={"event": "sync.failed", "slug": article.slug},
            )
            return SyncOutcome(
                slug=article.slug,
                status=SyncOutcome.STATUS_FAILED,
                reason="matched remote article has no numeric id",
            )

        if self._is_unchanged(existing, article, digest):
            LOGGER.info(
                "Skipping article with id: %s and slug: %s, content has not changed",
                article_id,
                article.slug,
                extra={"event": "sync.skipped", "slug": article.slug, "article_id": article_id},
            )
            return SyncOutcome(
                slug=article.slug, status=SyncOutcome.STATUS_SKIPPED, article_id=article_id
            )
        return self._update(article, article_id, fields, translation)

    def _is_unchanged(
        self, existing: Mapping[str, Any], article: ArticleAttributes, digest: str
    ) -> bool:
        # Remote promoted/comments_disabled are compared as well as the digest;
        # an unset local comments_disabled matches any remote value.
        metadata = self._codec.extract(existing.get("body"))
        current_digest = metadata.digest if metadata is not None else None
        return (
            current_digest == digest
            and existing.get("promoted") == article.promoted
            and (
                article.comments_disabled is None
                or existing.get("comments_disabled") == article.comments_disabled
            )
        )

    def _create(
        self,
        article: ArticleAttributes,
        fields: Mapping[str, Any],
        translation: Mapping[str, Any],
    ) -> SyncOutcome:
        LOGGER.info(
            "Creating a new article for slug: %s",
            article.slug,
            extra={"event": "sync.create", "slug": article.slug, "article": dict(fields), "title": article.title},
        )
        if self._dry_run:
            return SyncOutcome(
                slug=article.slug, status=SyncOutcome.STATUS_CREATED, reason=DRY_RUN_REASON
            )

        article_id = self._guarded(
            self._api.create_article,
            {**fields, **translation},
            notify_subscribers=self._publish.notify_subscribers,
        )
        if article_id is None:
            LOGGER.error(
                "Unable to create article with slug: %s",
                article.slug,
                extra={"event": "sync.failed", "slug": article.slug},
            )
            return SyncOutcome(
                slug=article.slug,
                status=SyncOutcome.STATUS_FAILED,
                reason="article creation request failed",
            )

        LOGGER.info(
            "Successfully created a new article with id: %s and slug: %s",
            article_id,
            article.slug,
            extra={"event": "sync.created", "slug": article.slug, "article_id": article_id},
        )
        return SyncOutcome(slug=article.slug, status=SyncOutcome.STATUS_CREATED, article_id=article_id)

    def _update(
        self,
        article: ArticleAttributes,
        article_id: int,
        fields: Mapping[str, Any],
        translation: Mapping[str, Any],
    ) -> SyncOutcome:
        LOGGER.info(
            "Updating article id: %s and slug: %s",
            article_id,
            article.slug,
            extra={
                "event": "sync.update",
                "slug": article.slug,
                "article_id": article_id,
                "article": dict(fields),
                "title": article.title,
            },
        )
        if self._dry_run:
            return SyncOutcome(
                slug=article.slug,
                status=SyncOutcome.STATUS_UPDATED,
                article_id=article_id,
                reason=DRY_RUN_REASON,
            )

        # The translation goes first; the article itself is only touched once it succeeded.
        if self._guarded(self._api.update_translation, article_id, translation) is None:
            LOGGER.error(
                "Unable to update translations for the article with id: %s and slug: %s",
                article_id,
                article.slug,
                extra={"event": "sync.failed", "slug": article.slug, "article_id": article_id},
            )
            return SyncOutcome(
                slug=article.slug,
                status=SyncOutcome.STATUS_FAILED,
                article_id=article_id,
                reason="translation update request failed",
            )

        if self._guarded(self._api.update_article, article_id, fields) is None:
            LOGGER.error(
                "Partial update: translations of the article with id: %s and slug: %s were "
                "updated but the article attributes were not",
                article_id,
                article.slug,
                extra={"event": "sync.partial_update", "slug": article.slug, "article_id": article_id},
            )
            return SyncOutcome(
                slug=article.slug,
                status=SyncOutcome.STATUS_FAILED,
                article_id=article_id,
                reason="partial update: article update request failed after translation update",
            )

        LOGGER.info(
            "Successfully updated the article with id: %s and slug: %s",
            article_id,
            article.slug,
            extra={"event": "sync.updated", "slug": article.slug, "article_id": article_id},
        )
        return SyncOutcome(slug=article.slug, status=SyncOutcome.STATUS_UPDATED, article_id=article_id)

    def _guarded(self, call: Callable[..., int | None], *args: Any, **kwargs: Any) -> int | None:
        try:
            return call(*args, **kwargs)
        except ZendeskApiError as exc:
            LOGGER.error("Unexpected Zendesk response: %s", exc, extra={"event": "sync.bad_response"})
            return None
