"""Data models for the article synchronization workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_POSITION = 1000000


@dataclass(frozen=True, slots=True)
class Author:
    """Author declared in an article sidecar, used to look up a remote user."""

    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    tags: tuple[str, ...] = ()

    @property
    def cache_key(self) -> str | None:
        return self.email or self.name


@dataclass(frozen=True, slots=True)
class ArticleAttributes:
    """Validated attributes of a single local article."""

    slug: str
    title: str
    content: str
    remote_id: int | None = None
    author: Author | None = None
    tags: tuple[str, ...] = ()
    position: int = DEFAULT_POSITION
    promoted: bool = False
    comments_disabled: bool | None = None


@dataclass(frozen=True, slots=True)
class MetadataBlock:
    """Tracking payload embedded at the end of a published body."""

    slug: str | None
    digest: str | None = None

    def as_dict(self) -> dict[str, str]:
        data: dict[str, str] = {}
        if self.slug is not None:
            data["slug"] = self.slug
        if self.digest is not None:
            data["digest"] = self.digest
        return data


@dataclass(slots=True)
class SyncOutcome:
    """Terminal state of one article after a run."""

    slug: str
    status: str
    article_id: int | None = None
    reason: str | None = None

    STATUS_CREATED = "created"
    STATUS_UPDATED = "updated"
    STATUS_SKIPPED = "skipped"
    STATUS_FAILED = "failed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "status": self.status,
            "article_id": self.article_id,
            "reason": self.reason,
        }


@dataclass(slots=True)
class SyncReport:
    """Outcomes of a synchronization run, in processing order."""

    outcomes: list[SyncOutcome] = field(default_factory=list)

    def add(self, outcome: SyncOutcome) -> SyncOutcome:
        self.outcomes.append(outcome)
        return outcome

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def created(self) -> int:
        return self.count(SyncOutcome.STATUS_CREATED)

    @property
    def updated(self) -> int:
        return self.count(SyncOutcome.STATUS_UPDATED)

    @property
    def skipped(self) -> int:
        return self.count(SyncOutcome.STATUS_SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(SyncOutcome.STATUS_FAILED)

    def summary(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "articles": [outcome.to_dict() for outcome in self.outcomes],
        }
