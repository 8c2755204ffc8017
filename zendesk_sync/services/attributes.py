"""Loads local articles and their YAML sidecars into validated attributes."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from zendesk_sync.services.article_models import DEFAULT_POSITION, ArticleAttributes, Author
from zendesk_sync.utils.logging import get_logger

LOGGER = get_logger(__name__)

SOURCE_SUFFIX = ".html"
METADATA_SUFFIXES = (".yml", ".yaml")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_TRUE_STRINGS = {"true", "yes", "on", "1"}
_INTEGER_PATTERN = re.compile(r"-?[0-9]+")


def discover_sources(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into an ordered list of HTML sources."""
    found: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        if path.is_dir():
            candidates = sorted(p for p in path.rglob(f"*{SOURCE_SUFFIX}") if p.is_file())
        elif path.is_file() and path.suffix.lower() == SOURCE_SUFFIX:
            candidates = [path]
        else:
            LOGGER.warning(
                "Ignoring source path %s: not a directory or an HTML file",
                path,
                extra={"event": "load.ignored", "path": str(path)},
            )
            continue
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            found.append(candidate)
    return found


class AttributeLoader:
    """Reads each source file with its metadata companion and validates it.

    Problems with a single article never raise: the article is dropped and a
    warning explains why it cannot be published.
    """

    def __init__(self, *, comments_disabled_default: bool | None = None) -> None:
        self._comments_disabled_default = comments_disabled_default

    def load(self, sources: Iterable[Path]) -> list[ArticleAttributes]:
        articles: list[ArticleAttributes] = []
        for source in sources:
            article = self.load_one(source)
            if article is not None:
                articles.append(article)
        return articles

    def companion_for(self, source: Path) -> Path | None:
        for suffix in METADATA_SUFFIXES:
            candidate = source.with_suffix(suffix)
            if candidate.is_file():
                return candidate
        return None

    def load_one(self, source: Path) -> ArticleAttributes | None:
        metadata_path = self.companion_for(source)
        if metadata_path is None:
            expected = source.with_suffix(METADATA_SUFFIXES[0]).absolute()
            LOGGER.warning(
                "Missing YAML file: %s, unable to publish %s",
                expected,
                source.name,
                extra={"event": "load.skipped", "path": str(source)},
            )
            return None

        LOGGER.debug("Loading %s", metadata_path)
        try:
            attributes = yaml.safe_load(metadata_path.read_text(encoding="utf-8"))
            content = source.read_text(encoding="utf-8")
        except (OSError, ValueError, yaml.YAMLError) as exc:
            LOGGER.warning(
                "Error while reading %s, unable to publish %s: %s",
                metadata_path.absolute(),
                source.name,
                exc,
                extra={"event": "load.skipped", "path": str(source)},
            )
            return None

        if not isinstance(attributes, Mapping):
            LOGGER.warning(
                "YAML file %s must contain a mapping, unable to publish %s",
                metadata_path.absolute(),
                source.name,
                extra={"event": "load.skipped", "path": str(source)},
            )
            return None

        return self.from_mapping(
            attributes,
            content,
            metadata_path=str(metadata_path.absolute()),
            file_name=source.name,
        )

    def from_mapping(
        self,
        attributes: Mapping[str, Any],
        content: str,
        *,
        metadata_path: str = "",
        file_name: str = "",
    ) -> ArticleAttributes | None:
        LOGGER.debug("Document attributes in the YAML file: %s", dict(attributes))
        slug = self._mandatory_string(attributes, "slug", metadata_path, file_name)
        title = self._mandatory_string(attributes, "title", metadata_path, file_name)
        if slug is None or title is None:
            return None

        comments_disabled = _as_bool(attributes.get("comments_disabled"))
        if comments_disabled is None:
            comments_disabled = self._comments_disabled_default

        return ArticleAttributes(
            slug=slug,
            title=title,
            content=content,
            remote_id=self._remote_id(attributes, metadata_path),
            author=self._author(attributes, metadata_path),
            tags=_string_list(attributes.get("tags")),
            position=self._position(attributes),
            promoted=bool(_as_bool(attributes.get("promoted"))),
            comments_disabled=comments_disabled,
        )

    def _mandatory_string(
        self, attributes: Mapping[str, Any], name: str, metadata_path: str, file_name: str
    ) -> str | None:
        value = attributes.get(name)
        if value is None:
            problem = f"No {name} found in: {metadata_path}"
        elif not isinstance(value, str):
            problem = f"{name} must be a String in: {metadata_path}"
        elif not value.strip():
            problem = f"{name} must not be blank in: {metadata_path}"
        else:
            return value
        LOGGER.warning(
            "%s, unable to publish %s",
            problem,
            file_name,
            extra={"event": "load.skipped", "field": name},
        )
        return None

    def _position(self, attributes: Mapping[str, Any]) -> int:
        value = attributes.get("position")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return DEFAULT_POSITION

    def _remote_id(self, attributes: Mapping[str, Any], metadata_path: str) -> int | None:
        value = attributes.get("zendesk_id")
        if value is None or isinstance(value, bool):
            return None
        remote_id: int | None = None
        if isinstance(value, int):
            remote_id = value
        elif isinstance(value, float) and value.is_integer():
            remote_id = int(value)
        elif isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value.strip()):
            remote_id = int(value.strip())

        if remote_id is None or not _INT64_MIN <= remote_id <= _INT64_MAX:
            LOGGER.warning(
                "Ignoring zendesk_id %r in: %s, expected a 64-bit integer",
                value,
                metadata_path,
                extra={"event": "load.invalid_field", "field": "zendesk_id"},
            )
            return None
        return remote_id

    def _author(self, attributes: Mapping[str, Any], metadata_path: str) -> Author | None:
        value = attributes.get("author")
        if value is None:
            return None
        if not isinstance(value, Mapping):
            LOGGER.warning(
                "Ignoring author in: %s, expected a mapping",
                metadata_path,
                extra={"event": "load.invalid_field", "field": "author"},
            )
            return None
        return Author(
            name=_optional_string(value.get("name")),
            first_name=_optional_string(value.get("first_name")),
            last_name=_optional_string(value.get("last_name")),
            email=_optional_string(value.get("email")),
            tags=_string_list(value.get("tags")),
        )


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return None


def _optional_string(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    items: list[str] = []
    for item in value:
        if isinstance(item, str) and item not in items:
            items.append(item)
    return tuple(items)
