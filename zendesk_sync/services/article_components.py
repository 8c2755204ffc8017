"""Components that shape the published body of an article."""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any, Mapping

from zendesk_sync.services.article_models import MetadataBlock

METADATA_PREFIX = "<!-- METADATA! "
METADATA_SUFFIX = " !METADATA -->"

_METADATA_LINE_PATTERN = re.compile(
    re.escape(METADATA_PREFIX) + r"(?P<json>\{.*\})" + re.escape(METADATA_SUFFIX)
)

# Order in which fields enter the fingerprint. Unknown write fields follow, sorted by name.
DIGEST_FIELD_ORDER = (
    "label_names",
    "position",
    "promoted",
    "comments_disabled",
    "author_id",
    "title",
    "content",
    "user_segment_id",
    "permission_group_id",
)


class MetadataCodec:
    """Embeds and recovers the tracking block stored at the end of a body."""

    def embed(self, body: str, metadata: MetadataBlock | Mapping[str, Any]) -> str:
        """
        Append a metadata block to ``body``.

        ``body`` must be the authored content; passing a body that already
        carries a block produces two blocks, only the last of which is read
        back by :meth:`extract`.
        """
        if isinstance(metadata, MetadataBlock):
            payload = metadata.as_dict()
        else:
            payload = {key: metadata[key] for key in ("slug", "digest") if key in metadata}
        encoded = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return f"{body}\n{METADATA_PREFIX}{encoded}{METADATA_SUFFIX}"

    def extract(self, body: str | None) -> MetadataBlock | None:
        """Return the block anchored at the end of ``body``, or ``None``."""
        if not isinstance(body, str):
            return None
        stripped = body.rstrip()
        if not stripped.endswith(METADATA_SUFFIX):
            return None

        last_line = stripped.rsplit("\n", 1)[-1].strip()
        match = _METADATA_LINE_PATTERN.fullmatch(last_line)
        if match is None:
            return None

        try:
            data = json.loads(match.group("json"))
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

        slug = data.get("slug")
        digest = data.get("digest")
        block = MetadataBlock(
            slug=slug if isinstance(slug, str) else None,
            digest=digest if isinstance(digest, str) else None,
        )
        if block.slug is None and block.digest is None:
            return None
        return block


class DigestComputer:
    """Fingerprints the fields that decide whether a remote write is needed."""

    def compute(
        self,
        write_fields: Mapping[str, Any],
        title: str,
        content: str,
        user_segment_id: int,
        permission_group_id: int,
    ) -> str:
        combined = dict(write_fields)
        combined.update(
            {
                "title": title,
                "content": content,
                "user_segment_id": user_segment_id,
                "permission_group_id": permission_group_id,
            }
        )
        serialized = self.canonical_json(combined)
        return hashlib.md5(serialized.encode("utf-8"), usedforsecurity=False).hexdigest()

    def canonical_json(self, fields: Mapping[str, Any]) -> str:
        ordered: dict[str, Any] = {}
        for key in DIGEST_FIELD_ORDER:
            if key in fields:
                ordered[key] = self._normalize(fields[key])
        for key in sorted(set(fields) - set(DIGEST_FIELD_ORDER)):
            ordered[key] = self._normalize(fields[key])
        return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False)

    def _normalize(self, value: Any) -> Any:
        if isinstance(value, (tuple, list)):
            return [self._normalize(item) for item in value]
        if isinstance(value, Mapping):
            return {key: self._normalize(value[key]) for key in sorted(value)}
        return value
