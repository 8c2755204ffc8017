"""Persistence helpers for synchronization reports."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from zendesk_sync.services.article_models import SyncReport


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def save_report(report: SyncReport, path: Path, *, dry_run: bool = False) -> Path:
    """Write the outcome of a run as JSON and return the written path."""
    data = {"finished_at": _now(), "dry_run": dry_run, **report.to_dict()}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


__all__ = ["save_report"]
