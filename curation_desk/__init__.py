"""Curation desk for the urgent and evergreen podcast newsletters."""

from .core.drafts import build_draft, build_evergreen_draft, build_urgent_draft
from .core.ordering import insert_at, reorder
from .core.placement import PlacementStore
from .core.publishing import (
    IssuePublisher,
    resolve_issue_status,
    resolve_publish_plan,
)

__version__ = "0.1.0"

__all__ = [
    "PlacementStore",
    "IssuePublisher",
    "build_draft",
    "build_urgent_draft",
    "build_evergreen_draft",
    "insert_at",
    "reorder",
    "resolve_issue_status",
    "resolve_publish_plan",
]
