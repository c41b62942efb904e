"""Interfaces for the collaborators the curation core depends on."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from curation_desk.models.content import (
    Campaign,
    CampaignPayload,
    CuratedVideo,
    ItemFields,
    NewsletterIssue,
    NewsletterItem,
)


class PlacementPersistence(ABC):
    """Storage backend for issues and their newsletter items.

    Every call reports success by returning and failure by raising. Calls are
    independent: nothing here promises atomicity across several writes.
    """

    @abstractmethod
    async def insert_item(self, issue_id: str, video_id: str, position: int) -> str:
        """Insert a new item row and return its id."""
        pass

    @abstractmethod
    async def move_item(self, item_id: str, issue_id: str, position: int) -> None:
        """Re-own an item to ``issue_id`` at ``position``."""
        pass

    @abstractmethod
    async def delete_item(self, item_id: str) -> None:
        pass

    @abstractmethod
    async def update_positions(self, updates: Iterable[Tuple[str, int]]) -> None:
        """Write a batch of ``(item_id, position)`` pairs."""
        pass

    @abstractmethod
    async def update_item_fields(self, item_id: str, fields: ItemFields) -> None:
        pass

    @abstractmethod
    async def update_issue(self, issue_id: str, changes: Dict[str, Any]) -> None:
        """Write scalar issue columns, e.g. ``{"subject": "..."}``."""
        pass

    @abstractmethod
    async def list_items(self, issue_ids: Iterable[str]) -> List[NewsletterItem]:
        """Items of the given issues ordered by position."""
        pass

    @abstractmethod
    async def get_or_create_draft_issues(self) -> Dict[str, NewsletterIssue]:
        """Return the open draft issue for each newsletter type, keyed by type."""
        pass


class VideoPool(ABC):
    """Read-only source of videos eligible for placement."""

    @abstractmethod
    async def list_favorited_videos(self) -> List[CuratedVideo]:
        """Favorited videos, newest first."""
        pass


class EspProvider(ABC):
    """Email service provider that turns payloads into campaigns."""

    @property
    @abstractmethod
    def name(self) -> str:
        """A unique name for this provider, e.g., 'mailchimp'."""
        pass

    def is_schedulable(self, send_at: datetime) -> bool:
        """Whether the provider accepts ``send_at`` as a schedule time."""
        return True

    @abstractmethod
    async def create_campaign(self, payload: CampaignPayload) -> Campaign:
        pass

    @abstractmethod
    async def update_campaign(
        self, campaign_id: str, payload: CampaignPayload
    ) -> Campaign:
        pass

    @abstractmethod
    async def schedule_campaign(
        self, campaign_id: str, send_at: datetime
    ) -> Campaign:
        pass

    @abstractmethod
    async def get_campaign(self, campaign_id: str) -> Campaign:
        pass

    @abstractmethod
    async def send_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Send immediately. Providers that cannot report back return None."""
        pass
