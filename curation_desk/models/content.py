"""Content models for newsletter curation."""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

IssueType = Literal["urgent", "evergreen"]
IssueStatus = Literal["draft", "scheduled", "published", "archived"]
VideoStatus = Literal["new", "favorited", "archived"]
CampaignStatus = Literal["draft", "scheduled", "sent", "archived"]
PublishAction = Literal["draft", "schedule", "send"]

ISSUE_TYPES = ("urgent", "evergreen")


class CuratedVideo(BaseModel):
    """A curated podcast episode published on YouTube."""

    id: str = Field(..., description="Unique identifier")
    title: str = Field(..., description="Video title")
    channel_name: Optional[str] = Field(None, description="YouTube channel name")
    video_url: str = Field(..., description="Canonical video URL")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail URL")
    duration_seconds: Optional[int] = Field(None, ge=0, description="Duration")
    published_at: datetime = Field(..., description="Publication time")
    status: VideoStatus = Field("favorited", description="Library status")


class ItemFields(BaseModel):
    """Optional curation metadata attached to a newsletter item."""

    model_config = ConfigDict(extra="forbid")

    podcast_name: Optional[str] = None
    guest_name: Optional[str] = None
    actor: Optional[str] = None
    topics: Optional[str] = None
    signals: Optional[List[str]] = None
    nuggets: Optional[List[str]] = None
    framework: Optional[str] = None
    why_now: Optional[str] = None
    why_compounds: Optional[str] = None
    listen_if: Optional[str] = None
    skip_if: Optional[str] = None
    relevance_horizon: Optional[str] = None

    def merged(self, partial: Dict[str, Any]) -> "ItemFields":
        """Return a copy with ``partial`` shallow-merged over the stored values."""
        data = self.model_dump(exclude_unset=True)
        data.update(partial)
        return ItemFields.model_validate(data)


class NewsletterIssue(BaseModel):
    """One edition of the urgent or evergreen newsletter."""

    id: str = Field(..., description="Unique identifier")
    type: IssueType = Field(..., description="Newsletter type")
    issue_date: Optional[date] = Field(None, description="Issue date")
    status: IssueStatus = Field("draft", description="Lifecycle status")
    title: Optional[str] = Field(None, description="Internal title")
    subject: Optional[str] = Field(None, description="Email subject line")
    preview_text: Optional[str] = Field(None, description="Email preview text")
    scheduled_at: Optional[datetime] = Field(None, description="Scheduled send time")
    esp_campaign_id: Optional[str] = Field(None, description="External campaign ID")


class NewsletterItem(BaseModel):
    """Assignment of one curated video to one issue at one position."""

    id: str = Field(..., description="Unique identifier")
    issue_id: str = Field(..., description="Owning issue")
    video_id: str = Field(..., description="Referenced video")
    position: int = Field(..., ge=0, description="Zero-based display order")
    fields: ItemFields = Field(default_factory=ItemFields)
    video: CuratedVideo = Field(..., description="Joined video display fields")


class Campaign(BaseModel):
    """Campaign as reported by the email service provider."""

    id: str
    status: CampaignStatus
    web_url: Optional[str] = None
    scheduled_at: Optional[datetime] = None


class CampaignPayload(BaseModel):
    """Rendered content submitted to the email service provider."""

    subject: str
    preview_text: Optional[str] = None
    html_content: str
    text_content: Optional[str] = None
    send_at: Optional[datetime] = None


class PublishOptions(BaseModel):
    """What the caller asked for when publishing."""

    send_at: Optional[datetime] = None
    send_now: bool = False


class PublishPlan(BaseModel):
    """Action the publisher will take against the ESP."""

    action: PublishAction
    send_at: Optional[datetime] = None


class PublishResult(BaseModel):
    """Outcome of a publish call."""

    issue: NewsletterIssue
    campaign: Campaign
    plan: PublishPlan
