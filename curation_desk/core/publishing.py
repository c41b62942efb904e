"""Publishing newsletter issues through the email service provider.

The issue status is never trusted as-is: every publish recomputes the target
status from what the caller asked for and what the ESP reports about the
campaign.
"""

import logging
from typing import Optional, Sequence

from curation_desk.core.exceptions import CampaignFailure, NotPublishable
from curation_desk.core.interfaces import EspProvider
from curation_desk.core.placement import PlacementStore
from curation_desk.core.renderer import render_newsletter_html, render_newsletter_text
from curation_desk.models.content import (
    Campaign,
    CampaignPayload,
    CampaignStatus,
    IssueStatus,
    NewsletterIssue,
    NewsletterItem,
    PublishAction,
    PublishOptions,
    PublishPlan,
    PublishResult,
)

logger = logging.getLogger(__name__)


def resolve_publish_plan(
    options: Optional[PublishOptions], issue: NewsletterIssue
) -> PublishPlan:
    """Pick send, schedule or draft.

    Sending now wins over any schedule. An explicit ``send_at`` wins over the
    time already stored on the issue, which is reused if nothing else is given.
    """
    if options and options.send_now:
        return PublishPlan(action="send")

    send_at = (options.send_at if options else None) or issue.scheduled_at
    if send_at:
        return PublishPlan(action="schedule", send_at=send_at)

    return PublishPlan(action="draft")


def resolve_issue_status(
    action: PublishAction, campaign_status: Optional[CampaignStatus] = None
) -> IssueStatus:
    """Map a publish action and the campaign's reported status to an issue status."""
    if action == "send":
        return "published"
    if campaign_status == "sent":
        return "published"
    if campaign_status == "archived":
        return "archived"
    if action == "schedule" or campaign_status == "scheduled":
        return "scheduled"
    return "draft"


def assert_publish_ready(
    issue: NewsletterIssue, items: Sequence[NewsletterItem]
) -> None:
    if not issue.subject or not issue.subject.strip():
        raise NotPublishable("Missing subject line.")
    if not items:
        raise NotPublishable("Issue has no items.")


def build_campaign_payload(
    issue: NewsletterIssue,
    items: Sequence[NewsletterItem],
    plan: Optional[PublishPlan] = None,
) -> CampaignPayload:
    send_at = plan.send_at if plan and plan.action == "schedule" else None
    return CampaignPayload(
        subject=issue.subject or "",
        preview_text=issue.preview_text or None,
        html_content=render_newsletter_html(issue, items),
        text_content=render_newsletter_text(issue, items),
        send_at=send_at,
    )


class IssuePublisher:
    """Pushes an issue from the placement store to the ESP and records the result."""

    def __init__(self, store: PlacementStore, esp: EspProvider):
        self._store = store
        self._esp = esp

    async def publish(
        self, issue_id: str, options: Optional[PublishOptions] = None
    ) -> PublishResult:
        issue = self._store.issue_by_id(issue_id)
        items = self._store.items(issue_id)
        assert_publish_ready(issue, items)

        plan = resolve_publish_plan(options, issue)
        if plan.action == "schedule" and not self._esp.is_schedulable(plan.send_at):
            raise NotPublishable(
                f"Send time {plan.send_at} is too soon for {self._esp.name}."
            )

        payload = build_campaign_payload(issue, items, plan)
        logger.info(
            f"Publishing {issue.type} issue {issue_id} via {self._esp.name} "
            f"(action: {plan.action})"
        )

        try:
            campaign = await self._upsert_campaign(issue, payload)
        except Exception as e:
            logger.error(f"Campaign error for issue {issue_id}: {e}")
            raise CampaignFailure(f"Publishing failed: {e}") from e

        try:
            campaign = await self._deliver_campaign(campaign, plan)
        except Exception as e:
            logger.error(f"Campaign {campaign.id} error for issue {issue_id}: {e}")
            if campaign.id != issue.esp_campaign_id:
                # Link the new campaign so a retry updates it.
                await self._store.record_publication(
                    issue_id,
                    status=resolve_issue_status("draft", campaign.status),
                    esp_campaign_id=campaign.id,
                )
            raise CampaignFailure(f"Publishing failed: {e}") from e

        status = resolve_issue_status(plan.action, campaign.status)
        scheduled_at = plan.send_at if plan.action == "schedule" else issue.scheduled_at
        updated = await self._store.record_publication(
            issue_id,
            status=status,
            esp_campaign_id=campaign.id,
            scheduled_at=scheduled_at,
        )
        logger.info(f"Issue {issue_id} is now {status} (campaign {campaign.id})")
        return PublishResult(issue=updated, campaign=campaign, plan=plan)

    async def sync_status(self, issue_id: str) -> NewsletterIssue:
        """Refresh the issue status from the campaign the ESP holds for it."""
        issue = self._store.issue_by_id(issue_id)
        if not issue.esp_campaign_id:
            raise NotPublishable("Issue has not been published yet.")

        try:
            campaign = await self._esp.get_campaign(issue.esp_campaign_id)
        except Exception as e:
            logger.error(f"Campaign lookup failed for issue {issue_id}: {e}")
            raise CampaignFailure(f"Could not read campaign: {e}") from e

        action: PublishAction = "schedule" if issue.scheduled_at else "draft"
        status = resolve_issue_status(action, campaign.status)
        if status == issue.status:
            return issue
        return await self._store.record_publication(issue_id, status=status)

    async def _upsert_campaign(
        self, issue: NewsletterIssue, payload: CampaignPayload
    ) -> Campaign:
        if issue.esp_campaign_id:
            return await self._esp.update_campaign(issue.esp_campaign_id, payload)
        return await self._esp.create_campaign(payload)

    async def _deliver_campaign(self, campaign: Campaign, plan: PublishPlan) -> Campaign:
        if plan.action == "schedule" and campaign.status == "draft":
            campaign = await self._esp.schedule_campaign(campaign.id, plan.send_at)
        elif plan.action == "send" and campaign.status != "sent":
            sent = await self._esp.send_campaign(campaign.id)
            campaign = sent or campaign.model_copy(update={"status": "sent"})
        return campaign
