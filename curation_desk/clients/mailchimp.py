"""Mailchimp Marketing API client for creating and sending campaigns."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import aiohttp

from curation_desk.core.exceptions import ConfigurationError, EspError
from curation_desk.core.interfaces import EspProvider
from curation_desk.models.content import Campaign, CampaignPayload, CampaignStatus

logger = logging.getLogger(__name__)

_STATUS_MAP: Dict[str, CampaignStatus] = {
    "save": "draft",
    "paused": "draft",
    "schedule": "scheduled",
    "sending": "sent",
    "sent": "sent",
    "archived": "archived",
}


def map_campaign_status(status: str) -> CampaignStatus:
    """Translate Mailchimp's campaign status into the ESP-neutral status."""
    return _STATUS_MAP.get(status, "draft")


def map_campaign_response(data: Dict[str, Any]) -> Campaign:
    return Campaign(
        id=data["id"],
        status=map_campaign_status(data.get("status", "")),
        web_url=data.get("archive_url") or None,
        scheduled_at=data.get("send_time") or None,
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MailchimpClient(EspProvider):
    """Client for the Mailchimp Marketing API (v3.0)."""

    def __init__(self, settings):
        """Initialize Mailchimp client.

        Args:
            settings: Settings instance with the Mailchimp credentials

        Raises:
            ConfigurationError: if the key, data center or audience is missing
        """
        if not settings.mailchimp_api_key or not settings.mailchimp_server_prefix:
            raise ConfigurationError(
                "Missing MAILCHIMP_API_KEY or MAILCHIMP_SERVER_PREFIX"
            )
        if not settings.mailchimp_list_id:
            raise ConfigurationError("Missing MAILCHIMP_LIST_ID")

        self.base_url = f"https://{settings.mailchimp_server_prefix}.api.mailchimp.com/3.0"
        self.list_id = settings.mailchimp_list_id
        self.from_name = settings.mailchimp_from_name
        self.reply_to = settings.mailchimp_reply_to
        self.min_schedule_lead = timedelta(
            minutes=settings.mailchimp_min_schedule_minutes
        )
        self.headers = {
            "Authorization": f"apikey {settings.mailchimp_api_key}",
            "Content-Type": "application/json",
        }
        # Timeout configuration
        self.timeout = settings.mailchimp_timeout

    @property
    def name(self) -> str:
        return "mailchimp"

    async def create_campaign(self, payload: CampaignPayload) -> Campaign:
        """Create a regular campaign, set its content and schedule it if asked."""
        data = await self._request(
            "POST",
            "/campaigns",
            {
                "type": "regular",
                "recipients": {"list_id": self.list_id},
                "settings": {
                    "subject_line": payload.subject,
                    "preview_text": payload.preview_text or "",
                    "from_name": self.from_name,
                    "reply_to": self.reply_to,
                },
            },
        )
        campaign_id = data["id"]
        logger.info(f"Created Mailchimp campaign {campaign_id}: {payload.subject}")
        await self._set_content(campaign_id, payload)

        if payload.send_at:
            if self.is_schedulable(payload.send_at):
                await self._schedule(campaign_id, payload.send_at)
                return Campaign(
                    id=campaign_id,
                    status="scheduled",
                    web_url=data.get("archive_url") or None,
                    scheduled_at=payload.send_at,
                )
            logger.warning(
                f"Send time {payload.send_at} is too soon to schedule; "
                f"campaign {campaign_id} left as a draft"
            )

        return map_campaign_response(data)

    async def update_campaign(
        self, campaign_id: str, payload: CampaignPayload
    ) -> Campaign:
        await self._request(
            "PATCH",
            f"/campaigns/{campaign_id}",
            {
                "settings": {
                    "subject_line": payload.subject,
                    "preview_text": payload.preview_text or "",
                }
            },
        )
        await self._set_content(campaign_id, payload)
        logger.info(f"Updated Mailchimp campaign {campaign_id}")
        return await self.get_campaign(campaign_id)

    async def schedule_campaign(self, campaign_id: str, send_at: datetime) -> Campaign:
        if not self.is_schedulable(send_at):
            minutes = int(self.min_schedule_lead.total_seconds() // 60)
            raise EspError(
                f"Schedule time must be at least {minutes} minutes in the future"
            )
        await self._schedule(campaign_id, send_at)
        return await self.get_campaign(campaign_id)

    async def get_campaign(self, campaign_id: str) -> Campaign:
        data = await self._request("GET", f"/campaigns/{campaign_id}")
        return map_campaign_response(data)

    async def send_campaign(self, campaign_id: str) -> Optional[Campaign]:
        await self._request("POST", f"/campaigns/{campaign_id}/actions/send")
        logger.info(f"Sent Mailchimp campaign {campaign_id}")
        return await self.get_campaign(campaign_id)

    async def _set_content(self, campaign_id: str, payload: CampaignPayload) -> None:
        content = {"html": payload.html_content}
        if payload.text_content:
            content["plain_text"] = payload.text_content
        await self._request("PUT", f"/campaigns/{campaign_id}/content", content)

    async def _schedule(self, campaign_id: str, send_at: datetime) -> None:
        await self._request(
            "POST",
            f"/campaigns/{campaign_id}/actions/schedule",
            {"schedule_time": _as_utc(send_at).isoformat()},
        )
        logger.info(f"Scheduled Mailchimp campaign {campaign_id} for {send_at}")

    def is_schedulable(self, send_at: datetime) -> bool:
        """Mailchimp only accepts send times past the minimum lead."""
        return _as_utc(send_at) > datetime.now(timezone.utc) + self.min_schedule_lead

    async def _request(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(
                timeout=timeout, headers=self.headers
            ) as session:
                async with session.request(method, url, json=payload) as response:
                    if response.status >= 300:
                        error_detail = await response.text()
                        short_detail = (
                            error_detail[:200] + "..."
                            if len(error_detail) > 200
                            else error_detail
                        )
                        logger.error(
                            f"Mailchimp API error: {response.status} - {short_detail}"
                        )
                        raise EspError(
                            f"Mailchimp API error {response.status}: {short_detail}",
                            status=response.status,
                        )
                    if response.status == 204:
                        return {}
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Network error talking to Mailchimp: {e}")
            raise EspError(f"Network error talking to Mailchimp: {e}") from e
