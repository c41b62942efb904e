"""Tests for the Mailchimp ESP client."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from curation_desk.clients.esp import get_esp_provider
from curation_desk.clients.mailchimp import (
    MailchimpClient,
    map_campaign_response,
    map_campaign_status,
)
from curation_desk.core.exceptions import ConfigurationError, EspError
from curation_desk.models.content import CampaignPayload
from curation_desk.models.settings import Settings


@pytest.fixture
def settings():
    return Settings(
        mailchimp_api_key="0123456789abcdef-us7",
        mailchimp_list_id="list-1",
    )


@pytest.fixture
def client(settings):
    return MailchimpClient(settings)


def payload(send_at=None):
    return CampaignPayload(
        subject="Rates",
        preview_text="Three signals",
        html_content="<p>Hello</p>",
        text_content="Hello",
        send_at=send_at,
    )


@pytest.mark.parametrize(
    "status,expected",
    [
        ("save", "draft"),
        ("paused", "draft"),
        ("schedule", "scheduled"),
        ("sending", "sent"),
        ("sent", "sent"),
        ("archived", "archived"),
        ("canceled", "draft"),
    ],
)
def test_map_campaign_status(status, expected):
    assert map_campaign_status(status) == expected


def test_map_campaign_response():
    campaign = map_campaign_response(
        {
            "id": "c1",
            "status": "schedule",
            "archive_url": "https://eepurl.com/abc",
            "send_time": "2030-01-06T09:00:00+00:00",
        }
    )
    assert campaign.status == "scheduled"
    assert campaign.web_url == "https://eepurl.com/abc"
    assert campaign.scheduled_at == datetime(2030, 1, 6, 9, 0, tzinfo=timezone.utc)


def test_client_uses_derived_data_center(client):
    assert client.base_url == "https://us7.api.mailchimp.com/3.0"
    assert client.name == "mailchimp"


def test_client_requires_credentials():
    with pytest.raises(ConfigurationError):
        MailchimpClient(Settings(mailchimp_api_key=None, mailchimp_list_id="list-1"))
    with pytest.raises(ConfigurationError):
        MailchimpClient(Settings(mailchimp_api_key="key-us7", mailchimp_list_id=None))


def test_get_esp_provider(settings):
    assert isinstance(get_esp_provider(settings), MailchimpClient)

    with pytest.raises(ConfigurationError, match="Unknown ESP provider"):
        get_esp_provider(settings.model_copy(update={"esp_provider": "carrier-pigeon"}))


@pytest.mark.asyncio
async def test_create_campaign_without_schedule(client):
    with patch.object(client, "_request", new_callable=AsyncMock) as request:
        request.side_effect = [{"id": "c1", "status": "save"}, {}]

        campaign = await client.create_campaign(payload())

    assert campaign.id == "c1"
    assert campaign.status == "draft"
    create_call, content_call = request.await_args_list
    assert create_call.args[:2] == ("POST", "/campaigns")
    assert create_call.args[2]["recipients"] == {"list_id": "list-1"}
    assert create_call.args[2]["settings"]["subject_line"] == "Rates"
    assert content_call.args == (
        "PUT",
        "/campaigns/c1/content",
        {"html": "<p>Hello</p>", "plain_text": "Hello"},
    )


@pytest.mark.asyncio
async def test_create_campaign_schedules_future_send(client):
    send_at = datetime.now(timezone.utc) + timedelta(days=2)
    with patch.object(client, "_request", new_callable=AsyncMock) as request:
        request.side_effect = [{"id": "c1", "status": "save"}, {}, {}]

        campaign = await client.create_campaign(payload(send_at))

    assert campaign.status == "scheduled"
    assert campaign.scheduled_at == send_at
    schedule_call = request.await_args_list[2]
    assert schedule_call.args[:2] == ("POST", "/campaigns/c1/actions/schedule")
    assert schedule_call.args[2] == {"schedule_time": send_at.isoformat()}


@pytest.mark.asyncio
async def test_create_campaign_leaves_too_early_send_as_draft(client):
    send_at = datetime.now(timezone.utc) + timedelta(minutes=5)
    with patch.object(client, "_request", new_callable=AsyncMock) as request:
        request.side_effect = [{"id": "c1", "status": "save"}, {}]

        campaign = await client.create_campaign(payload(send_at))

    assert campaign.status == "draft"
    assert request.await_count == 2


@pytest.mark.asyncio
async def test_schedule_campaign_rejects_too_early_send(client):
    with patch.object(client, "_request", new_callable=AsyncMock) as request:
        with pytest.raises(EspError, match="at least 15 minutes"):
            await client.schedule_campaign(
                "c1", datetime.now(timezone.utc) + timedelta(minutes=1)
            )

    request.assert_not_called()


@pytest.mark.asyncio
async def test_update_campaign(client):
    with patch.object(client, "_request", new_callable=AsyncMock) as request:
        request.side_effect = [{}, {}, {"id": "c1", "status": "save"}]

        campaign = await client.update_campaign("c1", payload())

    methods = [call.args[:2] for call in request.await_args_list]
    assert methods == [
        ("PATCH", "/campaigns/c1"),
        ("PUT", "/campaigns/c1/content"),
        ("GET", "/campaigns/c1"),
    ]
    assert campaign.status == "draft"


@pytest.mark.asyncio
async def test_send_campaign(client):
    with patch.object(client, "_request", new_callable=AsyncMock) as request:
        request.side_effect = [{}, {"id": "c1", "status": "sending"}]

        campaign = await client.send_campaign("c1")

    assert request.await_args_list[0].args[:2] == ("POST", "/campaigns/c1/actions/send")
    assert campaign.status == "sent"


def test_client_sends_api_key_header(client):
    assert client.headers["Authorization"] == "apikey 0123456789abcdef-us7"


def test_is_schedulable_respects_minimum_lead(client):
    now = datetime.now(timezone.utc)
    assert client.is_schedulable(now + timedelta(hours=1))
    assert not client.is_schedulable(now + timedelta(minutes=5))
