from datetime import date, datetime, timezone

import pytest

from curation_desk.core.interfaces import PlacementPersistence, VideoPool
from curation_desk.core.placement import PlacementStore
from curation_desk.models.content import (
    CuratedVideo,
    ItemFields,
    NewsletterIssue,
    NewsletterItem,
)


class FakePersistence(PlacementPersistence, VideoPool):
    """In-memory backend that records every write it receives."""

    def __init__(self, issues=None, items=None, videos=None):
        self.issues = dict(issues or {})
        self.items = list(items or [])
        self.videos = list(videos or [])
        self.calls = []
        self.fail_on = set()
        self._next_id = 0

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def call_names(self):
        return [call[0] for call in self.calls]

    async def insert_item(self, issue_id, video_id, position):
        self._record("insert_item", issue_id, video_id, position)
        self._next_id += 1
        return f"item-new-{self._next_id}"

    async def move_item(self, item_id, issue_id, position):
        self._record("move_item", item_id, issue_id, position)

    async def delete_item(self, item_id):
        self._record("delete_item", item_id)

    async def update_positions(self, updates):
        self._record("update_positions", list(updates))

    async def update_item_fields(self, item_id, fields):
        self._record("update_item_fields", item_id, fields)

    async def update_issue(self, issue_id, changes):
        self._record("update_issue", issue_id, dict(changes))

    async def list_items(self, issue_ids):
        wanted = set(issue_ids)
        return [item for item in self.items if item.issue_id in wanted]

    async def get_or_create_draft_issues(self):
        return dict(self.issues)

    async def list_favorited_videos(self):
        return list(self.videos)


@pytest.fixture
def make_video():
    def _make(video_id, channel_name="Acquired", **kwargs):
        data = {
            "id": video_id,
            "title": f"Episode {video_id}",
            "channel_name": channel_name,
            "video_url": f"https://www.youtube.com/watch?v={video_id}",
            "published_at": datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
        }
        data.update(kwargs)
        return CuratedVideo(**data)

    return _make


@pytest.fixture
def make_item():
    def _make(item_id, issue_id, video, position=0, **fields):
        return NewsletterItem(
            id=item_id,
            issue_id=issue_id,
            video_id=video.id,
            position=position,
            fields=ItemFields(**fields),
            video=video,
        )

    return _make


@pytest.fixture
def issues():
    return {
        "urgent": NewsletterIssue(
            id="issue-urgent", type="urgent", issue_date=date(2025, 3, 3)
        ),
        "evergreen": NewsletterIssue(
            id="issue-evergreen", type="evergreen", issue_date=date(2025, 3, 3)
        ),
    }


@pytest.fixture
def videos(make_video):
    return [make_video(f"vid{letter}") for letter in "ABCDE"]


@pytest.fixture
def persistence(issues, videos, make_item):
    """Urgent issue holds A, B, C; evergreen holds D; E is unplaced."""
    a, b, c, d, _ = videos
    items = [
        make_item("item-a", "issue-urgent", a, 0),
        make_item("item-b", "issue-urgent", b, 1),
        make_item("item-c", "issue-urgent", c, 2),
        make_item("item-d", "issue-evergreen", d, 0),
    ]
    return FakePersistence(issues=issues, items=items, videos=videos)


@pytest.fixture
def store(persistence):
    return PlacementStore(
        persistence, persistence.issues.values(), persistence.items
    )


@pytest.fixture
def make_persistence():
    return FakePersistence
