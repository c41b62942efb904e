"""
SQLite storage for curated videos, newsletter issues and newsletter items.

Implements the placement persistence contract and the favorites video pool on
a single local database file. Each call opens a short-lived connection, so
nothing here is atomic across calls.
"""

import json
import logging
import sqlite3
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from curation_desk.core.interfaces import PlacementPersistence, VideoPool
from curation_desk.models.content import (
    ISSUE_TYPES,
    CuratedVideo,
    ItemFields,
    NewsletterIssue,
    NewsletterItem,
)

logger = logging.getLogger(__name__)

ISSUE_COLUMNS = (
    "issue_date",
    "status",
    "title",
    "subject",
    "preview_text",
    "scheduled_at",
    "esp_campaign_id",
)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_db(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class SQLiteStorage(PlacementPersistence, VideoPool):
    """Local SQLite database backing the curation desk.

    The async methods run their sqlite3 calls inline and block the event loop
    while they do. Calls are short and the desk is a single-user CLI.
    """

    def __init__(self, db_path: str = ".data/curation_desk.db"):
        """Initialize the storage and create tables if needed.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_database(self):
        """Initialize SQLite schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS videos (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    channel_name TEXT,
                    video_url TEXT NOT NULL,
                    thumbnail_url TEXT,
                    duration_seconds INTEGER,
                    published_at TIMESTAMP NOT NULL,
                    status TEXT NOT NULL DEFAULT 'new',
                    created_at TIMESTAMP NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS newsletter_issues (
                    id TEXT PRIMARY KEY,
                    type TEXT NOT NULL,
                    issue_date DATE,
                    status TEXT NOT NULL DEFAULT 'draft',
                    title TEXT,
                    subject TEXT,
                    preview_text TEXT,
                    scheduled_at TIMESTAMP,
                    esp_campaign_id TEXT,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS newsletter_items (
                    id TEXT PRIMARY KEY,
                    issue_id TEXT NOT NULL REFERENCES newsletter_issues(id) ON DELETE CASCADE,
                    video_id TEXT NOT NULL REFERENCES videos(id),
                    position INTEGER NOT NULL,
                    fields TEXT NOT NULL DEFAULT '{}',
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_items_issue ON newsletter_items(issue_id, position)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_videos_status ON videos(status, published_at)")
            conn.commit()

    # --- Videos ---

    async def upsert_video(self, video: CuratedVideo) -> CuratedVideo:
        """Insert or update a curated video by id."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO videos (id, title, channel_name, video_url, thumbnail_url,
                                    duration_seconds, published_at, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    channel_name = excluded.channel_name,
                    video_url = excluded.video_url,
                    thumbnail_url = excluded.thumbnail_url,
                    duration_seconds = excluded.duration_seconds,
                    published_at = excluded.published_at,
                    status = excluded.status
                """,
                (
                    video.id,
                    video.title,
                    video.channel_name,
                    video.video_url,
                    video.thumbnail_url,
                    video.duration_seconds,
                    _to_db(video.published_at),
                    video.status,
                    _utcnow(),
                ),
            )
        logger.debug(f"Stored video {video.id}: {video.title}")
        return video

    async def get_video(self, video_id: str) -> Optional[CuratedVideo]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM videos WHERE id = ?", (video_id,)).fetchone()
        return self._video_from_row(row) if row else None

    async def list_favorited_videos(self) -> List[CuratedVideo]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM videos WHERE status = 'favorited' ORDER BY published_at DESC"
            ).fetchall()
        return [self._video_from_row(row) for row in rows]

    # --- Issues ---

    async def get_or_create_draft_issues(self) -> Dict[str, NewsletterIssue]:
        placeholders = ",".join("?" for _ in ISSUE_TYPES)
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM newsletter_issues
                WHERE status = 'draft' AND type IN ({placeholders})
                ORDER BY issue_date DESC
                """,
                ISSUE_TYPES,
            ).fetchall()

            issues: Dict[str, NewsletterIssue] = {}
            for row in rows:
                if row["type"] not in issues:
                    issues[row["type"]] = self._issue_from_row(row)

            for issue_type in ISSUE_TYPES:
                if issue_type in issues:
                    continue
                now = _utcnow()
                issue = NewsletterIssue(
                    id=str(uuid.uuid4()),
                    type=issue_type,
                    issue_date=date.today(),
                    status="draft",
                )
                conn.execute(
                    """
                    INSERT INTO newsletter_issues (id, type, issue_date, status, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (issue.id, issue.type, _to_db(issue.issue_date), issue.status, now, now),
                )
                issues[issue_type] = issue
                logger.info(f"Created draft {issue_type} issue {issue.id}")

        return issues

    async def update_issue(self, issue_id: str, changes: Dict[str, Any]) -> None:
        unknown = set(changes) - set(ISSUE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown issue columns: {', '.join(sorted(unknown))}")
        if not changes:
            return

        assignments = ", ".join(f"{column} = ?" for column in changes)
        values = [_to_db(value) for value in changes.values()]
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE newsletter_issues SET {assignments}, updated_at = ? WHERE id = ?",
                (*values, _utcnow(), issue_id),
            )
        if cursor.rowcount == 0:
            raise LookupError(f"Newsletter issue {issue_id} not found")

    # --- Items ---

    async def insert_item(self, issue_id: str, video_id: str, position: int) -> str:
        item_id = str(uuid.uuid4())
        now = _utcnow()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO newsletter_items (id, issue_id, video_id, position, fields, created_at, updated_at)
                VALUES (?, ?, ?, ?, '{}', ?, ?)
                """,
                (item_id, issue_id, video_id, position, now, now),
            )
        return item_id

    async def move_item(self, item_id: str, issue_id: str, position: int) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE newsletter_items SET issue_id = ?, position = ?, updated_at = ? WHERE id = ?",
                (issue_id, position, _utcnow(), item_id),
            )
        if cursor.rowcount == 0:
            raise LookupError(f"Newsletter item {item_id} not found")

    async def delete_item(self, item_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM newsletter_items WHERE id = ?", (item_id,))

    async def update_positions(self, updates: Iterable[Tuple[str, int]]) -> None:
        now = _utcnow()
        rows = [(position, now, item_id) for item_id, position in updates]
        if not rows:
            return
        with self._connect() as conn:
            conn.executemany(
                "UPDATE newsletter_items SET position = ?, updated_at = ? WHERE id = ?",
                rows,
            )

    async def update_item_fields(self, item_id: str, fields: ItemFields) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE newsletter_items SET fields = ?, updated_at = ? WHERE id = ?",
                (json.dumps(fields.model_dump(exclude_none=True)), _utcnow(), item_id),
            )
        if cursor.rowcount == 0:
            raise LookupError(f"Newsletter item {item_id} not found")

    async def list_items(self, issue_ids: Iterable[str]) -> List[NewsletterItem]:
        issue_ids = list(issue_ids)
        if not issue_ids:
            return []

        placeholders = ",".join("?" for _ in issue_ids)
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT i.id AS item_id, i.issue_id, i.position, i.fields, v.*
                FROM newsletter_items i
                JOIN videos v ON v.id = i.video_id
                WHERE i.issue_id IN ({placeholders})
                ORDER BY i.position ASC
                """,
                issue_ids,
            ).fetchall()

        return [
            NewsletterItem(
                id=row["item_id"],
                issue_id=row["issue_id"],
                video_id=row["id"],
                position=row["position"],
                fields=ItemFields.model_validate(json.loads(row["fields"] or "{}")),
                video=self._video_from_row(row),
            )
            for row in rows
        ]

    # --- Row mapping ---

    @staticmethod
    def _video_from_row(row: sqlite3.Row) -> CuratedVideo:
        return CuratedVideo(
            id=row["id"],
            title=row["title"],
            channel_name=row["channel_name"],
            video_url=row["video_url"],
            thumbnail_url=row["thumbnail_url"],
            duration_seconds=row["duration_seconds"],
            published_at=row["published_at"],
            status=row["status"],
        )

    @staticmethod
    def _issue_from_row(row: sqlite3.Row) -> NewsletterIssue:
        return NewsletterIssue.model_validate(
            {column: row[column] for column in ("id", "type", *ISSUE_COLUMNS)}
        )
