"""Ordered placement of curated videos into the urgent and evergreen issues.

The store keeps one ordered list per issue. Positions are always re-derived
from list index, so after every structural change each list is numbered
``0..n-1`` without gaps.

Updates are optimistic: the in-memory list is replaced first, so drafts built
from the store reflect the new order immediately, and the persistence call is
made afterwards. A failed write raises ``PersistenceFailure`` but the
in-memory state is not rolled back; callers that need to reconcile can call
``refresh()``. A move across issues writes the source and destination lists
separately, so a failure part-way through can leave them inconsistent until
the next refresh.
"""

import logging
from typing import (
    Any,
    Awaitable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    TypeVar,
    Union,
)

from curation_desk.core.exceptions import (
    DuplicateAssignment,
    IssueNotFound,
    ItemNotFound,
    PersistenceFailure,
)
from curation_desk.core.interfaces import PlacementPersistence
from curation_desk.core.ordering import clamp_index, insert_at, reorder
from curation_desk.models.content import (
    CuratedVideo,
    ItemFields,
    NewsletterIssue,
    NewsletterItem,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

EDITABLE_ISSUE_FIELDS = ("issue_date", "subject", "preview_text")
PUBLICATION_ISSUE_FIELDS = ("status", "esp_campaign_id", "scheduled_at")


def renumber(items: Sequence[NewsletterItem]) -> List[NewsletterItem]:
    """Rewrite every item's position from its list index."""
    return [
        item if item.position == index else item.model_copy(update={"position": index})
        for index, item in enumerate(items)
    ]


class PlacementStore:
    """Authoritative in-memory model of which items sit in which issue."""

    def __init__(
        self,
        persistence: PlacementPersistence,
        issues: Iterable[NewsletterIssue],
        items: Iterable[NewsletterItem] = (),
    ):
        self._persistence = persistence
        self._issues: Dict[str, NewsletterIssue] = {}
        self._lists: Dict[str, List[NewsletterItem]] = {}
        self._reset(issues, items)

    @classmethod
    async def load(cls, persistence: PlacementPersistence) -> "PlacementStore":
        """Build a store from the current draft issues held by ``persistence``."""
        store = cls(persistence, [])
        await store.refresh()
        return store

    async def refresh(self) -> None:
        """Re-read issues and items from persistence, discarding local state."""
        issues = await self._persist(
            "load draft issues", self._persistence.get_or_create_draft_issues()
        )
        items = await self._persist(
            "load newsletter items",
            self._persistence.list_items([issue.id for issue in issues.values()]),
        )
        self._reset(issues.values(), items)
        logger.info(
            f"Loaded {len(items)} items across {len(self._issues)} draft issues"
        )

    def _reset(
        self, issues: Iterable[NewsletterIssue], items: Iterable[NewsletterItem]
    ) -> None:
        self._issues = {issue.id: issue for issue in issues}
        grouped: Dict[str, List[NewsletterItem]] = {
            issue_id: [] for issue_id in self._issues
        }
        for item in sorted(items, key=lambda entry: entry.position):
            if item.issue_id in grouped:
                grouped[item.issue_id].append(item)
        self._lists = {
            issue_id: renumber(entries) for issue_id, entries in grouped.items()
        }

    # --- Reads ---

    def issues(self) -> Dict[str, NewsletterIssue]:
        """Loaded issues keyed by newsletter type."""
        return {issue.type: issue for issue in self._issues.values()}

    def issue(self, issue_type: str) -> NewsletterIssue:
        for issue in self._issues.values():
            if issue.type == issue_type:
                return issue
        raise IssueNotFound(f"No draft issue loaded for type '{issue_type}'")

    def issue_by_id(self, issue_id: str) -> NewsletterIssue:
        try:
            return self._issues[issue_id]
        except KeyError:
            raise IssueNotFound(f"Issue {issue_id} is not loaded") from None

    def items(self, issue_id: str) -> List[NewsletterItem]:
        """Items of ``issue_id`` in display order."""
        return list(self._list(issue_id))

    def find_item(self, item_id: str) -> NewsletterItem:
        issue_id, index = self._locate(item_id)
        return self._lists[issue_id][index]

    def assigned_video_ids(self) -> Set[str]:
        return {item.video_id for entries in self._lists.values() for item in entries}

    def available_favorites(
        self, pool: Iterable[CuratedVideo]
    ) -> List[CuratedVideo]:
        """Videos from ``pool`` not yet placed in any loaded issue."""
        assigned = self.assigned_video_ids()
        return [video for video in pool if video.id not in assigned]

    # --- Placement operations ---

    async def add(
        self, issue_id: str, video: CuratedVideo, position: Optional[int] = None
    ) -> NewsletterItem:
        """Place ``video`` into ``issue_id``, appending unless ``position`` is given."""
        current = self._list(issue_id)
        for owner_id, entries in self._lists.items():
            if any(item.video_id == video.id for item in entries):
                raise DuplicateAssignment(video.id, owner_id)

        size = len(current)
        index = size if position is None else clamp_index(position, size)

        # Backend assigns the item id.
        item_id = await self._persist(
            "add newsletter item",
            self._persistence.insert_item(issue_id, video.id, index),
        )
        item = NewsletterItem(
            id=item_id,
            issue_id=issue_id,
            video_id=video.id,
            position=index,
            video=video,
        )
        updated = renumber(insert_at(self._list(issue_id), item, index))
        self._lists[issue_id] = updated
        logger.debug(f"Placed video {video.id} in issue {issue_id} at {index}")

        if index < size:
            await self._persist_order(issue_id, updated)
        logger.info(f"Added video {video.id} to issue {issue_id} at position {index}")
        return updated[index]

    async def remove(self, item_id: str) -> None:
        """Delete an item and close the gap it leaves."""
        issue_id, index = self._locate(item_id)
        remaining = list(self._lists[issue_id])
        del remaining[index]
        remaining = renumber(remaining)
        self._lists[issue_id] = remaining
        logger.debug(f"Removed item {item_id} from issue {issue_id}")

        await self._persist(
            "remove newsletter item", self._persistence.delete_item(item_id)
        )
        if remaining:
            await self._persist_order(issue_id, remaining)
        logger.info(f"Removed item {item_id} from issue {issue_id}")

    async def reorder(
        self, issue_id: str, from_index: int, to_index: int
    ) -> List[NewsletterItem]:
        """Move the item at ``from_index`` to ``to_index`` within one issue."""
        current = self._list(issue_id)
        reordered = reorder(current, from_index, to_index)
        if from_index == to_index:
            return list(current)

        updated = renumber(reordered)
        self._lists[issue_id] = updated
        logger.debug(f"Reordered issue {issue_id}: {from_index} -> {to_index}")

        await self._persist_order(issue_id, updated)
        return list(updated)

    async def move(
        self, item_id: str, target_issue_id: str, target_index: int
    ) -> NewsletterItem:
        """Move an item to ``target_index`` of ``target_issue_id``.

        Within the same issue this is a reorder. Across issues the item is
        removed from its source list, re-owned and inserted into the target
        list, and both lists are renumbered in full.
        """
        source_id, source_index = self._locate(item_id)
        target = self._list(target_issue_id)

        if source_id == target_issue_id:
            index = clamp_index(target_index, len(target) - 1)
            updated = await self.reorder(source_id, source_index, index)
            return updated[index]

        source = list(self._lists[source_id])
        moving = source.pop(source_index)
        source = renumber(source)

        index = clamp_index(target_index, len(target))
        moved = moving.model_copy(update={"issue_id": target_issue_id})
        destination = renumber(insert_at(target, moved, index))

        self._lists[source_id] = source
        self._lists[target_issue_id] = destination
        logger.debug(
            f"Moved item {item_id} from issue {source_id} to "
            f"issue {target_issue_id} at {index}"
        )

        await self._persist(
            "move newsletter item",
            self._persistence.move_item(item_id, target_issue_id, index),
        )
        if source:
            await self._persist_order(source_id, source)
        await self._persist_order(target_issue_id, destination)
        logger.info(f"Moved item {item_id} to issue {target_issue_id} at {index}")
        return destination[index]

    async def update_fields(
        self, item_id: str, partial: Union[ItemFields, Dict[str, Any]]
    ) -> NewsletterItem:
        """Shallow-merge curation metadata into an item."""
        if isinstance(partial, ItemFields):
            partial = partial.model_dump(exclude_unset=True)

        issue_id, index = self._locate(item_id)
        entries = list(self._lists[issue_id])
        item = entries[index]
        updated = item.model_copy(update={"fields": item.fields.merged(partial)})
        entries[index] = updated
        self._lists[issue_id] = entries

        await self._persist(
            "update newsletter item",
            self._persistence.update_item_fields(item_id, updated.fields),
        )
        logger.info(f"Updated fields {sorted(partial)} on item {item_id}")
        return updated

    async def update_issue_metadata(
        self, issue_id: str, **changes: Any
    ) -> NewsletterIssue:
        """Update ``issue_date``, ``subject`` and/or ``preview_text``."""
        return await self._update_issue(issue_id, changes, EDITABLE_ISSUE_FIELDS)

    async def record_publication(
        self, issue_id: str, **changes: Any
    ) -> NewsletterIssue:
        """Store the lifecycle fields computed by the publisher."""
        return await self._update_issue(issue_id, changes, PUBLICATION_ISSUE_FIELDS)

    # --- Internals ---

    async def _update_issue(
        self, issue_id: str, changes: Dict[str, Any], allowed: Tuple[str, ...]
    ) -> NewsletterIssue:
        unknown = set(changes) - set(allowed)
        if unknown:
            raise ValueError(f"Cannot update issue fields: {', '.join(sorted(unknown))}")

        issue = self.issue_by_id(issue_id)
        updated = NewsletterIssue.model_validate({**issue.model_dump(), **changes})
        self._issues[issue_id] = updated
        if not changes:
            return updated

        await self._persist(
            "update newsletter issue",
            self._persistence.update_issue(
                issue_id, {name: getattr(updated, name) for name in changes}
            ),
        )
        logger.info(f"Updated issue {issue_id}: {', '.join(sorted(changes))}")
        return updated

    def _list(self, issue_id: str) -> List[NewsletterItem]:
        try:
            return self._lists[issue_id]
        except KeyError:
            raise IssueNotFound(f"Issue {issue_id} is not loaded") from None

    def _locate(self, item_id: str) -> Tuple[str, int]:
        for issue_id, entries in self._lists.items():
            for index, item in enumerate(entries):
                if item.id == item_id:
                    return issue_id, index
        raise ItemNotFound(f"Newsletter item {item_id} is not loaded")

    async def _persist_order(
        self, issue_id: str, entries: Sequence[NewsletterItem]
    ) -> None:
        await self._persist(
            f"reorder items of issue {issue_id}",
            self._persistence.update_positions(
                [(item.id, item.position) for item in entries]
            ),
        )

    async def _persist(self, action: str, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceFailure(f"Failed to {action}: {e}") from e
