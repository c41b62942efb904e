"""Exception types raised by the curation desk."""

from typing import Optional


class CurationDeskError(Exception):
    """Base class for all curation desk errors."""


class ConfigurationError(CurationDeskError):
    """Required configuration is missing or invalid."""


class IndexOutOfRange(CurationDeskError, IndexError):
    """An ordering index fell outside the list bounds."""


class IssueNotFound(CurationDeskError, KeyError):
    """No loaded issue matches the given id or type."""


class ItemNotFound(CurationDeskError, KeyError):
    """No loaded newsletter item matches the given id."""


class DuplicateAssignment(CurationDeskError):
    """The video is already placed in one of the draft issues."""

    def __init__(self, video_id: str, issue_id: str):
        self.video_id = video_id
        self.issue_id = issue_id
        super().__init__(f"Video {video_id} is already assigned to issue {issue_id}")


class NotPublishable(CurationDeskError):
    """The issue fails a publishing precondition."""


class PersistenceFailure(CurationDeskError):
    """The persistence backend rejected a write or read."""


class EspError(CurationDeskError):
    """The email service provider returned an error."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class CampaignFailure(CurationDeskError):
    """Publishing failed while talking to the email service provider."""
