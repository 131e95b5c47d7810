"""Custom exception hierarchy for skillsqueue."""

from __future__ import annotations


class SkillsQueueError(Exception):
    """Base exception for all skillsqueue errors."""


class ConfigError(SkillsQueueError):
    """Invalid or missing configuration."""


class ScrapeError(SkillsQueueError):
    """Skills page could not be fetched (network, non-200, unreadable body)."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class ScrapeConnectionRefusedError(ScrapeError):
    """Tournament manager refused the connection (server down or wrong address)."""


class ScrapeTimeoutError(ScrapeError):
    """Skills page request exceeded the configured timeout."""


class ScrapeHttpError(ScrapeError):
    """Tournament manager answered with a non-200 status."""

    def __init__(self, message: str, *, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        super().__init__(message, url=url)


class QueueOperationError(SkillsQueueError):
    """A queue mutation was rejected.

    ``http_status`` is the status code the web layer answers with.
    """

    http_status: int = 400


class QueueClosedError(QueueOperationError):
    """Registration is closed (manual close, past cutoff or capacity full)."""

    http_status = 403


class TeamAlreadyQueuedError(QueueOperationError):
    """Team is already waiting or being served."""


class QueueEmptyError(QueueOperationError):
    """Nothing to serve or unserve."""


class TeamNotServedError(QueueOperationError):
    """Team is not currently being served."""


class SettingsValidationError(QueueOperationError):
    """Rejected queue settings update."""


class InvalidRequestError(QueueOperationError):
    """Malformed request: missing team number, bad JSON body, wrong types."""
