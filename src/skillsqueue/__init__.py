"""skillsqueue - Robotics skills queue kiosk with automatic dequeue."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("skillsqueue")
except PackageNotFoundError:
    __version__ = "0+local"
from skillsqueue.capacity import compute_status, parse_cutoff_time
from skillsqueue.config import AppConfig, AutoDequeueConfig
from skillsqueue.engine import AutoDequeueEngine, PollState
from skillsqueue.exceptions import (
    ConfigError,
    InvalidRequestError,
    QueueClosedError,
    QueueEmptyError,
    QueueOperationError,
    ScrapeConnectionRefusedError,
    ScrapeError,
    ScrapeHttpError,
    ScrapeTimeoutError,
    SettingsValidationError,
    SkillsQueueError,
    TeamAlreadyQueuedError,
    TeamNotServedError,
)
from skillsqueue.models import (
    AutoDequeueStatus,
    CapacityDecision,
    CapacityReason,
    QueueEntry,
    QueueSettings,
    QueueSizes,
    QueueState,
    SkillsChange,
    SkillsCounts,
    TeamChange,
    TeamSkillsRow,
)
from skillsqueue.scraper import SkillsScraper, parse_skills_table
from skillsqueue.service import QueueService
from skillsqueue.store import QueueStore, SettingsStore
from skillsqueue.tracker import SkillsTracker

__all__ = [
    "__version__",
    "AppConfig",
    "AutoDequeueConfig",
    "AutoDequeueEngine",
    "AutoDequeueStatus",
    "CapacityDecision",
    "CapacityReason",
    "ConfigError",
    "InvalidRequestError",
    "PollState",
    "QueueClosedError",
    "QueueEmptyError",
    "QueueEntry",
    "QueueOperationError",
    "QueueService",
    "QueueSettings",
    "QueueSizes",
    "QueueState",
    "QueueStore",
    "ScrapeConnectionRefusedError",
    "ScrapeError",
    "ScrapeHttpError",
    "ScrapeTimeoutError",
    "SettingsStore",
    "SettingsValidationError",
    "SkillsChange",
    "SkillsCounts",
    "SkillsQueueError",
    "SkillsScraper",
    "SkillsTracker",
    "TeamAlreadyQueuedError",
    "TeamChange",
    "TeamNotServedError",
    "TeamSkillsRow",
    "compute_status",
    "parse_cutoff_time",
]
