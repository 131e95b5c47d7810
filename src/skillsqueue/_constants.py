"""Internal constants shared across the package."""

DEFAULT_BASE_URL = "http://10.0.0.3"
SKILLS_PATH = "/skills"
USER_AGENT = "skillsqueue/1.0"

#: CSS selector for the result rows of the VEX TM skills table.
SKILLS_ROW_SELECTOR = "table.table-striped.table-bordered.table-condensed.table-centered tbody tr"

DEFAULT_POLL_INTERVAL_MS = 5000
DEFAULT_REQUEST_TIMEOUT_S = 5.0
MONITOR_INTERVAL_S = 1.0

QUEUE_DATA_FILENAME = "queue_data.json"
SETTINGS_FILENAME = "queue_settings.json"

# Smallest turnover the settings endpoint accepts, in minutes.
MIN_TURNOVER_MINUTES = 1
MIN_NUMBER_OF_FIELDS = 1
