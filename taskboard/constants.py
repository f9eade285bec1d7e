"""Business constants shared by the services and the web layer."""

# Capacity of a single project, checked when a task is created
MAX_TASKS_PER_PROJECT = 20

# Look-back window of the performance report
REPORT_WINDOW_DAYS = 30

MANAGER_ROLE = "Manager"
USER_ROLE = "User"

# Sentinel for a missing or unparseable caller identity
NIL_USER_ID = "00000000-0000-0000-0000-000000000000"

USER_ID_HEADER = "X-User-Id"

DEFAULT_DB_FILENAME = "taskboard.db"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
