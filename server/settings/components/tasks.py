"""Scheduled task queue settings."""

from server.settings.components import config

TASKS_MAX_ATTEMPTS = config('TASKS_MAX_ATTEMPTS', cast=int, default=5)

# Back-off in seconds, multiplied by the attempt number
TASKS_RETRY_DELAY = config('TASKS_RETRY_DELAY', cast=int, default=60)

# Running tasks older than this (seconds) are considered abandoned
TASKS_STALE_AFTER = config('TASKS_STALE_AFTER', cast=int, default=900)

TASKS_POLL_INTERVAL = config('TASKS_POLL_INTERVAL', cast=int, default=5)
