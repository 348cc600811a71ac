"""Upload and document lifecycle settings."""

from typing import Final

from decouple import Csv

from server.settings.components import config

_DEFAULT_ALLOWED_MIME_TYPES: Final = (
    'image/jpeg',
    'image/png',
    'image/gif',
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'text/csv',
)

# Upload limits (10 MB default)
FILES_MAX_UPLOAD_SIZE = config(
    'FILES_MAX_UPLOAD_SIZE',
    cast=int,
    default=10 * 1024 * 1024,
)
FILES_ALLOWED_MIME_TYPES = config(
    'FILES_ALLOWED_MIME_TYPES',
    cast=Csv(),
    default=','.join(_DEFAULT_ALLOWED_MIME_TYPES),
)

# Soft-deleted files are purged after this many days
FILES_PURGE_GRACE_DAYS = config('FILES_PURGE_GRACE_DAYS', cast=int, default=30)

# Seconds between upload and the virus scan task
FILES_VIRUS_SCAN_DELAY = config('FILES_VIRUS_SCAN_DELAY', cast=int, default=1)

# Lifetime of presigned download URLs in seconds
FILES_SIGNED_URL_EXPIRY = config(
    'FILES_SIGNED_URL_EXPIRY',
    cast=int,
    default=3600,
)

# Concurrent blob writes for multi-field uploads
FILES_UPLOAD_WORKERS = config('FILES_UPLOAD_WORKERS', cast=int, default=4)

# Per-user upload rate limit (requests per window in seconds)
FILES_UPLOAD_RATE_LIMIT = config(
    'FILES_UPLOAD_RATE_LIMIT',
    cast=int,
    default=100,
)
FILES_UPLOAD_RATE_WINDOW = config(
    'FILES_UPLOAD_RATE_WINDOW',
    cast=int,
    default=3600,
)

# Request bodies up to the upload cap are accepted
DATA_UPLOAD_MAX_MEMORY_SIZE = FILES_MAX_UPLOAD_SIZE
