"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Storage backends (S3/MinIO/R2 and local filesystem)
- Metadata extraction (MIME type, checksum, storage keys, headers)

Keep infrastructure concerns separate from business logic.
"""
