"""Business logic layer for files app.

This package contains all business logic for documents:
- Upload, read and entity listings
- Access policy and owner resolution
- Soft delete, purge and the cleanup sweep
- Verification review and virus scan status

All business logic should be implemented here, separate from
models (data layer), infrastructure (external systems) and views.
"""
