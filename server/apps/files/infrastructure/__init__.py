"""Infrastructure layer for files app.

This package contains integrations with external systems:
- S3-compatible byte store (MinIO/R2/AWS)
- Name, path and upload validation, MIME type detection

Keep infrastructure concerns separate from business logic.
"""
