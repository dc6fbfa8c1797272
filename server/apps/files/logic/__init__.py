"""Business logic layer for files app.

This package contains all business logic for the folder/file hierarchy:
- Tag normalization and materialized path maintenance
- Folder lifecycle: create, rename, move, tag, favorite, soft delete
- File metadata lifecycle, copy and status transitions
- Trash listing and restore

Every operation takes the acting user explicitly and never touches
records owned by anyone else. Keep this separate from models (data
layer) and infrastructure (external systems).
"""
