"""Business logic layer for files app.

This package contains all business logic for the file registry:
- Upload with visibility classification
- Public listing and search
- Access requests for private files
- Download gating and fail-closed deletion

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
