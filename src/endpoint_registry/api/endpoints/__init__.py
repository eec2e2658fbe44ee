"""API endpoints.

This package contains all API endpoint routers organized by resource type.
Each module defines a FastAPI router that is included in the main application.

Available routers:
- system: Health checks, system status and the current caller
- endpoints: Published endpoint browsing and admin management
- requests: Submission, review queue, approval and rejection
- tags: Tag listing and creation
- uploads: Icon uploads
- admin: Dashboard statistics
"""

__all__ = ["system", "endpoints", "requests", "tags", "uploads", "admin"]

from endpoint_registry.api.endpoints import (  # noqa: F401
    admin,
    endpoints,
    requests,
    system,
    tags,
    uploads,
)
