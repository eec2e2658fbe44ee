"""REST API for the endpoint registry.

This module provides a FastAPI-based REST API over the registry service.

Key features:
- Public browsing of endpoints and tags
- Request submission and self-service deletion for signed-in users
- Review queue, approval and rejection for admins
- JWT bearer authentication, roles from the role store
- Icon uploads
- OpenAPI documentation

Usage:
    # Grant yourself admin and mint a token
    endpoint-registry roles grant alice
    endpoint-registry api token create alice

    # Start server
    endpoint-registry api serve

    # Access API docs
    http://localhost:8000/docs
"""

__all__ = ["create_app", "run_server"]

from endpoint_registry.api.server import create_app, run_server  # noqa: F401
