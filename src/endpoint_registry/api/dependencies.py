"""Dependency injection for FastAPI endpoints.

The application factory stores the configuration, database and service on
``app.state``; these functions hand them to endpoints.
"""

from fastapi import Request  # type: ignore[import-untyped]

from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.service import RegistryService


def get_config(request: Request) -> ConfigManager:
    """Get configuration manager instance.

    Note:
        This is a dependency function for FastAPI endpoints.
        Use with Depends(get_config) in endpoint parameters.
    """
    config: ConfigManager = request.app.state.config
    return config


def get_database(request: Request) -> Database:
    """Get the application database."""
    database: Database = request.app.state.database
    return database


def get_service(request: Request) -> RegistryService:
    """Get the registry service.

    Note:
        This is a dependency function for FastAPI endpoints.
        Use with Depends(get_service) in endpoint parameters.
    """
    service: RegistryService = request.app.state.service
    return service
