"""Core functionality for the endpoint registry."""

from endpoint_registry.core.authorization import Caller, CallerRole
from endpoint_registry.core.models import Endpoint, EndpointFilter, EndpointRequest, Tag
from endpoint_registry.core.service import RegistryService

__all__ = [
    "Caller",
    "CallerRole",
    "Endpoint",
    "EndpointFilter",
    "EndpointRequest",
    "Tag",
    "RegistryService",
]
