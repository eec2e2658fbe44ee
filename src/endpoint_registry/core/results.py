"""Structured action results for callers that prefer values to exceptions."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, TypeVar

from endpoint_registry.core.errors import RegistryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ActionResult(Generic[T]):
    """Outcome of a registry action.

    Attributes:
        success: Whether the action completed
        data: Action return value on success
        message: User-facing message on failure
        errors: Field-keyed messages on failure
        kind: Error code of the failure (e.g. ``INVALID_STATE``)
    """

    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    errors: dict[str, list[str]] = field(default_factory=dict)
    kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def from_error(cls, error: RegistryError) -> "ActionResult[T]":
        """Build a failed result from a registry error."""
        return cls(
            success=False,
            message=error.message,
            errors=error.field_errors,
            kind=error.error_code,
        )


def run_action(fn: Callable[..., T], *args: Any, **kwargs: Any) -> ActionResult[T]:
    """Call ``fn`` and wrap its outcome.

    Registry errors become failed results. Anything else propagates.

    Example:
        >>> result = run_action(service.approve_request, caller, request_id)
        >>> if not result.success:
        ...     print(result.kind, result.message)
    """
    try:
        return ActionResult.ok(fn(*args, **kwargs))
    except RegistryError as e:
        logger.debug(f"{getattr(fn, '__name__', fn)} failed: {e.error_code} {e.detail or e}")
        return ActionResult.from_error(e)
