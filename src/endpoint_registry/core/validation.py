"""Validation of submitted endpoint and tag fields.

Every function here is pure: no network, no storage, safe to call
repeatedly. Referential checks (do the tag ids exist?) happen later, at
persistence time.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, cast
from uuid import UUID

from pydantic import (  # type: ignore[import-untyped]
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError  # type: ignore[import-untyped]

from endpoint_registry.core.errors import ROOT_FIELD, ValidationError
from endpoint_registry.core.models import EndpointFields, Protocol

PROTOCOL_OPTIONS = [protocol.value for protocol in Protocol]

_URL_ADAPTER = TypeAdapter(AnyUrl)

# Friendlier wording for required fields, keyed by submission field name
_REQUIRED_MESSAGES = {
    "company": "Company name is required",
    "title": "Title is required",
    "address": "Address is required",
    "protocol": "Protocol is required",
    "tagIds": "Select at least one tag",
    "name": "Tag name is required",
    "slug": "Slug is required",
    "color": "Color is required",
}
_REQUIRED_ERROR_TYPES = {"missing", "string_too_short", "too_short"}


class EndpointSubmission(BaseModel):
    """Raw submission for an endpoint request or a direct endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    company: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    protocol: Protocol
    address: str = Field(..., min_length=1, max_length=500)
    ports: Optional[list[str]] = None
    tag_ids: list[UUID] = Field(..., min_length=1, alias="tagIds")
    icon_url: Optional[str] = Field(None, alias="iconUrl")

    @field_validator("description", "icon_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value

    @field_validator("ports", mode="before")
    @classmethod
    def _split_ports(cls, value: Any) -> Optional[list[str]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            return value
        ports = [str(port).strip() for port in value]
        ports = [port for port in ports if port]
        return ports or None

    @field_validator("tag_ids", mode="before")
    @classmethod
    def _wrap_single_tag(cls, value: Any) -> Any:
        if isinstance(value, (str, UUID)):
            return [value]
        return value

    @field_validator("icon_url")
    @classmethod
    def _check_icon_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            _URL_ADAPTER.validate_python(value)
        except PydanticValidationError:
            raise ValueError("Invalid url")
        return value

    def to_fields(self) -> EndpointFields:
        """Convert to the normalized field record."""
        return EndpointFields(
            company=self.company,
            title=self.title,
            description=self.description,
            protocol=self.protocol,
            address=self.address,
            ports=self.ports,
            icon_url=self.icon_url,
        )

    def unique_tag_ids(self) -> list[str]:
        """Tag ids as strings, duplicates dropped, first-seen order kept."""
        seen: dict[str, None] = {}
        for tag_id in self.tag_ids:
            seen.setdefault(str(tag_id), None)
        return list(seen)


class TagSubmission(BaseModel):
    """Raw submission for tag reference data."""

    name: str = Field(..., min_length=1, max_length=50)
    slug: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    color: str = Field(..., pattern=r"^#[0-9a-fA-F]{6}$")


@dataclass
class ValidationOutcome:
    """Result of validating a submission.

    Exactly one of ``fields`` or ``errors`` is meaningful: when ``errors`` is
    empty, ``fields`` and ``tag_ids`` hold the normalized submission.
    """

    fields: Optional[EndpointFields] = None
    tag_ids: list[str] = field(default_factory=list)
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise ValidationError if the submission was invalid."""
        if self.errors:
            raise ValidationError(self.errors)


def _message_for(error: Mapping[str, Any], field_name: str) -> str:
    if field_name in _REQUIRED_MESSAGES:
        if error["type"] in _REQUIRED_ERROR_TYPES or error.get("input", "") is None:
            return _REQUIRED_MESSAGES[field_name]
    if field_name == "slug" and error["type"] == "string_pattern_mismatch":
        return "Slug must be lowercase alphanumeric with hyphens"
    if field_name == "color" and error["type"] == "string_pattern_mismatch":
        return "Must be a valid hex color"
    message: str = error["msg"]
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    return message


def flatten_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into a field-keyed message mapping.

    Args:
        exc: Pydantic validation error

    Returns:
        Mapping of top-level field name to its messages

    Example:
        >>> flatten_errors(exc)
        {'company': ['Company name is required'], 'tagIds': ['Select at least one tag']}
    """
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field_name = str(loc[0]) if loc else ROOT_FIELD
        message = _message_for(error, field_name)
        messages = errors.setdefault(field_name, [])
        if message not in messages:
            messages.append(message)
    return errors


def validate_submission(raw: Mapping[str, Any]) -> ValidationOutcome:
    """Validate a raw endpoint submission.

    Args:
        raw: Field bag keyed by submission names (``company``, ``title``,
            ``description``, ``protocol``, ``address``, ``ports``,
            ``tagIds``, ``iconUrl``); snake_case keys are accepted too

    Returns:
        Outcome holding either the normalized fields or field-keyed errors
    """
    try:
        submission = EndpointSubmission.model_validate(dict(raw))
    except PydanticValidationError as e:
        return ValidationOutcome(errors=flatten_errors(e))
    return ValidationOutcome(
        fields=submission.to_fields(),
        tag_ids=submission.unique_tag_ids(),
    )


def parse_submission(raw: Mapping[str, Any]) -> tuple[EndpointFields, list[str]]:
    """Validate a raw submission or raise.

    Returns:
        Tuple of (normalized fields, unique tag ids)

    Raises:
        ValidationError: If any field is invalid
    """
    outcome = validate_submission(raw)
    outcome.raise_for_errors()
    return cast(EndpointFields, outcome.fields), outcome.tag_ids


def validate_tag(raw: Mapping[str, Any]) -> TagSubmission:
    """Validate tag reference data.

    Raises:
        ValidationError: If name, slug or color is invalid
    """
    try:
        return TagSubmission.model_validate(dict(raw))
    except PydanticValidationError as e:
        raise ValidationError(flatten_errors(e))
