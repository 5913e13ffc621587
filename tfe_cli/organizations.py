"""Organization resources of the TFE API v2.

Organizations are keyed by name: the name is the last path segment of every
single-resource URL, and the JSON:API ``id`` member is never used.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional, Self

from .api import ListOptions, Request
from .errors import DecodeError, ValidationError
from .jsonapi import (
    marshal_resource,
    pagination_from_meta,
    unmarshal_collection,
    unmarshal_resource,
)
from .validators import valid_string, valid_string_id

RESOURCE_TYPE = "organizations"
ORGANIZATIONS_PATH = "/api/v2/organizations"

# Python attribute -> wire attribute
ATTRIBUTE_MAP = {
    'name': 'name',
    'email': 'email',
    'collaborator_auth_policy': 'collaborator-auth-policy',
    'enterprise_plan': 'enterprise-plan',
    'created_at': 'created-at',
    'trial_expires_at': 'trial-expires-at',
}

TIMESTAMP_FIELDS = ('created_at', 'trial_expires_at')


@dataclass(frozen=True)
class Permissions:
    """What the current user may do to an organization."""

    can_create_team: bool = False
    can_create_workspace: bool = False
    can_create_workspace_migration: bool = False
    can_destroy: bool = False
    can_traverse: bool = False
    can_update: bool = False
    can_update_api_token: bool = False
    can_update_oauth: bool = False
    can_update_sentinel: bool = False

    @classmethod
    def from_wire(cls, data: Optional[Dict[str, Any]]) -> "Permissions":
        data = data or {}
        return cls(**{
            name: bool(data.get(name.replace('_', '-'), False))
            for name in (f.name for f in fields(cls))
        })

    def to_wire(self: Self) -> Dict[str, bool]:
        return {
            name.replace('_', '-'): getattr(self, name)
            for name in (f.name for f in fields(self))
        }


@dataclass(frozen=True)
class Organization:
    """An organization as reported by the server.

    Every field is optional: None means the server did not report a value.
    ``trial_expires_at`` is only meaningful when ``enterprise_plan`` is
    "trial".
    """

    name: Optional[str] = None
    email: Optional[str] = None
    collaborator_auth_policy: Optional[str] = None
    enterprise_plan: Optional[str] = None
    created_at: Optional[datetime] = None
    trial_expires_at: Optional[datetime] = None
    permissions: Optional[Permissions] = None


class OrganizationList(list):
    """Organizations in server order, plus the page they came from."""

    def __init__(
        self: Self,
        items: List[Organization],
        pagination: Optional[Dict[str, Optional[int]]] = None
    ) -> None:
        super().__init__(items)
        self.pagination = pagination


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid timestamp {value!r}: {e}")


def to_wire_envelope(organization: Organization) -> Dict[str, Any]:
    """Wrap an organization in a JSON:API request document.

    Only attributes that are set are encoded, so unset fields are left
    untouched by the server.
    """
    attributes: Dict[str, Any] = {}
    for attr, wire_name in ATTRIBUTE_MAP.items():
        value = getattr(organization, attr)
        if value is None:
            continue
        if attr in TIMESTAMP_FIELDS:
            value = value.isoformat()
        attributes[wire_name] = value

    if organization.permissions is not None:
        attributes['permissions'] = organization.permissions.to_wire()

    return marshal_resource(RESOURCE_TYPE, attributes)


def _from_resource(resource: Dict[str, Any]) -> Organization:
    values: Dict[str, Any] = {}
    for attr, wire_name in ATTRIBUTE_MAP.items():
        value = resource.get(wire_name)
        if attr in TIMESTAMP_FIELDS:
            value = _parse_timestamp(value)
        values[attr] = value

    values['permissions'] = Permissions.from_wire(resource.get('permissions'))
    return Organization(**values)


def from_wire_envelope(document: Any) -> Organization:
    """Unwrap a single-resource JSON:API document into an Organization."""
    return _from_resource(unmarshal_resource(document))


def from_wire_collection(document: Any) -> OrganizationList:
    """Unwrap a collection document, keeping the server's order."""
    resources, meta = unmarshal_collection(document)
    return OrganizationList(
        [_from_resource(resource) for resource in resources],
        pagination_from_meta(meta)
    )


@dataclass
class ListOrganizationsInput:
    """Inputs to use when listing organizations."""

    list_options: ListOptions = field(default_factory=ListOptions)


@dataclass
class CreateOrganizationInput:
    """Settable parameters for organization creation."""

    name: Optional[str] = None
    email: Optional[str] = None

    def valid(self: Self) -> None:
        """Raise ValidationError unless name and email are usable."""
        if not valid_string_id(self.name):
            raise ValidationError("Invalid value for name")
        if not valid_string(self.email):
            raise ValidationError("email is required")


@dataclass
class CreateOrganizationOutput:
    organization: Organization


@dataclass
class DeleteOrganizationInput:
    """Parameters used during organization deletion."""

    name: Optional[str] = None

    def valid(self: Self) -> None:
        if not valid_string_id(self.name):
            raise ValidationError("Invalid value for name")


@dataclass
class DeleteOrganizationOutput:
    pass


@dataclass
class ModifyOrganizationInput:
    """Parameters for modifying an existing organization.

    ``name`` selects the organization. ``rename`` and ``email`` are optional;
    any left as None stay as they are on the server.
    """

    name: Optional[str] = None
    rename: Optional[str] = None
    email: Optional[str] = None

    def valid(self: Self) -> None:
        if not valid_string_id(self.name):
            raise ValidationError("Invalid value for name")


@dataclass
class ModifyOrganizationOutput:
    organization: Organization


class Organizations:
    """Organization operations bound to a transport.

    ``transport`` is anything with a ``do(request)`` method returning the
    decoded response document; ``TFEClient`` in normal use.
    """

    def __init__(self: Self, transport: Any) -> None:
        self.transport = transport

    def list(self: Self, input: Optional[ListOrganizationsInput] = None) -> OrganizationList:
        """Return all organizations visible to the current user."""
        input = input or ListOrganizationsInput()

        document = self.transport.do(Request(
            method='GET',
            path=ORGANIZATIONS_PATH,
            list_options=input.list_options
        ))

        return from_wire_collection(document)

    def get(self: Self, name: str) -> Organization:
        """Look up a single organization by its name."""
        document = self.transport.do(Request(
            method='GET',
            path=f"{ORGANIZATIONS_PATH}/{name}"
        ))

        return from_wire_envelope(document)

    def create(self: Self, input: CreateOrganizationInput) -> CreateOrganizationOutput:
        """Create a new organization with the given parameters."""
        input.valid()

        payload = to_wire_envelope(Organization(name=input.name, email=input.email))

        document = self.transport.do(Request(
            method='POST',
            path=ORGANIZATIONS_PATH,
            input=payload
        ))

        return CreateOrganizationOutput(organization=from_wire_envelope(document))

    def delete(self: Self, input: DeleteOrganizationInput) -> DeleteOrganizationOutput:
        """Delete the named organization.

        Deleting an organization that does not exist is an error reported
        by the server.
        """
        input.valid()

        self.transport.do(Request(
            method='DELETE',
            path=f"{ORGANIZATIONS_PATH}/{input.name}",
            decode=False
        ))

        return DeleteOrganizationOutput()

    def modify(self: Self, input: ModifyOrganizationInput) -> ModifyOrganizationOutput:
        """Adjust attributes on an existing organization.

        The wire ``name`` attribute carries ``input.rename``; ``input.name``
        only selects the target URL.
        """
        input.valid()

        payload = to_wire_envelope(Organization(name=input.rename, email=input.email))

        document = self.transport.do(Request(
            method='PATCH',
            path=f"{ORGANIZATIONS_PATH}/{input.name}",
            input=payload
        ))

        return ModifyOrganizationOutput(organization=from_wire_envelope(document))
