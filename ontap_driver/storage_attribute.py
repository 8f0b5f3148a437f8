"""Capability offers advertised by a backend and requests made against them.

A backend describes what its storage pools can do as a mapping from
attribute name to offer. A volume creation asks for features as a mapping
from attribute name to request, and a pool qualifies only when each
request is matched by the offer stored under the same name.
"""

from dataclasses import dataclass
from typing import Tuple, Union

BACKEND_TYPE = 'backendType'
SNAPSHOTS = 'snapshots'
ENCRYPTION = 'encryption'
PROVISIONING_TYPE = 'provisioningType'

BOOL_TYPE = 'bool'
STRING_TYPE = 'string'

ATTRIBUTE_TYPES = {
    BACKEND_TYPE: STRING_TYPE,
    SNAPSHOTS: BOOL_TYPE,
    ENCRYPTION: BOOL_TYPE,
    PROVISIONING_TYPE: STRING_TYPE,
}


@dataclass(frozen=True)
class BoolRequest:
    request: bool

    @property
    def value(self) -> bool:
        return self.request


@dataclass(frozen=True)
class StringRequest:
    request: str

    @property
    def value(self) -> str:
        return self.request


Request = Union[BoolRequest, StringRequest]


@dataclass(frozen=True)
class BoolOffer:
    offer: bool

    @property
    def value(self) -> bool:
        return self.offer

    def matches(self, request: Request) -> bool:
        if not isinstance(request, BoolRequest):
            return False
        # asking for a feature to be absent is satisfied by any pool
        return self.offer or not request.request


@dataclass(frozen=True)
class StringOffer:
    offers: Tuple[str, ...]

    def __init__(self, *offers: str):
        object.__setattr__(self, 'offers', tuple(offers))

    @property
    def value(self) -> Tuple[str, ...]:
        return self.offers

    def matches(self, request: Request) -> bool:
        if not isinstance(request, StringRequest):
            return False
        return request.request in self.offers


Offer = Union[BoolOffer, StringOffer]


def create_request(name: str, value: str) -> Request:
    """Build a request for attribute ``name`` from its string form."""
    attribute_type = ATTRIBUTE_TYPES.get(name)
    if attribute_type is None:
        raise ValueError('Unknown storage attribute %s' % name)

    if attribute_type == BOOL_TYPE:
        normalized = value.strip().lower()
        if normalized in ('true', 't', '1', 'yes'):
            return BoolRequest(True)
        if normalized in ('false', 'f', '0', 'no'):
            return BoolRequest(False)
        raise ValueError('Invalid boolean value %s for storage attribute %s' % (value, name))

    return StringRequest(value)
