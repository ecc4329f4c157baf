"""Partial-update payloads.

Every field defaults to ``UNSET``, meaning "leave unchanged". Any other value,
``None`` included, is applied. An explicit ``None`` on a required field is
rejected by the service.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict


class _Unset:
    """Marker for a field that was not supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    return value is not UNSET


class _Update:
    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Build an update from a dict holding only the supplied fields."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def present_fields(self) -> Dict[str, Any]:
        """Return the supplied fields and their values."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if is_set(getattr(self, f.name))
        }


@dataclass
class NodeUpdate(_Update):
    label: Any = UNSET
    type: Any = UNSET
    labels: Any = UNSET
    properties: Any = UNSET


@dataclass
class RelationshipUpdate(_Update):
    type: Any = UNSET
    source_id: Any = UNSET
    target_id: Any = UNSET
    properties: Any = UNSET


@dataclass
class UserUpdate(_Update):
    username: Any = UNSET
    email: Any = UNSET
    first_name: Any = UNSET
    last_name: Any = UNSET


@dataclass
class ProjectUpdate(_Update):
    name: Any = UNSET
    description: Any = UNSET
    user_id: Any = UNSET
