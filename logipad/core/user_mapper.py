"""Logipad identity API → typed user record mapping.

The ``/users`` endpoint is not consistent about its payload shape: some
deployments return a bare JSON array, others wrap it as ``{"users": [...]}``.
Fields may be missing or ``null``. This module turns either shape into a list of
``UserRecord`` objects without raising; the outcome is reported as a
``MappingResult``.

Usage:
    result = map_payload(response.text)
    if result.ok:
        for user in result.records:
            print(user.display_line())
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional


class MappingError(Exception):
    """Base class for user list mapping failures."""
    pass


class ShapeError(MappingError):
    """Payload root is neither an array nor an object with a ``users`` array."""
    pass


class FieldTypeError(MappingError):
    """A user element or one of its fields has an unexpected JSON type.

    Attributes:
        index: Position of the offending element in the user array
        key: Source key that failed (None when the element itself is invalid)
    """

    def __init__(self, message: str, index: Optional[int] = None, key: Optional[str] = None):
        self.index = index
        self.key = key
        super().__init__(message)


# Source key for every optional string attribute, in wire order.
OPTIONAL_FIELDS: Dict[str, str] = {
    "created_at": "created_at",
    "created_by": "created_by",
    "modified_at": "modified_at",
    "modified_by": "modified_by",
    "last_login_at": "last_login_at",
    "last_activity_at": "last_activity_at",
    "last_document_service_activity": "last_document_service_activity",
    "last_eform_service_activity": "last_eform_service_activity",
    "last_briefing_service_activity": "last_briefing_service_activity",
    "name": "name",
    "type": "type",
    "full_name": "full_name",
    "email": "email",
    "short_code": "three_lc",
    "department": "department",
    "description": "description",
}


@dataclass
class UserRecord:
    """One user as returned by the Logipad identity API.

    Optional attributes are ``None`` when the source key is missing or null.
    """
    id: str = ""
    is_active: bool = True
    is_reportable: bool = False
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    modified_at: Optional[str] = None
    modified_by: Optional[str] = None
    last_login_at: Optional[str] = None
    last_activity_at: Optional[str] = None
    last_document_service_activity: Optional[str] = None
    last_eform_service_activity: Optional[str] = None
    last_briefing_service_activity: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    short_code: Optional[str] = None
    department: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, source: Any, index: Optional[int] = None) -> "UserRecord":
        """Build a record from one element of the user array.

        Args:
            source: Decoded JSON object for a single user
            index: Position in the array (used in error messages)

        Returns:
            Populated UserRecord

        Raises:
            FieldTypeError: If the element is not an object or a field has the wrong type
        """
        if not isinstance(source, dict):
            raise FieldTypeError(
                f"User entry {index} is {_json_type(source)}, expected object", index=index
            )

        record = cls()

        # A missing guid leaves the id empty rather than rejecting the entry
        if "guid" in source:
            record.id = _require_str(source, "guid", index)

        for attr, key in OPTIONAL_FIELDS.items():
            if source.get(key) is not None:
                setattr(record, attr, _require_str(source, key, index))

        if "is_active" in source:
            record.is_active = _require_bool(source, "is_active", index)
        if "is_reportable" in source:
            record.is_reportable = _require_bool(source, "is_reportable", index)

        return record

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the API's key names, omitting absent attributes."""
        payload: Dict[str, Any] = {"guid": self.id}
        for attr, key in OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        payload["is_active"] = self.is_active
        payload["is_reportable"] = self.is_reportable
        return payload

    def display_line(self) -> str:
        """One-line summary: guid, then name and email when known."""
        line = f"User: {self.id} "
        if self.name is not None:
            line += f"{self.name} "
            if self.email is not None:
                line += f" ({self.email})"
        return line.rstrip()


class MappingResult(NamedTuple):
    """Outcome of a mapping pass. ``records`` is empty whenever ``ok`` is False."""
    records: List[UserRecord]
    ok: bool
    error: Optional[MappingError] = None


def map_records(root: Any) -> MappingResult:
    """Map an already decoded ``/users`` payload to user records.

    Accepted shapes, first match wins:
    1. a JSON array of user objects
    2. an object whose ``users`` key holds such an array

    Any failure aborts the whole pass; no partial list is returned.
    """
    if isinstance(root, list):
        entries = root
    elif isinstance(root, dict) and isinstance(root.get("users"), list):
        entries = root["users"]
    else:
        return MappingResult(
            [], False, ShapeError(f"Expected array or object with 'users' array, got {_json_type(root)}")
        )

    records: List[UserRecord] = []
    for index, entry in enumerate(entries):
        try:
            records.append(UserRecord.from_dict(entry, index))
        except FieldTypeError as exc:
            return MappingResult([], False, exc)
    return MappingResult(records, True)


def map_payload(text: str | bytes) -> MappingResult:
    """Decode a JSON response body and map it with ``map_records``."""
    try:
        root = json.loads(text)
    except (ValueError, RecursionError) as exc:
        return MappingResult([], False, ShapeError(f"Malformed JSON payload: {exc}"))
    return map_records(root)


def _require_str(source: Dict[str, Any], key: str, index: Optional[int]) -> str:
    value = source[key]
    if not isinstance(value, str):
        raise FieldTypeError(
            f"User entry {index}: '{key}' is {_json_type(value)}, expected string", index=index, key=key
        )
    return value


def _require_bool(source: Dict[str, Any], key: str, index: Optional[int]) -> bool:
    value = source[key]
    if not isinstance(value, bool):
        raise FieldTypeError(
            f"User entry {index}: '{key}' is {_json_type(value)}, expected boolean", index=index, key=key
        )
    return value


def _json_type(value: Any) -> str:
    """JSON type name of a decoded value, for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
