"""Account, company and user records, and the claims carried in access tokens."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
NIL_OBJECT_ID = ObjectId(b"\x00" * 12)

_INVALID_HEX = "the provided hex string is not a valid ObjectID"
_KIND_NAMES = {str: "a string", bool: "a boolean", float: "a number", dict: "an object"}


class Role(str, Enum):
    """Predefined account roles."""

    USER = "user"
    COMPANY = "company"


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _get(data: Mapping[str, Any], key: str, kind: type) -> Any:
    """Read a typed field; a missing or null field gives the type's zero value."""
    value = data.get(key)
    if value is None:
        return kind()
    if kind is float:
        valid = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif kind is dict:
        valid = isinstance(value, Mapping)
    else:
        valid = isinstance(value, kind)
    if not valid:
        raise ValueError(f"field {key!r} must be {_KIND_NAMES[kind]}")
    return value if kind is dict else kind(value)


def _to_object_id(value: Any) -> ObjectId | None:
    """Parse an identifier; absent, empty and all-zero identifiers become None."""
    if value is None or value == "":
        return None
    if isinstance(value, ObjectId):
        oid = value
    else:
        try:
            oid = ObjectId(value) if isinstance(value, str) else None
        except (InvalidId, TypeError):
            oid = None
        if oid is None:
            raise ValueError(_INVALID_HEX)
    return None if oid == NIL_OBJECT_ID else oid


def _to_datetime(value: Any) -> datetime:
    """Parse an RFC 3339 string or datetime; naive values are taken as UTC."""
    if value is None:
        return ZERO_TIME
    parsed = value if isinstance(value, datetime) else None
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None
    if parsed is None:
        raise ValueError(f"invalid time {value!r}")
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def _to_role(value: Any) -> Role | str:
    if value is not None and not isinstance(value, str):
        raise ValueError("field 'role' must be a string")
    value = value or ""
    return Role(value) if value in {r.value for r in Role} else value


def _role_value(role: Role | str) -> str:
    return role.value if isinstance(role, Role) else role


@dataclass
class Account:
    """Login credentials and contact data of a user."""

    email: str = ""
    password: str = ""
    phone: str = ""
    banned: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Account:
        data = _require_mapping(data, "account")
        return cls(
            email=_get(data, "email", str),
            password=_get(data, "password", str),
            phone=_get(data, "phone", str),
            banned=_get(data, "banned", bool),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Location:
    """A GeoJSON point: coordinates are [longitude, latitude]."""

    type: str = ""
    coordinates: list[float] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Location:
        data = _require_mapping(data, "location")
        raw = data.get("coordinates") or []
        if not isinstance(raw, list) or any(
            isinstance(item, bool) or not isinstance(item, (int, float)) for item in raw
        ):
            raise ValueError("field 'coordinates' must be a list of numbers")
        return cls(type=_get(data, "type", str), coordinates=[float(item) for item in raw])

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Address:
    """A postal address with its map location."""

    first_street: str = ""
    second_street: str = ""
    neighborhood: str = ""
    location: Location = field(default_factory=Location)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Address:
        data = _require_mapping(data, "address")
        return cls(
            first_street=_get(data, "first_street", str),
            second_street=_get(data, "second_street", str),
            neighborhood=_get(data, "neighborhood", str),
            location=Location.from_dict(_get(data, "location", dict)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Company:
    """Company profile attached to users with the company role."""

    name: str = ""
    logo: str = ""
    address: Address = field(default_factory=Address)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Company:
        data = _require_mapping(data, "company")
        return cls(
            name=_get(data, "name", str),
            logo=_get(data, "logo", str),
            address=Address.from_dict(_get(data, "address", dict)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class User:
    """A registered user, either a job seeker or a company."""

    id: ObjectId | None = None
    name: str = ""
    last_name: str = ""
    account: Account = field(default_factory=Account)
    role: Role | str = ""
    company: Company = field(default_factory=Company)
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        data = _require_mapping(data, "user")
        return cls(
            id=_to_object_id(data.get("_id")),
            name=_get(data, "name", str),
            last_name=_get(data, "last_name", str),
            account=Account.from_dict(_get(data, "account", dict)),
            role=_to_role(data.get("role")),
            company=Company.from_dict(_get(data, "company", dict)),
            created_at=_to_datetime(data.get("created_at")),
            updated_at=_to_datetime(data.get("updated_at")),
        )

    def to_document(self) -> dict[str, Any]:
        """Return the database document; an unset id is left out."""
        document: dict[str, Any] = {}
        if self.id is not None and self.id != NIL_OBJECT_ID:
            document["_id"] = self.id
        document.update(
            name=self.name,
            last_name=self.last_name,
            account=self.account.to_dict(),
            role=_role_value(self.role),
            company=self.company.to_dict(),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
        return document


@dataclass
class CustomClaims:
    """Claims of an access token: the user's role, e-mail and id plus registered claims."""

    role: Role | str = ""
    email: str = ""
    user_id: ObjectId | None = None
    issuer: str | None = None
    subject: str | None = None
    audience: str | list[str] | None = None
    expires_at: datetime | None = None
    not_before: datetime | None = None
    issued_at: datetime | None = None
    jwt_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the token payload; unset registered claims are left out."""
        payload: dict[str, Any] = {
            "role": _role_value(self.role),
            "email": self.email,
            "userId": str(self.user_id or NIL_OBJECT_ID),
        }
        for key, value in (
            ("iss", self.issuer),
            ("sub", self.subject),
            ("aud", self.audience),
            ("jti", self.jwt_id),
        ):
            if value:
                payload[key] = value
        for key, moment in (
            ("exp", self.expires_at),
            ("nbf", self.not_before),
            ("iat", self.issued_at),
        ):
            if moment is not None:
                if moment.tzinfo is None:
                    moment = moment.replace(tzinfo=timezone.utc)
                payload[key] = int(moment.timestamp())
        return payload