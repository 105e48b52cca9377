"""Job posts and applications."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from bson import ObjectId

from jobboard.entities import (
    NIL_OBJECT_ID,
    ZERO_TIME,
    Location,
    _format_time,
    _get,
    _require_mapping,
    _to_datetime,
    _to_object_id,
)


def _strings(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"field {key!r} must be a list of strings")
    return list(value)


def _is_set(oid: ObjectId | None) -> bool:
    return oid is not None and oid != NIL_OBJECT_ID


@dataclass
class Post:
    """A job offer published by a company."""

    id: ObjectId | None = None
    title: str = ""
    short_description: str = ""
    description: str = ""
    salary: float = 0.0
    benefits: list[str] = field(default_factory=list)
    location: Location = field(default_factory=Location)
    industry: str = ""
    schedule: str = ""
    contract_type: str = ""
    is_formal_job: bool = False
    published: bool = False
    company_id: ObjectId | None = None
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Post:
        """Build a post from a request body or a stored document."""
        data = _require_mapping(data, "job")
        return cls(
            id=_to_object_id(data.get("_id")),
            title=_get(data, "title", str),
            short_description=_get(data, "short_description", str),
            description=_get(data, "description", str),
            salary=_get(data, "salary", float),
            benefits=_strings(data, "benefits"),
            location=Location.from_dict(_get(data, "location", dict)),
            industry=_get(data, "industry", str),
            schedule=_get(data, "schedule", str),
            contract_type=_get(data, "contract_type", str),
            is_formal_job=_get(data, "is_formal_job", bool),
            published=_get(data, "published", bool),
            company_id=_to_object_id(data.get("company_id")),
            created_at=_to_datetime(data.get("created_at")),
            updated_at=_to_datetime(data.get("updated_at")),
        )

    def _export(
        self, oid: Callable[[ObjectId], Any], moment: Callable[[datetime], Any]
    ) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if _is_set(self.id):
            out["_id"] = oid(self.id)
        out.update(
            title=self.title,
            short_description=self.short_description,
            description=self.description,
            salary=self.salary,
            benefits=list(self.benefits),
            location=self.location.to_dict(),
            industry=self.industry,
            schedule=self.schedule,
            contract_type=self.contract_type,
            is_formal_job=self.is_formal_job,
            published=self.published,
        )
        if _is_set(self.company_id):
            out["company_id"] = oid(self.company_id)
        out["created_at"] = moment(self.created_at)
        out["updated_at"] = moment(self.updated_at)
        return out

    def to_document(self) -> dict[str, Any]:
        """Return the database document; unset ids are left out."""
        return self._export(lambda value: value, lambda value: value)

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-ready mapping with hex ids and RFC 3339 times."""
        return self._export(str, _format_time)


@dataclass
class PostWithCompany:
    """A job post joined with the name and logo of the company behind it."""

    post: Post = field(default_factory=Post)
    company_name: str = ""
    company_logo: str = ""

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> PostWithCompany:
        data = _require_mapping(data, "job")
        return cls(
            post=Post.from_dict(data),
            company_name=_get(data, "company_name", str),
            company_logo=_get(data, "company_logo", str),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            **self.post.to_json(),
            "company_name": self.company_name,
            "company_logo": self.company_logo,
        }


@dataclass
class Application:
    """A user's application to a job post."""

    id: ObjectId | None = None
    user_id: ObjectId | None = None
    job_id: ObjectId | None = None
    applied_at: datetime = ZERO_TIME

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"_id": self.id} if _is_set(self.id) else {}
        document["user_id"] = self.user_id or NIL_OBJECT_ID
        document["job_id"] = self.job_id or NIL_OBJECT_ID
        document["applied_at"] = self.applied_at
        return document