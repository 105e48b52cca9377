"""Business rules for creating, listing, editing and applying to job posts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from jobboard.entities import NIL_OBJECT_ID
from jobboard.jobs import Application, Post, PostWithCompany

_INVALID_HEX = "the provided hex string is not a valid ObjectID"


class ServiceError(ValueError):
    """A request broke one of the job rules."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_hex(value: str) -> ObjectId:
    if not isinstance(value, str):
        raise ValueError(_INVALID_HEX)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValueError(_INVALID_HEX) from None


def _normalized(job: Post) -> Post:
    """Return a copy with tidied text; raise if a required field is missing."""
    job = replace(
        job,
        title=job.title.lower().strip(),
        short_description=job.short_description.strip(),
        description=job.description.strip(),
    )
    if (
        not job.title
        or not job.short_description
        or not job.description
        or job.company_id is None
        or job.company_id == NIL_OBJECT_ID
        or not job.contract_type
        or not job.industry
        or not job.schedule
    ):
        raise ServiceError("some required fields are empty")
    return job


class JobService:
    """Applies the job rules on top of a job repository."""

    def __init__(self, repository: Any) -> None:
        self._repository = repository

    def new_job(self, job: Post) -> None:
        """Validate and store a new formal job post."""
        job = _normalized(job)
        now = _now()
        job = replace(
            job,
            id=ObjectId(),
            is_formal_job=True,
            created_at=now,
            updated_at=now,
        )
        self._repository.create(job)

    def get_jobs(
        self, filter: Mapping[str, Any], page: int
    ) -> tuple[list[PostWithCompany], int]:
        return self._repository.get_all(filter, page)

    def update_job(self, job: Post) -> None:
        """Validate and save changes to an existing job post."""
        job = replace(_normalized(job), updated_at=_now())
        self._repository.update(job)

    def delete_job(self, job_id: ObjectId, user_id: ObjectId) -> None:
        self._repository.delete(job_id, user_id)

    def apply_to_job(self, user_id: str, job_id: str) -> None:
        """Record that a user applied to a job; each user may apply only once."""
        user = _parse_hex(user_id)
        job = _parse_hex(job_id)
        if self._repository.is_user_already_applied(user, job):
            raise ServiceError("user has already applied to this job")
        application = Application(
            id=ObjectId(), user_id=user, job_id=job, applied_at=_now()
        )
        self._repository.apply_to_job(application)