"""MongoDB storage for users, job posts and applications."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from bson import ObjectId

from jobboard.entities import NIL_OBJECT_ID, User
from jobboard.jobs import Application, Post, PostWithCompany

PAGE_LIMIT = 10

USERS = "users"
JOBS = "jobs"
APPLICATIONS = "applications"


class JobNotDeletedError(LookupError):
    """No job matched both the given id and the given company."""

    def __init__(self, message: str = "no se pudo eliminar el empleo") -> None:
        super().__init__(message)


def _collection(client: Any, name: str) -> Any:
    return client[os.environ.get("DATABASE", "")][name]


def build_jobs_pipeline(filter: Mapping[str, Any], page: int) -> list[dict[str, Any]]:
    """Return the aggregation pipeline listing one page of jobs.

    Jobs the user given as ``user_id`` in the filter already applied to are
    left out; the remaining filter keys match job fields. Each job is joined
    with the name and logo of its company.
    """
    match = dict(filter)
    user_id = match.pop("user_id", None)
    if user_id == NIL_OBJECT_ID:
        user_id = None
    skip = (page - 1) * PAGE_LIMIT
    return [
        {
            "$lookup": {
                "from": APPLICATIONS,
                "let": {"jobId": "$_id"},
                "pipeline": [
                    {
                        "$match": {
                            "$expr": {
                                "$and": [
                                    {"$eq": ["$job_id", "$$jobId"]},
                                    {"$eq": ["$user_id", user_id]},
                                ]
                            }
                        }
                    }
                ],
                "as": "userApplications",
            }
        },
        {"$match": {"userApplications": {"$size": 0}}},
        {"$match": match},
        {"$skip": skip},
        {"$limit": PAGE_LIMIT},
        {
            "$lookup": {
                "from": USERS,
                "localField": "company_id",
                "foreignField": "_id",
                "as": "company",
            }
        },
        {"$unwind": {"path": "$company", "preserveNullAndEmptyArrays": True}},
        {
            "$addFields": {
                "company_name": "$company.company.name",
                "company_logo": "$company.company.logo",
            }
        },
    ]


class AuthRepository:
    """Stores and looks up user accounts."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def create(self, user: User) -> Any:
        """Insert a new user and return the insert result."""
        return _collection(self._client, USERS).insert_one(user.to_document())

    def find_by_email(self, email: str) -> User | None:
        """Return the user with this e-mail address, or None if there is none."""
        document = _collection(self._client, USERS).find_one({"account.email": email})
        return None if document is None else User.from_dict(document)


class JobRepository:
    """Stores job posts and the applications made to them."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def create(self, job: Post) -> None:
        _collection(self._client, JOBS).insert_one(job.to_document())

    def get_all(
        self, filter: Mapping[str, Any], page: int
    ) -> tuple[list[PostWithCompany], int]:
        """Return one page of matching jobs and the count of jobs matching ``filter``."""
        collection = _collection(self._client, JOBS)
        total = collection.count_documents(dict(filter))
        cursor = collection.aggregate(build_jobs_pipeline(filter, page))
        try:
            jobs = [PostWithCompany.from_document(document) for document in cursor]
        finally:
            close = getattr(cursor, "close", None)
            if close is not None:
                close()
        return jobs, total

    def update(self, job: Post) -> None:
        _collection(self._client, JOBS).update_one(
            {"_id": job.id}, {"$set": job.to_document()}
        )

    def delete(self, job_id: ObjectId, user_id: ObjectId) -> None:
        """Delete a job owned by the company ``user_id``; raise if none was deleted."""
        result = _collection(self._client, JOBS).delete_one(
            {"_id": job_id, "company_id": user_id}
        )
        if result.deleted_count == 0:
            raise JobNotDeletedError()

    def apply_to_job(self, application: Application) -> None:
        _collection(self._client, APPLICATIONS).insert_one(application.to_document())

    def is_user_already_applied(self, user_id: ObjectId, job_id: ObjectId) -> bool:
        count = _collection(self._client, APPLICATIONS).count_documents(
            {"user_id": user_id, "job_id": job_id}
        )
        return count > 0