from dataclasses import dataclass
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from jobboard.entities import NIL_OBJECT_ID, Account, Company, Role, User
from jobboard.jobs import Application, Post
from jobboard.repositories import (
    PAGE_LIMIT,
    AuthRepository,
    JobNotDeletedError,
    JobRepository,
    build_jobs_pipeline,
)


@dataclass
class _Deleted:
    deleted_count: int


class _Cursor:
    def __init__(self, documents):
        self._documents = documents
        self.closed = False

    def __iter__(self):
        return iter(self._documents)

    def close(self):
        self.closed = True


def _matches(document, query):
    for key, expected in query.items():
        value = document
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return False
            value = value[part]
        if value != expected:
            return False
    return True


class FakeCollection:
    def __init__(self):
        self.documents = []
        self.pipelines = []
        self.aggregate_result = []
        self.cursors = []
        self.updates = []

    def insert_one(self, document):
        self.documents.append(document)
        return document.get("_id")

    def find_one(self, query):
        return next((d for d in self.documents if _matches(d, query)), None)

    def count_documents(self, query):
        return sum(1 for d in self.documents if _matches(d, query))

    def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        cursor = _Cursor(self.aggregate_result)
        self.cursors.append(cursor)
        return cursor

    def update_one(self, query, update):
        self.updates.append((query, update))

    def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return _Deleted(1)
        return _Deleted(0)


class FakeClient:
    def __init__(self):
        self.databases = {}

    def __getitem__(self, name):
        return self.databases.setdefault(name, _FakeDatabase())


class _FakeDatabase(dict):
    def __missing__(self, name):
        collection = FakeCollection()
        self[name] = collection
        return collection


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("DATABASE", "jobboard_test")
    return FakeClient()


def _collection(client, name):
    return client["jobboard_test"][name]


def test_pipeline_first_page_and_stages():
    user = ObjectId()
    pipeline = build_jobs_pipeline({"user_id": user, "industry": "it"}, 1)
    assert pipeline[0]["$lookup"]["from"] == "applications"
    expr = pipeline[0]["$lookup"]["pipeline"][0]["$match"]["$expr"]["$and"]
    assert expr[1] == {"$eq": ["$user_id", user]}
    assert pipeline[1] == {"$match": {"userApplications": {"$size": 0}}}
    assert pipeline[2] == {"$match": {"industry": "it"}}
    assert pipeline[3] == {"$skip": 0}
    assert pipeline[4] == {"$limit": PAGE_LIMIT}
    assert pipeline[5]["$lookup"]["from"] == "users"
    assert pipeline[7]["$addFields"]["company_name"] == "$company.company.name"


def test_pipeline_skip_grows_by_page_limit():
    first = build_jobs_pipeline({}, 1)[3]["$skip"]
    second = build_jobs_pipeline({}, 2)[3]["$skip"]
    assert second - first == PAGE_LIMIT


def test_pipeline_does_not_mutate_filter():
    original = {"user_id": ObjectId(), "schedule": "matutino"}
    snapshot = dict(original)
    build_jobs_pipeline(original, 1)
    assert original == snapshot


def test_pipeline_nil_user_is_unset():
    pipeline = build_jobs_pipeline({"user_id": NIL_OBJECT_ID}, 1)
    expr = pipeline[0]["$lookup"]["pipeline"][0]["$match"]["$expr"]["$and"]
    assert expr[1] == {"$eq": ["$user_id", None]}
    assert pipeline[2] == {"$match": {}}


def test_auth_create_and_find(client):
    repo = AuthRepository(client)
    user = User(
        id=ObjectId(),
        name="Ana",
        account=Account(email="ana@example.com"),
        role=Role.COMPANY,
        company=Company(name="Acme"),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    repo.create(user)
    found = repo.find_by_email("ana@example.com")
    assert found == user


def test_auth_find_missing_returns_none(client):
    assert AuthRepository(client).find_by_email("nobody@example.com") is None


def test_job_create_stores_document(client):
    post = Post(id=ObjectId(), title="dev", company_id=ObjectId())
    JobRepository(client).create(post)
    assert _collection(client, "jobs").documents == [post.to_document()]


def test_get_all_counts_and_converts(client):
    jobs = _collection(client, "jobs")
    company = ObjectId()
    jobs.documents = [{"industry": "it"}, {"industry": "it"}, {"industry": "retail"}]
    job_id = ObjectId()
    jobs.aggregate_result = [
        {
            "_id": job_id,
            "title": "dev",
            "company_id": company,
            "company": {"company": {"name": "Acme"}},
            "userApplications": [],
            "company_name": "Acme",
            "company_logo": "logo.png",
        }
    ]
    results, total = JobRepository(client).get_all({"industry": "it"}, 1)
    assert total == 2
    assert len(results) == 1
    assert results[0].post.id == job_id
    assert results[0].company_name == "Acme"
    assert results[0].company_logo == "logo.png"
    assert jobs.pipelines[0] == build_jobs_pipeline({"industry": "it"}, 1)
    assert jobs.cursors[0].closed


def test_update_sets_document_by_id(client):
    post = Post(id=ObjectId(), title="dev")
    JobRepository(client).update(post)
    assert _collection(client, "jobs").updates == [
        ({"_id": post.id}, {"$set": post.to_document()})
    ]


def test_delete_owned_job(client):
    company, job_id = ObjectId(), ObjectId()
    jobs = _collection(client, "jobs")
    jobs.documents = [{"_id": job_id, "company_id": company}]
    JobRepository(client).delete(job_id, company)
    assert jobs.documents == []


def test_delete_foreign_job_raises(client):
    job_id = ObjectId()
    jobs = _collection(client, "jobs")
    jobs.documents = [{"_id": job_id, "company_id": ObjectId()}]
    with pytest.raises(JobNotDeletedError, match="no se pudo eliminar el empleo"):
        JobRepository(client).delete(job_id, ObjectId())
    assert len(jobs.documents) == 1


def test_apply_and_check_applied(client):
    repo = JobRepository(client)
    user, job_id = ObjectId(), ObjectId()
    assert repo.is_user_already_applied(user, job_id) is False
    repo.apply_to_job(Application(id=ObjectId(), user_id=user, job_id=job_id))
    assert repo.is_user_already_applied(user, job_id) is True
    assert repo.is_user_already_applied(ObjectId(), job_id) is False