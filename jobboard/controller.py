"""HTTP handlers for the job endpoints."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from flask import Response, g, jsonify, request
from pymongo.errors import PyMongoError

from jobboard.jobs import Post
from jobboard.validation import verify_contract_type, verify_schedule

PAGE_SIZE = 12

_INVALID_HEX = "the provided hex string is not a valid ObjectID"
_FAILURES = (ValueError, LookupError, PyMongoError)
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _reply(status: int, **payload: Any) -> Response:
    response = jsonify(payload)
    response.status_code = status
    return response


def _object_id(value: Any) -> ObjectId:
    if not isinstance(value, str):
        raise ValueError(_INVALID_HEX)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValueError(_INVALID_HEX) from None


def _read_post() -> Post:
    """Decode the request body as a job post."""
    raw = request.get_data()
    if not raw.strip():
        raise ValueError("EOF")
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ValueError(str(exc)) from None
    return Post.from_dict({} if data is None else data)


def _page(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def build_job_filter(args: Mapping[str, str]) -> dict[str, Any]:
    """Turn query parameters into a job filter; raise ValueError on a bad value."""
    query: dict[str, Any] = {}
    user_id = args.get("user_id", "")
    if user_id:
        query["user_id"] = _object_id(user_id)
    company_id = args.get("company_id", "")
    if company_id:
        query["company_id"] = _object_id(company_id)
    search = args.get("search", "")
    if search:
        query["$or"] = [
            {name: {"$regex": search, "$options": "i"}}
            for name in ("title", "short_description", "description")
        ]
    schedule = args.get("schedule", "")
    if schedule:
        verify_schedule(schedule)
        query["schedule"] = schedule
    contract = args.get("contract", "")
    if contract:
        verify_contract_type(contract)
        query["contract_type"] = contract
    industry = args.get("industry", "")
    if industry:
        query["industry"] = industry
    return query


class JobController:
    """Answers job requests using a job service."""

    def __init__(self, service: Any) -> None:
        self._service = service

    def new_job(self) -> Response:
        try:
            job = _read_post()
        except ValueError as exc:
            return _reply(400, message=str(exc))
        user_id = g.get("user_id")
        if not user_id:
            return _reply(401, message="Invalid user ID")
        try:
            company_id = _object_id(user_id)
        except ValueError as exc:
            return _reply(400, message=str(exc))
        try:
            self._service.new_job(replace(job, company_id=company_id))
        except _FAILURES as exc:
            return _reply(400, message=str(exc))
        return _reply(200, message="job created succesfully")

    def get_jobs(self) -> Response:
        page = _page(request.args.get("page", "1"))
        try:
            query = build_job_filter(request.args)
        except ValueError as exc:
            return _reply(400, message=str(exc))
        try:
            jobs, total = self._service.get_jobs(query, page)
        except _FAILURES as exc:
            return _reply(400, message=str(exc))
        return _reply(
            200,
            message="successful request",
            data=[job.to_json() for job in jobs],
            page=page,
            page_zise=PAGE_SIZE,
            total=total,
            total_pages=math.ceil(total / PAGE_SIZE),
        )

    def update_job(self) -> Response:
        try:
            job = _read_post()
        except ValueError as exc:
            return _reply(400, message=str(exc))
        try:
            self._service.update_job(job)
        except _FAILURES as exc:
            return _reply(400, message=str(exc))
        return _reply(200, message="job updated succesfully")

    def delete_job(self, id: str) -> Response:
        user_id = g.get("user_id")
        if not user_id:
            return _reply(401, message="Invalid user ID")
        try:
            company_id = _object_id(user_id)
        except ValueError as exc:
            return _reply(400, message=str(exc))
        if not id:
            return _reply(400, message="no id provided")
        try:
            job_id = _object_id(id)
        except ValueError as exc:
            return _reply(400, message=str(exc))
        try:
            self._service.delete_job(job_id, company_id)
        except _FAILURES as exc:
            return _reply(400, message=str(exc))
        return _reply(200, message="Job deleted successfully")

    def apply_to_job(self, id: str) -> Response:
        user_id = g.get("user_id")
        if not user_id:
            return _reply(401, message="Invalid user ID")
        if not id:
            return _reply(400, message="no id provided")
        if not isinstance(user_id, str):
            return _reply(400, message=_INVALID_HEX)
        try:
            self._service.apply_to_job(user_id, id)
        except _FAILURES as exc:
            return _reply(400, message=str(exc))
        return _reply(200, message="Application submitted successfully")