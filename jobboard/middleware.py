"""Request middlewares: token validation, company-only access and CORS headers.

A middleware receives ``call_next``, which produces the rest of the chain's
response, and either calls it or answers early.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import jwt
from flask import Response, g, jsonify, make_response, request

Middleware = Callable[[Callable[[], Any]], Any]

_HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


def _abort(status: int, message: str) -> Response:
    response = jsonify({"error": message})
    response.status_code = status
    return response


def validate_token() -> Middleware:
    """Check the HMAC-signed token in the Authorization header.

    On success the token's role and user id are stored on ``flask.g``.
    """

    def middleware(call_next: Callable[[], Any]) -> Any:
        raw = request.headers.get("Authorization", "")
        if not raw:
            return _abort(401, "token required")
        try:
            algorithm = jwt.get_unverified_header(raw).get("alg")
            if algorithm not in _HMAC_ALGORITHMS:
                return _abort(401, f"unexpected signing method {algorithm}")
            claims = jwt.decode(raw, os.environ.get("SigningKey", ""), algorithms=[algorithm])
        except jwt.PyJWTError as exc:
            return _abort(401, str(exc))
        g.role = claims.get("role")
        g.user_id = claims.get("userId")
        return call_next()

    return middleware


def only_company_access() -> Middleware:
    """Let through only requests whose token carries the company role."""

    def middleware(call_next: Callable[[], Any]) -> Any:
        if g.get("role") != "company":
            return _abort(403, "admin role required")
        return call_next()

    return middleware


def cors_config() -> Middleware:
    """Add CORS headers and answer preflight requests directly."""

    def middleware(call_next: Callable[[], Any]) -> Any:
        if request.method == "OPTIONS":
            response = make_response("", 200)
        else:
            response = make_response(call_next())
        origin = request.headers.get("Origin", "")
        if origin in os.environ.get("ALLOWED_ORIGINS", "").split(","):
            response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        return response

    return middleware