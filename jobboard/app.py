"""The job board web application and the command that serves it."""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from flask import Flask

from jobboard.controller import JobController
from jobboard.db import new_mongo_client
from jobboard.middleware import cors_config, only_company_access, validate_token
from jobboard.repositories import JobRepository
from jobboard.routes import Router
from jobboard.service import JobService

ROUTER_KEY = "jobboard.router"


def create_app(client: Any) -> Flask:
    """Build the application around a MongoDB client."""
    app = Flask("jobboard")
    router = Router(app)
    router.use(cors_config())

    jobs = JobController(JobService(JobRepository(client)))

    router.put("/api/job", jobs.update_job, validate_token(), only_company_access())
    router.post("/api/job", jobs.new_job, validate_token(), only_company_access())
    router.get("/api/job", jobs.get_jobs)
    router.delete("/api/job/:id", jobs.delete_job, validate_token(), only_company_access())
    router.post("/api/job/:id/apply", jobs.apply_to_job, validate_token())

    app.extensions[ROUTER_KEY] = router
    return app


def main(argv: Sequence[str] | None = None) -> None:
    """Load ``.env``, connect to MongoDB and serve the API on ``PORT``."""
    parser = argparse.ArgumentParser(prog="jobboard", description="Serve the job board API.")
    parser.parse_args(argv)

    env_file = Path(".env")
    if not env_file.is_file():
        raise SystemExit("Error loading env file")
    load_dotenv(env_file)

    uri = os.environ.get("MONGODB_URI", "")
    if not uri:
        raise SystemExit("MONGODB_URI not found")
    try:
        client = new_mongo_client(uri)
    except Exception as exc:
        raise SystemExit(f"Cannot connect to MongoDB {exc}") from exc

    try:
        app = create_app(client)
        app.extensions[ROUTER_KEY].serve(os.environ.get("PORT", ""))
    finally:
        client.close()