[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jobboard"
version = "0.1.0"
description = "A job board HTTP API backed by MongoDB, with JWT-protected posting, editing, removal of and applying to jobs."
requires-python = ">=3.10"
keywords = ["jobs", "job-board", "flask", "mongodb", "jwt", "rest-api"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]
dependencies = [
    "flask",
    "pymongo",
    "pyjwt",
    "bcrypt",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
jobboard = "jobboard.app:main"

[tool.hatch.build.targets.wheel]
packages = ["jobboard"]

[tool.pytest.ini_options]
addopts = "-ra"
