"""Connection to the MongoDB server."""

from __future__ import annotations

from pymongo import MongoClient

CONNECT_TIMEOUT_MS = 10_000


def new_mongo_client(uri: str) -> MongoClient:
    """Connect to MongoDB at ``uri`` and make sure the server answers a ping.

    Raises the driver's error when the URI is malformed or the server cannot
    be reached within ten seconds.
    """
    client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=CONNECT_TIMEOUT_MS)
    try:
        client.admin.command("ping")
    except Exception:
        client.close()
        raise
    return client