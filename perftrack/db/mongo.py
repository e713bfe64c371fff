# perftrack/db/mongo.py
from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Connect-once handle on the document database.

    The first ``connect()`` builds the client; every later call (from any
    thread) gets the cached database back. Pass ``client=`` to wrap an
    already-built client (tests hand in a mongomock client).
    """

    def __init__(self, uri: str, db_name: str, client: Optional[MongoClient] = None):
        self.uri = uri
        self.db_name = db_name
        self._client = client
        self._db: Optional[Database] = None
        self._lock = threading.Lock()

    def connect(self) -> Database:
        if self._db is not None:
            return self._db
        with self._lock:
            if self._db is None:
                if self._client is None:
                    logger.info("connecting to mongo db=%s", self.db_name)
                    self._client = MongoClient(self.uri)
                self._db = self._client[self.db_name]
        return self._db

    @property
    def db(self) -> Database:
        return self.connect()

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None
            self._db = None

    # --- Collections (one source of truth) ---
    @property
    def athletes(self) -> Collection:
        return self.db["athletes"]

    @property
    def coaches(self) -> Collection:
        return self.db["coaches"]

    @property
    def teams(self) -> Collection:
        return self.db["teams"]

    @property
    def groups(self) -> Collection:
        return self.db["groups"]

    @property
    def goals(self) -> Collection:
        return self.db["goals"]

    @property
    def assessments(self) -> Collection:
        return self.db["assessments"]

    @property
    def templates(self) -> Collection:
        return self.db["templates"]

    @property
    def tags(self) -> Collection:
        return self.db["tags"]

    @property
    def tag_folders(self) -> Collection:
        return self.db["tag_folders"]

    @property
    def users(self) -> Collection:
        return self.db["users"]

    @property
    def activity_logs(self) -> Collection:
        return self.db["activity_logs"]

    def ensure_indexes(self) -> None:
        # identity
        self.users.create_index("email", unique=True)
        self.users.create_index("object_id")

        # roster
        self.athletes.create_index("u")
        self.athletes.create_index([("last_name", ASCENDING), ("first_name", ASCENDING)])
        self.teams.create_index("coach")
        self.groups.create_index("head_coach")

        # goals / assessments
        self.goals.create_index([("athlete", ASCENDING), ("tech", ASCENDING)])
        self.assessments.create_index([("athlete", ASCENDING), ("created_at", DESCENDING)])

        # activity
        self.activity_logs.create_index([("user_id", ASCENDING), ("timestamp", DESCENDING)])
