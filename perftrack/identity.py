# perftrack/identity.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import DuplicateKeyError

from perftrack.auth import ROLES, get_password_hash, verify_password
from perftrack.db.mongo import DocumentStore
from perftrack.errors import BadRequest, Conflict

logger = logging.getLogger(__name__)


class IdentityProvider:
    """Login accounts, each linked to one athlete or coach document (``object_id``)."""

    def __init__(self, docs: DocumentStore):
        self.docs = docs

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.docs.users.find_one({"email": (email or "").strip().lower()})

    def create_user(self, email: str, password: str, role: str, object_id: Optional[str] = None) -> dict:
        email = (email or "").strip().lower()
        if not email or not password:
            raise BadRequest("Email and password are required")
        if role not in ROLES:
            raise BadRequest(f"Invalid role: {role}")
        if self.get_by_email(email):
            raise Conflict("A user with this email already exists")

        user = {
            "email": email,
            "password": get_password_hash(password),
            "role": role,
            "object_id": object_id,
            "created_at": datetime.now(timezone.utc),
        }
        try:
            res = self.docs.users.insert_one(user)
        except DuplicateKeyError:
            raise Conflict("A user with this email already exists")
        user["_id"] = res.inserted_id
        logger.info("identity created role=%s object_id=%s", role, object_id)
        return user

    def authenticate(self, email: str, password: str) -> Optional[dict]:
        user = self.get_by_email(email)
        if not user or not user.get("password"):
            return None
        if not verify_password(password, user["password"]):
            return None
        return user

    def delete_by_object_id(self, object_id: str) -> int:
        res = self.docs.users.delete_many({"object_id": object_id})
        if res.deleted_count:
            logger.info("identity removed object_id=%s", object_id)
        return res.deleted_count
