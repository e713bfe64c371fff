"""
Create the first ADMIN login (there is no signup route for admins).

    python -m perftrack.scripts.create_admin admin@example.com 'change-me'

Reads MONGO_URI / MONGO_DB from the environment like the API does.
"""
import argparse
import logging

from perftrack.db.mongo import DocumentStore
from perftrack.errors import Conflict
from perftrack.identity import IdentityProvider
from perftrack.settings import get_settings
from perftrack.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def create_admin(docs: DocumentStore, email: str, password: str) -> dict:
    docs.ensure_indexes()
    return IdentityProvider(docs).create_user(email, password, "ADMIN")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an ADMIN login")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    docs = DocumentStore(settings.mongo_uri, settings.mongo_db)
    try:
        user = create_admin(docs, args.email, args.password)
    except Conflict:
        logger.error("a user with email %s already exists", args.email)
        return 1
    finally:
        docs.close()

    logger.info("admin created id=%s", user["_id"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
