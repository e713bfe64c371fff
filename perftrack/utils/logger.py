# perftrack/utils/logger.py
import logging
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level.upper(), logging.INFO))


def log_activity(docs, user_id: str, action: str, metadata: dict | None = None):
    docs.activity_logs.insert_one({
        "user_id": user_id,
        "action": action,
        "timestamp": datetime.now(timezone.utc),
        "metadata": metadata or {},
    })
