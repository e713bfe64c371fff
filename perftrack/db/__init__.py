# perftrack/db/__init__.py
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore

__all__ = ["DocumentStore", "MetricsStore"]
