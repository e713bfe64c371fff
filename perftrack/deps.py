# perftrack/deps.py
from fastapi import Depends, Request

from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.identity import IdentityProvider
from perftrack.settings import Settings


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_docs(request: Request) -> DocumentStore:
    return request.app.state.docs


def get_metrics(request: Request) -> MetricsStore:
    return request.app.state.metrics


def get_identity(docs: DocumentStore = Depends(get_docs)) -> IdentityProvider:
    return IdentityProvider(docs)
