"""
FastAPI dependencies resolving the components built at startup
"""

from fastapi import Request

from devicewatch.core.config import Settings
from devicewatch.database.connection import Database
from devicewatch.database.reading_store import ReadingStore
from devicewatch.services.insights import InsightClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_store(request: Request) -> ReadingStore:
    return request.app.state.store


def get_insight_client(request: Request) -> InsightClient:
    return request.app.state.insight_client
