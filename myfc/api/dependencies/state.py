"""Accessors for the objects ``create_app`` stores on ``app.state``."""

from fastapi import Request

from myfc.api.services.bookmark_service import BookmarkService
from myfc.config import AppConfig
from myfc.db.database import Database
from myfc.infrastructure.cache import SessionCache


def get_config(request: Request) -> AppConfig:
    return request.app.state.cfg


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_session_cache(request: Request) -> SessionCache:
    return request.app.state.session_cache


def get_bookmark_service(request: Request) -> BookmarkService:
    return BookmarkService(get_database(request))
