from __future__ import annotations
from fastapi import Request
from .cache import TTLCache
from .config import Settings
from .services.files import FileQueryService

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache

def get_file_service(request: Request) -> FileQueryService:
    return request.app.state.file_service
