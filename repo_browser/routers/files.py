# repo_browser/routers/files.py
from __future__ import annotations
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_file_service
from ..errors import UpstreamFetchError
from ..models import ErrorBody, FileContent, FileRecord
from ..services.files import FileQueryService

router = APIRouter(
    tags=["files"],
    responses={400: {"model": ErrorBody}, 429: {"model": ErrorBody}, 500: {"model": ErrorBody}},
)
log = structlog.get_logger(__name__)


def _upstream_failed(event: str, message: str, exc: UpstreamFetchError) -> HTTPException:
    log.error(event, path=exc.path, status=exc.status_code, error=str(exc))
    return HTTPException(500, message)


@router.get("/files", response_model=List[FileRecord])
async def list_files(service: FileQueryService = Depends(get_file_service)):
    try:
        return await service.list_all()
    except UpstreamFetchError as exc:
        raise _upstream_failed("list_files_failed", "Failed to fetch files", exc) from exc


@router.get("/file/{file_path:path}", response_model=FileContent)
async def get_file(file_path: str, service: FileQueryService = Depends(get_file_service)):
    try:
        return await service.get_file(file_path)
    except UpstreamFetchError as exc:
        raise _upstream_failed("get_file_failed", "Failed to fetch file", exc) from exc


@router.get("/search", response_model=List[FileRecord])
async def search_files(
    query: Optional[str] = None,
    service: FileQueryService = Depends(get_file_service),
):
    try:
        return await service.search_by_name(query)
    except UpstreamFetchError as exc:
        raise _upstream_failed("search_files_failed", "Failed to search files", exc) from exc


@router.get("/filter", response_model=List[FileRecord])
async def filter_files(
    data_structure: Optional[str] = Query(default=None, alias="dataStructure"),
    service: FileQueryService = Depends(get_file_service),
):
    log.info("filter_requested", data_structure=data_structure)
    try:
        return await service.filter_by_path(data_structure)
    except UpstreamFetchError as exc:
        raise _upstream_failed("filter_files_failed", "Failed to filter files", exc) from exc
