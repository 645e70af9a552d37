# repo_browser/services/files.py
from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Dict, List, Optional

import structlog

from ..cache import TTLCache
from ..errors import InvalidArgument, UpstreamFetchError
from ..metrics import record_cache
from ..models import FileContent, FileRecord, RemoteFile
from .github import ContentsProvider
from .tree import flatten_tree

log = structlog.get_logger(__name__)

ALL_FILES_KEY = "allFiles"
FILE_KEY_PREFIX = "file-"


def _traversal_done(task: asyncio.Task) -> None:
    # reads the exception even when every waiter was cancelled
    if not task.cancelled() and task.exception() is not None:
        log.warning("shared_traversal_failed", key=ALL_FILES_KEY, error=str(task.exception()))


def file_cache_key(path: str) -> str:
    return f"{FILE_KEY_PREFIX}{path}"


def decode_content(remote: RemoteFile) -> str:
    """Base64 body -> text. Invalid UTF-8 sequences are replaced, not fatal."""
    if remote.encoding != "base64":
        raise UpstreamFetchError(
            f"unsupported content encoding {remote.encoding!r} for {remote.path or remote.name!r}",
            path=remote.path,
        )
    try:
        raw = base64.b64decode(remote.content)
    except (binascii.Error, ValueError) as exc:
        raise UpstreamFetchError(f"undecodable content for {remote.path or remote.name!r}", path=remote.path) from exc
    return raw.decode("utf-8", errors="replace")


class FileQueryService:
    """
    The four read operations of the API.

    Search and filter run over `list_all()`, so all three share the cached
    aggregate listing. Cached values are never mutated; callers get a fresh
    list each time.
    """

    def __init__(
        self,
        provider: ContentsProvider,
        cache: TTLCache,
        ttl: Optional[float] = None,
        single_flight: bool = True,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._ttl = ttl
        self._single_flight = single_flight
        self._inflight: Dict[str, asyncio.Task] = {}

    # ------------------------------ listing ------------------------------

    async def list_all(self) -> List[FileRecord]:
        cached = self._cache.get(ALL_FILES_KEY)
        record_cache("all", cached is not None)
        if cached is not None:
            log.info("cache_hit", key=ALL_FILES_KEY)
            return list(cached)
        if self._single_flight:
            files = await self._shared_load()
        else:
            files = await self._load_all()
        return list(files)

    async def _load_all(self) -> List[FileRecord]:
        files = await flatten_tree(self._provider)
        self._cache.set(ALL_FILES_KEY, files, self._ttl)
        log.info("cache_set", key=ALL_FILES_KEY, files=len(files))
        return files

    async def _load_and_release(self) -> List[FileRecord]:
        try:
            return await self._load_all()
        finally:
            self._inflight.pop(ALL_FILES_KEY, None)

    async def _shared_load(self) -> List[FileRecord]:
        task = self._inflight.get(ALL_FILES_KEY)
        if task is None:
            task = asyncio.ensure_future(self._load_and_release())
            task.add_done_callback(_traversal_done)
            self._inflight[ALL_FILES_KEY] = task
        else:
            log.info("traversal_joined", key=ALL_FILES_KEY)
        # one waiter going away must not cancel the traversal for the rest
        return await asyncio.shield(task)

    # ------------------------------ single file ------------------------------

    async def get_file(self, path: Optional[str]) -> FileContent:
        if not path:
            raise InvalidArgument("File path is required")
        key = file_cache_key(path)
        cached = self._cache.get(key)
        record_cache("file", cached is not None)
        if cached is not None:
            log.info("cache_hit", key=key)
            return cached
        remote = await self._provider.get_file(path)
        content = FileContent(name=remote.name, content=decode_content(remote))
        self._cache.set(key, content, self._ttl)
        return content

    # ------------------------------ queries ------------------------------

    async def search_by_name(self, query: Optional[str]) -> List[FileRecord]:
        if not query:
            raise InvalidArgument("Query is required")
        needle = query.lower()
        return [f for f in await self.list_all() if needle in f.name.lower()]

    async def filter_by_path(self, data_structure: Optional[str]) -> List[FileRecord]:
        if not data_structure:
            raise InvalidArgument("Data structure is required")
        needle = data_structure.lower()
        return [f for f in await self.list_all() if needle in f.path.lower()]
