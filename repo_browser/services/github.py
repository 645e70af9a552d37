# repo_browser/services/github.py
from __future__ import annotations

from typing import Any, List, Optional, Protocol
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from ..config import Settings
from ..errors import UpstreamFetchError
from ..metrics import record_upstream
from ..models import RemoteFile, TreeEntry

log = structlog.get_logger(__name__)

_LISTED_TYPES = {"file", "dir"}


class ContentsProvider(Protocol):
    async def list_directory(self, path: str = "") -> List[TreeEntry]: ...

    async def get_file(self, path: str) -> RemoteFile: ...


def build_client(cfg: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    headers = {
        "Authorization": f"Bearer {cfg.GITHUB_TOKEN.get_secret_value()}",
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": f"repo-browser/{cfg.APP_VERSION}",
    }
    return httpx.AsyncClient(
        base_url=cfg.repo_base_url,
        headers=headers,
        timeout=httpx.Timeout(cfg.GITHUB_TIMEOUT_SECONDS),
        transport=transport,
    )


class GitHubContentsProvider:
    """
    Reads one repository through `GET <base>/<owner>/<repo>/contents/<path>`.

    Every failure (transport, non-2xx, bad JSON, unexpected shape) surfaces
    as UpstreamFetchError chained to its cause.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @staticmethod
    def _url(path: str) -> str:
        return "contents/" + quote(path, safe="/")

    async def _get_json(self, path: str) -> Any:
        try:
            resp = await self._client.get(self._url(path))
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            record_upstream("http_error")
            status = exc.response.status_code
            raise UpstreamFetchError(
                f"contents API returned {status} for {path!r}", path=path, status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            record_upstream("transport_error")
            raise UpstreamFetchError(
                f"contents API request failed for {path!r}: {exc.__class__.__name__}", path=path
            ) from exc
        except ValueError as exc:
            record_upstream("invalid_body")
            raise UpstreamFetchError(f"contents API sent invalid JSON for {path!r}", path=path) from exc
        record_upstream("ok")
        return data

    async def list_directory(self, path: str = "") -> List[TreeEntry]:
        data = await self._get_json(path)
        if not isinstance(data, list):
            raise UpstreamFetchError(f"{path!r} is not a directory", path=path)
        entries: List[TreeEntry] = []
        for item in data:
            # symlinks and submodules are not browsable
            if not isinstance(item, dict) or item.get("type") not in _LISTED_TYPES:
                continue
            try:
                entries.append(TreeEntry.model_validate(item))
            except ValidationError as exc:
                raise UpstreamFetchError(f"malformed entry in listing of {path!r}", path=path) from exc
        log.debug("directory_listed", path=path, entries=len(entries))
        return entries

    async def get_file(self, path: str) -> RemoteFile:
        data = await self._get_json(path)
        if isinstance(data, list):
            raise UpstreamFetchError(f"{path!r} is a directory", path=path)
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise UpstreamFetchError(f"{path!r} is not a file", path=path)
        try:
            return RemoteFile.model_validate(data)
        except ValidationError as exc:
            raise UpstreamFetchError(f"malformed file payload for {path!r}", path=path) from exc
