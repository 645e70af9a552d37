# tests/conftest.py
from __future__ import annotations

import asyncio
import base64
from typing import Dict, List, Optional

import httpx
import pytest

from repo_browser.config import Settings
from repo_browser.errors import UpstreamFetchError
from repo_browser.models import RemoteFile, TreeEntry

API = "https://api.github.test/repos"
OWNER = "octo"
REPO = "algos"
TOKEN = "ghp-test-secret"


def _file(path: str) -> dict:
    return {"type": "file", "name": path.rsplit("/", 1)[-1], "path": path}


def _dir(path: str) -> dict:
    return {"type": "dir", "name": path.rsplit("/", 1)[-1], "path": path}


# five directories: "", data-structures, data-structures/trees,
# data-structures/arrays, docs
TREE: Dict[str, List[dict]] = {
    "": [_file("README.md"), _dir("data-structures"), _dir("docs"), _file("zeta.txt")],
    "data-structures": [
        _dir("data-structures/trees"),
        _dir("data-structures/arrays"),
        _file("data-structures/index.js"),
    ],
    "data-structures/trees": [_file("data-structures/trees/bst.js"), _file("data-structures/trees/avl.js")],
    "data-structures/arrays": [_file("data-structures/arrays/two-sum.js")],
    "docs": [_file("docs/guide.md")],
}

FLAT_PATHS = [
    "README.md",
    "data-structures/trees/bst.js",
    "data-structures/trees/avl.js",
    "data-structures/arrays/two-sum.js",
    "data-structures/index.js",
    "docs/guide.md",
    "zeta.txt",
]

FILES: Dict[str, str] = {
    "a/b.txt": "aGVsbG8=",
    "README.md": base64.b64encode(b"# Algorithms\n").decode(),
}


class FakeProvider:
    """In-memory stand-in for the contents API that records every call."""

    def __init__(
        self,
        tree: Optional[Dict[str, List[dict]]] = None,
        files: Optional[Dict[str, str]] = None,
        fail_on_call: Optional[int] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.tree = TREE if tree is None else tree
        self.files = FILES if files is None else files
        self.fail_on_call = fail_on_call
        self.gate = gate
        self.calls: List[str] = []

    async def list_directory(self, path: str = "") -> List[TreeEntry]:
        self.calls.append(path)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_on_call == len(self.calls):
            raise UpstreamFetchError(f"boom on {path!r}", path=path, status_code=502)
        if path not in self.tree:
            raise UpstreamFetchError(f"{path!r} not found", path=path, status_code=404)
        return [TreeEntry.model_validate(item) for item in self.tree[path]]

    async def get_file(self, path: str) -> RemoteFile:
        self.calls.append(path)
        if path not in self.files:
            raise UpstreamFetchError(f"{path!r} not found", path=path, status_code=404)
        return RemoteFile(name=path.rsplit("/", 1)[-1], path=path, content=self.files[path])


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class GitHubStub:
    """httpx handler serving TREE/FILES the way the contents API does."""

    prefix = f"/repos/{OWNER}/{REPO}/contents"

    def __init__(self, tree=None, files=None) -> None:
        self.tree = TREE if tree is None else tree
        self.files = FILES if files is None else files
        self.requests: List[httpx.Request] = []
        self.status_override: Dict[str, int] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(self.prefix):].strip("/")
        if path in self.status_override:
            return httpx.Response(self.status_override[path], json={"message": "upstream says no"})
        if path in self.tree:
            listing = [dict(item, sha="0" * 40, size=0) for item in self.tree[path]]
            return httpx.Response(200, json=listing)
        if path in self.files:
            body = {
                "type": "file",
                "name": path.rsplit("/", 1)[-1],
                "path": path,
                "encoding": "base64",
                "content": self.files[path],
            }
            return httpx.Response(200, json=body)
        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def paths(self) -> List[str]:
        return [r.url.path[len(self.prefix):].strip("/") for r in self.requests]


def make_settings(**overrides) -> Settings:
    values = dict(
        GITHUB_API=API,
        GITHUB_USERNAME=OWNER,
        GITHUB_REPO=REPO,
        GITHUB_TOKEN=TOKEN,
        ENABLE_PROMETHEUS=False,
        LOG_LEVEL="WARNING",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def github() -> GitHubStub:
    return GitHubStub()


@pytest.fixture
def settings() -> Settings:
    return make_settings()
