from __future__ import annotations

from typing import Iterator, List

import structlog

from ..models import FileRecord, TreeEntry
from .github import ContentsProvider

log = structlog.get_logger(__name__)


async def flatten_tree(provider: ContentsProvider, path: str = "") -> List[FileRecord]:
    """
    Walk the repository depth-first from `path` and return every file.

    Directories are expanded the moment they are met, so the result is in
    pre-order with siblings kept in the order the provider listed them.
    Listing calls are issued one at a time. The first failure propagates
    and nothing is returned.
    """
    files: List[FileRecord] = []
    stack: List[Iterator[TreeEntry]] = [iter(await provider.list_directory(path))]
    calls = 1
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if entry.type == "file":
            files.append(FileRecord(name=entry.name, path=entry.path))
        else:
            stack.append(iter(await provider.list_directory(entry.path)))
            calls += 1
    log.info("tree_flattened", root=path, files=len(files), directories=calls)
    return files
