# SPDX-License-Identifier: Apache-2.0
"""
repo_browser

Read-only HTTP proxy over the contents of one GitHub repository, with a
time-bounded in-memory cache in front of the GitHub API.
"""
from __future__ import annotations

__all__ = []
