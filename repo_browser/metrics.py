from __future__ import annotations
from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

CACHE_REQUESTS = Counter(
    "repo_browser_cache_requests_total",
    "File cache lookups by key family and result",
    ["key_family", "result"],
)
UPSTREAM_REQUESTS = Counter(
    "repo_browser_upstream_requests_total",
    "Calls to the GitHub contents API by outcome",
    ["outcome"],
)


def record_cache(key_family: str, hit: bool) -> None:
    CACHE_REQUESTS.labels(key_family=key_family, result="hit" if hit else "miss").inc()


def record_upstream(outcome: str) -> None:
    UPSTREAM_REQUESTS.labels(outcome=outcome).inc()


def setup_metrics(app: FastAPI, enable: bool = True):
    if not enable:
        return
    Instrumentator(excluded_handlers=["/metrics"]).instrument(app).expose(
        app, endpoint="/metrics", include_in_schema=False
    )
