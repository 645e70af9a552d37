from __future__ import annotations
from fastapi import APIRouter, Depends
from ..cache import TTLCache
from ..config import Settings
from ..deps import get_cache, get_settings

router = APIRouter(prefix="/api", tags=["health"])

@router.get("/healthz")
def healthz(cfg: Settings = Depends(get_settings)):
    return {"ok": True, "service": "repo-browser-api", "version": cfg.APP_VERSION}

@router.get("/readyz")
def readyz(cfg: Settings = Depends(get_settings), cache: TTLCache = Depends(get_cache)):
    return {
        "ok": True,
        "repository": f"{cfg.GITHUB_USERNAME}/{cfg.GITHUB_REPO}",
        "cache": cache.stats(),
    }

@router.get("/health")
def health(cfg: Settings = Depends(get_settings)):
    return healthz(cfg)
