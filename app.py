from __future__ import annotations
import uvicorn
from repo_browser.main import create_app

app = create_app()

if __name__ == "__main__":
    cfg = app.state.settings
    uvicorn.run(app, host=cfg.HOST, port=cfg.PORT, log_level=cfg.LOG_LEVEL.lower())
