"""
Main entry point for Storage Backend

Imports the FastAPI app from app.py for uvicorn to run.

@.architecture
Incoming: none --- {entry point for uvicorn server}
Processing: create_app() import, uvicorn.run() --- {2 jobs: config_loading, server_startup}
Outgoing: uvicorn server, Network (HTTP) --- {FastAPI application instance, HTTP server}
"""

import os
from app import create_app
from config.settings import get_settings

# Create app instance
app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()

    host = os.getenv("STORAGE_HOST", settings.security.bind_host)
    port = int(os.getenv("STORAGE_PORT", str(settings.security.bind_port)))
    reload = os.getenv("STORAGE_RELOAD", "false").lower() == "true"
    log_level = os.getenv("STORAGE_LOG_LEVEL", "info")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level
    )


if __name__ == "__main__":
    run()
