from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from fileshare.shared.config import Settings, settings as default_settings
from fileshare.shared.http import not_found
from fileshare.shared.logs import setup_logging
from fileshare.files.storage import FileStore

# Routers Import
from fileshare.files.api import router as files_router

TAGS_METADATA = [
    {"name": "Files", "description": "Upload, list, download and delete shared files"},
    {"name": "Health", "description": "Service health"},
]

def _mount_ui(app: FastAPI, static_dir: Path, api_prefix: str):
    """Serve the prebuilt UI; any unmatched GET falls back to index.html."""
    root = static_dir.resolve()
    index = root / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    def _ui(full_path: str):
        if full_path.startswith(api_prefix.strip("/") + "/"):
            not_found()
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        return FileResponse(index)

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    log = setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="LAN File Share",
        version="1.0.0",
        description="Share files with colleagues on the same network.",
        openapi_tags=TAGS_METADATA,
    )
    app.state.settings = settings
    app.state.store = FileStore(settings.UPLOAD_DIR, settings.MAX_UPLOAD_BYTES)

    if not settings.is_production:
        app.add_middleware(CORSMiddleware, allow_origins=[settings.DEV_ORIGIN], allow_methods=["*"], allow_headers=["*"])

        # ---- DEV-ONLY error handler (shows the real error instead of a bare 500) ----
        @app.exception_handler(Exception)
        async def _dev_ex_handler(request: Request, exc: Exception):
            return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.include_router(files_router, prefix=settings.API_PREFIX)

    if settings.is_production:
        _mount_ui(app, settings.STATIC_DIR, settings.API_PREFIX)

    @app.on_event("startup")
    async def _banner():
        log.info("File Sharing Server started (env=%s)", settings.ENV)
        log.info("Local:   http://localhost:%d", settings.PORT)
        log.info("Storing uploads in %s", app.state.store.root.resolve())

    return app

app = create_app()

def run():
    import uvicorn
    uvicorn.run("fileshare.main:app", host=default_settings.HOST, port=default_settings.PORT)

# python -m fileshare.main
if __name__ == "__main__":
    run()
