from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY, HTTP_500_INTERNAL_SERVER_ERROR

from presley_site import __version__
from presley_site.api.http_logging import install_http_logging
from presley_site.api.routes.auth import router as auth_router
from presley_site.api.routes.data import router as data_router
from presley_site.api.routes.design import router as design_router
from presley_site.api.routes.form import router as form_router
from presley_site.api.routes.health import router as health_router
from presley_site.api.routes.pages import router as pages_router
from presley_site.api.routes.statistics import router as statistics_router
from presley_site.api.utils import LOGIN_PATH, LoginRequired, redirect, request_id
from presley_site.config import Settings
from presley_site.pages import load_templates

logger = logging.getLogger("presley_site.api")

STATIC_MOUNTS = ("materijali", "css", "js")


def _repo_root() -> Path:
    # src/presley_site/api/main.py -> repo root
    return Path(__file__).resolve().parents[3]


def _mount_static(app: FastAPI, root: Path) -> None:
    for name in STATIC_MOUNTS:
        directory = root / name
        if not directory.is_dir():
            logger.warning("[api] static directory missing, /%s not mounted: %s", name, directory)
            continue
        app.mount(f"/{name}", StaticFiles(directory=str(directory)), name=name)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    # Load `.env` + `.env.local` when present (local dev convenience).
    load_dotenv(_repo_root() / ".env", override=False)
    load_dotenv(_repo_root() / ".env.local", override=False)

    settings = settings or Settings.from_env()

    app = FastAPI(title="presley-site", version=__version__)
    app.state.settings = settings
    # Page templates are read once; a missing template fails startup.
    app.state.templates = load_templates(settings.site_root)

    @app.exception_handler(LoginRequired)
    async def _login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
        logger.info("[api] login required path=%s", exc.path)
        return redirect(LOGIN_PATH)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        rid = request_id("val")
        logger.warning("[api] 422 validation_error requestId=%s path=%s errors=%s", rid, request.url.path, exc.errors())
        return JSONResponse(
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "ok": False,
                "error": "validation_error",
                "message": "Request did not match expected schema.",
                "requestId": rid,
                "details": exc.errors(),
            },
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        rid = request_id("err")
        logger.error("[api] 500 internal_error requestId=%s path=%s err=%r", rid, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "ok": False,
                "error": "internal_error",
                "message": "Unhandled server error.",
                "requestId": rid,
            },
        )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(pages_router)
    app.include_router(form_router)
    app.include_router(data_router)
    app.include_router(design_router)
    app.include_router(statistics_router)
    _mount_static(app, settings.site_root)

    if install_http_logging(app):
        logger.info("[api] http logging enabled")
    return app


def run() -> None:
    """Console entrypoint: serve the site with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    app = create_app(settings)
    logger.info("App started at %s on port %s!", datetime.now().strftime("%d.%m.%Y. %H:%M:%S"), settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
