from __future__ import annotations

import logging
import time
import uuid

import anyio
from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from presley_site.config import Settings
from presley_site.cookies import CookieError, auth_cookie, design_cookie
from presley_site.imagemap import annotate_areas
from presley_site.pages import PageTemplates, apply_design, fill_greeting, read_page

logger = logging.getLogger("presley_site.api")

LOGIN_PATH = "/login"


class LoginRequired(Exception):
    """Raised for protected pages requested without the authorization cookie."""

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path


def request_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> PageTemplates:
    return request.app.state.templates


def require_login(request: Request) -> None:
    """Route dependency: an existing authorization cookie is all it takes."""
    if get_settings(request).require_auth and not auth_cookie.exists(request.cookies):
        raise LoginRequired(request.url.path)


async def load_page(request: Request, relative: str) -> str:
    root = get_settings(request).site_root
    return await anyio.to_thread.run_sync(read_page, root, relative)


def decorate(request: Request, page: str) -> str:
    """Apply the visitor's cookies (greeting, design) and image-map descriptions to a page."""
    cookies = request.cookies
    if auth_cookie.exists(cookies):
        try:
            page = fill_greeting(page, auth_cookie.get_user(cookies), auth_cookie.get_expiration(cookies))
        except CookieError as e:
            logger.warning("[api] greeting skipped path=%s err=%s", request.url.path, e)
    if design_cookie.exists(cookies):
        try:
            page = apply_design(page, design_cookie.get_design(cookies))
        except CookieError as e:
            logger.warning("[api] design skipped path=%s err=%s", request.url.path, e)
    return annotate_areas(page)


def html_page(request: Request, page: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(decorate(request, page), status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=HTTP_303_SEE_OTHER)
