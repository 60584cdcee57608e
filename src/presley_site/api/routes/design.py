from __future__ import annotations

import logging
from typing import Mapping

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY

from presley_site.api.utils import html_page, load_page, redirect, require_login
from presley_site.cookies import DEFAULT_DESIGN, CookieError, Design, design_cookie
from presley_site.fields import FieldSet, bind
from presley_site.forms import DESIGN_FIELDS, design_from_fields, design_values, prefill, render_form, validate_design
from presley_site.pages import DESIGN_PAGE, substitute
from presley_site.validation import error_label_ids

logger = logging.getLogger("presley_site.api.design")

router = APIRouter(prefix="/other/design", tags=["design"], dependencies=[Depends(require_login)])


def current_design(cookies: Mapping[str, str]) -> Design:
    if not design_cookie.exists(cookies):
        return DEFAULT_DESIGN
    try:
        return design_cookie.get_design(cookies)
    except CookieError as e:
        logger.warning("[design] falling back to default design err=%s", e)
        return DEFAULT_DESIGN


async def _render(request: Request, fields: FieldSet, errors=(), status_code: int = 200) -> HTMLResponse:
    form_html = render_form("frmEdit", [fields], action="/other/design", errors=errors, submit_label="Spremi", reset_label="Zadano")
    page = await load_page(request, DESIGN_PAGE)
    return html_page(request, substitute(page, {"form": form_html}), status_code=status_code)


@router.get("", response_class=HTMLResponse)
async def design_page(request: Request) -> HTMLResponse:
    fields = prefill(DESIGN_FIELDS, design_values(current_design(request.cookies)))
    return await _render(request, fields)


@router.post("")
async def save_design(request: Request) -> Response:
    """Store the submitted design, or the default one for a reset; both expire with the login."""
    form = await request.form()
    response = redirect("/index")
    if "reset" in form:
        design_cookie.set_design(response, DEFAULT_DESIGN, cookies=request.cookies)
        return response

    fields = bind(DESIGN_FIELDS, form)
    errs = validate_design(fields)
    if errs:
        ids = error_label_ids(errs)
        logger.info("[design] design rejected fields=%s", ",".join(ids))
        return await _render(request, fields, ids, status_code=HTTP_422_UNPROCESSABLE_ENTITY)

    design = design_from_fields(fields, current_design(request.cookies))
    design_cookie.set_design(response, design, cookies=request.cookies)
    return response
