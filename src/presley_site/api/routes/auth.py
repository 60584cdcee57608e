from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY

from presley_site.api.utils import LOGIN_PATH, html_page, load_page, redirect
from presley_site.cookies import DEFAULT_DESIGN, auth_cookie, design_cookie
from presley_site.fields import FieldSet, bind
from presley_site.forms import LOGIN_FIELDS, render_form, validate_login
from presley_site.pages import LOGIN_PAGE, substitute
from presley_site.validation import error_label_ids

logger = logging.getLogger("presley_site.api.auth")

router = APIRouter(tags=["auth"])


def _login_form(fields: FieldSet = LOGIN_FIELDS, errors=()) -> str:
    # Never echo the password back into the page.
    shown = FieldSet(
        (replace(f, value="") if f.type == "password" else f for f in fields),
        legend=fields.legend,
        id=fields.id,
    )
    return render_form("login", [shown], action=LOGIN_PATH, errors=errors, submit_label="Prijava", reset_label=None)


@router.get(LOGIN_PATH, response_class=HTMLResponse)
async def login_page(request: Request) -> HTMLResponse:
    page = await load_page(request, LOGIN_PAGE)
    return html_page(request, substitute(page, {"form": _login_form()}))


@router.post(LOGIN_PATH)
async def login(request: Request) -> Response:
    form = await request.form()
    fields = bind(LOGIN_FIELDS, form)
    errs = validate_login(fields)
    if errs:
        ids = error_label_ids(errs)
        logger.info("[auth] login rejected fields=%s", ",".join(ids))
        page = await load_page(request, LOGIN_PAGE)
        page = substitute(page, {"form": _login_form(fields, ids)})
        return html_page(request, page, status_code=HTTP_422_UNPROCESSABLE_ENTITY)

    username = str(fields.get("username").value).strip()
    password = str(fields.get("password").value).strip()
    age = int(float(str(fields.get("cookie-age").value)))

    response = redirect("/index")
    auth_cookie.set_authorization(response, username, password, age)
    design_cookie.set_design(response, DEFAULT_DESIGN, age)
    logger.info("[auth] login user=%s max_age=%s", username, age)
    return response


@router.get("/logout")
async def logout() -> Response:
    response = redirect(LOGIN_PATH)
    auth_cookie.remove(response)
    design_cookie.remove(response)
    return response
