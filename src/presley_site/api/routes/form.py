from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY

from presley_site.api.utils import html_page, load_page, redirect, require_login
from presley_site.forms import render_alerts, render_form
from presley_site.pages import FORM_PAGE, substitute
from presley_site.wizard import ADVANCED, SUBMITTED, VISIBILITY_FIELD, MusicForm

logger = logging.getLogger("presley_site.api.form")

router = APIRouter(prefix="/form", tags=["form"], dependencies=[Depends(require_login)])


async def _render(request: Request, wizard: MusicForm, status_code: int = 200) -> HTMLResponse:
    form_html = render_form(
        "musicForm",
        [wizard.first, wizard.second],
        action="/form",
        errors=wizard.errors,
        hidden={VISIBILITY_FIELD: wizard.visibility},
        styles={wizard.second.id: f"visibility: {wizard.visibility}"},
        submit_label=wizard.submit_label,
        multipart=True,
    )
    page = await load_page(request, FORM_PAGE)
    page = substitute(page, {"alerts": render_alerts(wizard.messages), "form": form_html})
    return html_page(request, page, status_code=status_code)


@router.get("", response_class=HTMLResponse)
async def music_form(request: Request) -> HTMLResponse:
    return await _render(request, MusicForm())


@router.post("")
async def submit_music_form(request: Request) -> Response:
    """
    Two-step submission.

    The first valid submission reveals the second fieldset; the submission after that
    completes the form. Anything invalid re-renders the page with marked labels.
    """
    form = await request.form()
    if "reset" in form:
        wizard = MusicForm()
        wizard.reset()
        return await _render(request, wizard)

    wizard = MusicForm.from_form(form)
    result = wizard.submit()
    if result.outcome == SUBMITTED:
        title = wizard.first.get("title")
        logger.info("[form] music form submitted title=%s", title.value if title else "")
        return redirect("/index")
    if result.outcome == ADVANCED:
        return await _render(request, wizard)
    logger.info("[form] music form rejected fields=%s", ",".join(result.error_ids))
    return await _render(request, wizard, status_code=HTTP_422_UNPROCESSABLE_ENTITY)
