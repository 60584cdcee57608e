from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY

from presley_site.api.utils import get_settings, html_page, load_page, require_login
from presley_site.fields import FieldSet, bind
from presley_site.forms import STATISTICS_FIELDS, render_form, validate_statistics
from presley_site.pages import CREATIVE_PAGE, substitute
from presley_site.statistics import FrequencyTable, layout_bars, render_chart
from presley_site.validation import error_label_ids

logger = logging.getLogger("presley_site.api.statistics")

router = APIRouter(prefix="/other/creative", tags=["statistics"], dependencies=[Depends(require_login)])

# Hidden field carrying the table between submissions of the same page.
FREQUENCIES_FIELD = "frequencies"


async def _render(
    request: Request,
    table: FrequencyTable,
    fields: FieldSet = STATISTICS_FIELDS,
    errors=(),
    status_code: int = 200,
) -> HTMLResponse:
    settings = get_settings(request)
    chart = ""
    if len(table):
        bars = layout_bars(table, settings.canvas_width, settings.canvas_height)
        chart = render_chart(bars, settings.canvas_width, settings.canvas_height)
    form_html = render_form(
        "frmStats",
        [fields],
        action="/other/creative",
        errors=errors,
        hidden={FREQUENCIES_FIELD: table.to_json()},
        submit_label="Dodaj",
        reset_label=None,
    )
    page = await load_page(request, CREATIVE_PAGE)
    page = substitute(page, {"form": form_html, "chart": chart})
    return html_page(request, page, status_code=status_code)


@router.get("", response_class=HTMLResponse)
async def creative_page(request: Request) -> HTMLResponse:
    return await _render(request, FrequencyTable())


@router.post("")
async def add_statistic(request: Request) -> Response:
    form = await request.form()
    try:
        table = FrequencyTable.from_json(form.get(FREQUENCIES_FIELD))
    except (TypeError, ValueError) as e:
        logger.warning("[statistics] discarding carried table err=%s", e)
        table = FrequencyTable()

    fields = bind(STATISTICS_FIELDS, form)
    errs = validate_statistics(fields)
    if errs:
        return await _render(request, table, fields, error_label_ids(errs), status_code=HTTP_422_UNPROCESSABLE_ENTITY)

    name = str(fields.get("name").value).strip()
    table.add(name, int(float(str(fields.get("value").value))))
    return await _render(request, table)
