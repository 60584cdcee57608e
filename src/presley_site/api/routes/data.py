from __future__ import annotations

import logging

import anyio
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from presley_site.api.utils import get_settings, get_templates, html_page, require_login
from presley_site.media import MultimediaCatalog, render_gallery
from presley_site.pages import MULTIMEDIA_DATA, SONGS_DATA, read_page, substitute
from presley_site.tables import songs_table

logger = logging.getLogger("presley_site.api.data")

router = APIRouter(tags=["data"], dependencies=[Depends(require_login)])


@router.get("/data/songs", response_class=HTMLResponse)
async def songs(request: Request) -> HTMLResponse:
    """Songs table built from `datoteke/songs.csv` on every request."""
    root = get_settings(request).site_root
    text = await anyio.to_thread.run_sync(read_page, root, SONGS_DATA)
    table = songs_table(text)
    page = substitute(get_templates(request).songs, {"table": table})
    return html_page(request, page)


@router.get("/other/multimedia", response_class=HTMLResponse)
async def multimedia(request: Request) -> HTMLResponse:
    """Image, video and audio galleries built from `datoteke/multimedia.json` on every request."""
    root = get_settings(request).site_root
    text = await anyio.to_thread.run_sync(read_page, root, MULTIMEDIA_DATA)
    catalog = MultimediaCatalog.from_json(text)
    logger.debug(
        "multimedia images=%d videos=%d audios=%d",
        len(catalog.images),
        len(catalog.videos),
        len(catalog.audios),
    )
    return html_page(request, render_gallery(get_templates(request).multimedia, catalog))
