from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from presley_site.api.utils import html_page, load_page, require_login
from presley_site.pages import AUTHOR_PAGE, BOOKS_PAGE, INDEX_PAGE

router = APIRouter(tags=["pages"], dependencies=[Depends(require_login)])


@router.get("/", response_class=HTMLResponse)
@router.get("/index", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    return html_page(request, await load_page(request, INDEX_PAGE))


@router.get("/data/books", response_class=HTMLResponse)
async def books(request: Request) -> HTMLResponse:
    return html_page(request, await load_page(request, BOOKS_PAGE))


@router.get("/other/author", response_class=HTMLResponse)
async def author(request: Request) -> HTMLResponse:
    return html_page(request, await load_page(request, AUTHOR_PAGE))
