# blog/api/pages.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from blog.config import TEMPLATES_DIR
from blog.core.deps import get_store
from blog.core.errors import NotFoundError
from blog.services.articles import ArticleStore

router = APIRouter(tags=["pages"])
logger = logging.getLogger("blog.pages")

templates = Jinja2Templates(directory=TEMPLATES_DIR)


def _not_found(request: Request, article_id: int) -> HTMLResponse:
    logger.info("Article page not found", extra={"event": "article_page_missing", "article_id": article_id})
    return templates.TemplateResponse(
        request, "article/not_found.html", {"article_id": article_id}, status_code=404
    )


@router.get("/", response_class=HTMLResponse)
async def article_index(request: Request, store: ArticleStore = Depends(get_store)):
    articles = await store.list_by_cursor(0)
    # the last id on the page seeds the "load more" request
    cursor = articles[-1].id if articles else 0
    return templates.TemplateResponse(
        request, "article/index.html", {"articles": articles, "cursor": cursor}
    )


@router.get("/articles")
async def article_index_redirect():
    # one canonical URL for the index
    return RedirectResponse(url="/", status_code=308)


@router.get("/articles/new", response_class=HTMLResponse)
async def article_new(request: Request):
    return templates.TemplateResponse(
        request, "article/new.html", {"now": datetime.now(timezone.utc)}
    )


@router.get("/articles/{article_id}", response_class=HTMLResponse)
async def article_show(request: Request, article_id: int, store: ArticleStore = Depends(get_store)):
    try:
        article = await store.get_by_id(article_id)
    except NotFoundError:
        return _not_found(request, article_id)
    return templates.TemplateResponse(request, "article/show.html", {"article": article})


@router.get("/articles/{article_id}/edit", response_class=HTMLResponse)
async def article_edit(request: Request, article_id: int, store: ArticleStore = Depends(get_store)):
    try:
        article = await store.get_by_id(article_id)
    except NotFoundError:
        return _not_found(request, article_id)
    return templates.TemplateResponse(request, "article/edit.html", {"article": article})
