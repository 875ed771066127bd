# blog/api/articles.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from blog.core.deps import PayloadError, get_store, parse_cursor, read_payload
from blog.core.errors import ArticleValidationError, NotFoundError, StoreError
from blog.core.validation import explain, validate
from blog.models.article import Article
from blog.models.schemas import (
    ArticleCreateResult,
    ArticleDeleteResult,
    ArticleOut,
    ArticleUpdateResult,
)
from blog.services.articles import ArticleStore

router = APIRouter(prefix="/api/articles", tags=["articles"])
logger = logging.getLogger("blog.api")

# -----------------------
#  Reads
# -----------------------

@router.get("", response_model=List[ArticleOut],
            summary="Page of articles older than the cursor, newest first")
async def api_list_articles(cursor: int = Depends(parse_cursor),
                            store: ArticleStore = Depends(get_store)):
    """
    ``cursor`` is the last id the client already has; 0 or missing starts from the newest.
    A StoreError here is turned into an opaque 500 by the app-level handler.
    """
    return await store.list_by_cursor(cursor)


@router.get("/all", response_model=List[ArticleOut],
            summary="Every article, in storage order (admin use)")
async def api_list_all_articles(store: ArticleStore = Depends(get_store)):
    return await store.list_all()


@router.get("/{article_id}", response_model=ArticleOut, summary="Single article by id")
async def api_get_article(article_id: int, store: ArticleStore = Depends(get_store)):
    try:
        return await store.get_by_id(article_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")

# -----------------------
#  Writes
# -----------------------

@router.post("", response_model=ArticleCreateResult, summary="Create an article from a form or JSON body")
async def api_create_article(request: Request, store: ArticleStore = Depends(get_store)):
    out = ArticleCreateResult()

    try:
        payload = await read_payload(request)
    except PayloadError as exc:
        logger.info("Unreadable create payload: %s", exc, extra={"event": "article_payload_invalid"})
        out.message = str(exc)
        return JSONResponse(status_code=400, content=out.model_dump(mode="json"))

    try:
        draft = validate(payload)
    except ArticleValidationError as exc:
        logger.info("Create rejected by validation", extra={"event": "article_validation_failed"})
        out.validation_errors = explain(exc)
        return JSONResponse(status_code=422, content=out.model_dump(mode="json"))

    article = Article(title=draft.title, body=draft.body)
    try:
        await store.create(article)
    except StoreError:
        out.message = "Failed to save article"
        return JSONResponse(status_code=500, content=out.model_dump(mode="json"))

    out.article = ArticleOut.model_validate(article)
    return out


@router.patch("/{article_id}", response_model=ArticleUpdateResult, summary="Update title and body of an article")
async def api_update_article(article_id: int, request: Request, store: ArticleStore = Depends(get_store)):
    out = ArticleUpdateResult()

    try:
        payload = await read_payload(request)
    except PayloadError as exc:
        out.message = str(exc)
        return JSONResponse(status_code=400, content=out.model_dump(mode="json"))

    try:
        draft = validate(payload)
    except ArticleValidationError as exc:
        logger.info(
            "Update rejected by validation",
            extra={"event": "article_validation_failed", "article_id": article_id},
        )
        out.validation_errors = explain(exc)
        return JSONResponse(status_code=422, content=out.model_dump(mode="json"))

    article = Article(id=article_id, title=draft.title, body=draft.body)
    try:
        rows = await store.update(article)
    except StoreError:
        out.message = "Failed to update article"
        return JSONResponse(status_code=500, content=out.model_dump(mode="json"))

    # The store commits a zero-row update; for HTTP clients that means the id is unknown
    if rows == 0:
        out.message = "Article not found"
        return JSONResponse(status_code=404, content=out.model_dump(mode="json"))

    try:
        out.article = ArticleOut.model_validate(await store.get_by_id(article_id))
    except NotFoundError:
        # deleted between the update and the read-back
        out.message = "Article not found"
        return JSONResponse(status_code=404, content=out.model_dump(mode="json"))
    return out


@router.delete("/{article_id}", response_model=ArticleDeleteResult, summary="Delete an article (no-op when missing)")
async def api_delete_article(article_id: int, store: ArticleStore = Depends(get_store)):
    await store.delete(article_id)
    return ArticleDeleteResult(id=article_id, message=f"Article {article_id} is deleted.")
