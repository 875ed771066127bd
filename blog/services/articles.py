"""Article store: every read and write against the ``articles`` table.

Each call opens its own session through :func:`session_scope`, so a pooled
connection is held only for the duration of one operation and every write is
a single commit-or-rollback unit.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blog.core.errors import NotFoundError, StoreError
from blog.db.sa import session_scope
from blog.models.article import Article, utcnow


PAGE_SIZE = 10

# Range of the 32-bit INTEGER id column; ids outside it cannot match a row
MIN_ID = -(2**31)
MAX_ID = 2**31 - 1

logger = logging.getLogger("blog.store")


def _id_in_range(article_id: int) -> bool:
    return MIN_ID <= article_id <= MAX_ID


class ArticleStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    @asynccontextmanager
    async def _transaction(self, op: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with session_scope(self._sessionmaker) as session:
                yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "Article store operation failed: %s",
                exc,
                extra={"event": "article_store_error", "op": op},
            )
            raise StoreError(f"article store {op} failed") from exc

    # -----------------------
    #  Reads
    # -----------------------

    async def list_by_cursor(self, cursor: int) -> List[Article]:
        """Up to PAGE_SIZE articles with ``id < cursor``, newest first.

        ``cursor <= 0`` starts from the newest article, and so does a cursor
        above MAX_ID since every stored id is below it. Passing the last id
        of a page returns the page right after it.
        """
        stmt = select(Article)
        if 0 < cursor <= MAX_ID:
            stmt = stmt.where(Article.id < cursor)
        stmt = stmt.order_by(Article.id.desc()).limit(PAGE_SIZE)

        async with self._transaction("list_by_cursor") as session:
            res = await session.execute(stmt)
            articles = list(res.scalars().all())
        return articles

    async def list_all(self) -> List[Article]:
        async with self._transaction("list_all") as session:
            res = await session.execute(select(Article))
            articles = list(res.scalars().all())
        return articles

    async def get_by_id(self, article_id: int) -> Article:
        if not _id_in_range(article_id):
            raise NotFoundError(article_id)
        async with self._transaction("get_by_id") as session:
            res = await session.execute(select(Article).where(Article.id == article_id))
            article = res.scalar_one_or_none()
        if article is None:
            raise NotFoundError(article_id)
        return article

    # -----------------------
    #  Writes
    # -----------------------

    async def create(self, article: Article) -> int:
        """Stamp, insert and commit ``article``; return the id the database assigned."""
        try:
            async with self._transaction("create") as session:
                now = utcnow()
                article.created = now
                article.updated = now
                session.add(article)
                await session.flush()
        except StoreError:
            # nothing was committed, so the caller keeps an unsaved article
            article.id = None
            article.created = None
            article.updated = None
            raise
        logger.info(
            "Article created",
            extra={"event": "article_created", "article_id": article.id},
        )
        return article.id

    async def update(self, article: Article) -> int:
        """Refresh ``updated`` and rewrite title/body; return rows affected.

        Zero rows is not an error: the transaction still commits and the
        caller decides what a missing id means.
        """
        if not _id_in_range(article.id):
            return 0
        now = utcnow()
        stmt = (
            update(Article)
            .where(Article.id == article.id)
            .values(title=article.title, body=article.body, updated=now)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("update") as session:
            res = await session.execute(stmt)
            rows = res.rowcount
        article.updated = now
        logger.info(
            "Article update committed",
            extra={"event": "article_updated", "article_id": article.id, "rows": rows},
        )
        return rows

    async def delete(self, article_id: int) -> None:
        if not _id_in_range(article_id):
            logger.info(
                "Article delete skipped, id out of range",
                extra={"event": "article_deleted", "article_id": article_id, "rows": 0},
            )
            return
        stmt = (
            delete(Article)
            .where(Article.id == article_id)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("delete") as session:
            res = await session.execute(stmt)
            rows = res.rowcount
        logger.info(
            "Article delete committed",
            extra={"event": "article_deleted", "article_id": article_id, "rows": rows},
        )
