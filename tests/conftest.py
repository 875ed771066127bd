from datetime import datetime, timezone

import pytest
import sys
from pathlib import Path

# Ensure repository root is on sys.path for `import blog`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


class FakeArticleStore:
    """In-memory stand-in with the same contract as ArticleStore."""

    def __init__(self):
        self.rows = {}
        self.next_id = 1
        self.fail_with = None
        self.calls = []

    def _check(self, op):
        self.calls.append(op)
        if self.fail_with is not None:
            raise self.fail_with

    async def list_by_cursor(self, cursor):
        self._check("list_by_cursor")
        ids = sorted((i for i in self.rows if cursor <= 0 or i < cursor), reverse=True)
        return [self.rows[i] for i in ids[:10]]

    async def list_all(self):
        self._check("list_all")
        return list(self.rows.values())

    async def get_by_id(self, article_id):
        from blog.core.errors import NotFoundError

        self._check("get_by_id")
        if article_id not in self.rows:
            raise NotFoundError(article_id)
        return self.rows[article_id]

    async def create(self, article):
        self._check("create")
        now = datetime.now(timezone.utc)
        article.id = self.next_id
        article.created = now
        article.updated = now
        self.rows[article.id] = article
        self.next_id += 1
        return article.id

    async def update(self, article):
        self._check("update")
        row = self.rows.get(article.id)
        if row is None:
            return 0
        row.title = article.title
        row.body = article.body
        row.updated = datetime.now(timezone.utc)
        return 1

    async def delete(self, article_id):
        self._check("delete")
        self.rows.pop(article_id, None)


def _prime_csrf(test_client):
    # any safe request hands out the token cookie; writes echo it in a header
    test_client.get("/articles/new")
    test_client.headers["X-CSRF-Token"] = test_client.cookies["csrf_token"]


@pytest.fixture()
def fake_store():
    return FakeArticleStore()


@pytest.fixture()
def client(monkeypatch, fake_store):
    # Patch DB init/close in lifespan to no-op
    import blog.db.sa as db_sa

    async def _noop(*args, **kwargs):
        return None

    monkeypatch.setattr(db_sa, "init_sa_engine", _noop)
    monkeypatch.setattr(db_sa, "close_sa_engine", _noop)

    from blog import main as main_mod
    from blog.core import deps as core_deps

    app = main_mod.app
    app.dependency_overrides[core_deps.get_store] = lambda: fake_store

    with TestClient(app) as test_client:
        _prime_csrf(test_client)
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def sqlite_client(monkeypatch, tmp_path):
    """Client backed by a real ArticleStore over SQLite."""
    import asyncio

    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import NullPool

    import blog.db.sa as db_sa
    from blog import main as main_mod
    from blog.core import deps as core_deps
    from blog.services.articles import ArticleStore

    async def _noop(*args, **kwargs):
        return None

    monkeypatch.setattr(db_sa, "init_sa_engine", _noop)
    monkeypatch.setattr(db_sa, "close_sa_engine", _noop)

    # NullPool: TestClient runs requests on its own event loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    asyncio.run(db_sa.create_tables(engine))
    real_store = ArticleStore(db_sa.make_sessionmaker(engine))

    app = main_mod.app
    app.dependency_overrides[core_deps.get_store] = lambda: real_store

    with TestClient(app) as test_client:
        _prime_csrf(test_client)
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
async def store(anyio_backend, tmp_path):
    """ArticleStore over a throwaway SQLite database."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from blog.db.sa import create_tables, make_sessionmaker
    from blog.services.articles import ArticleStore

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}")
    await create_tables(engine)
    try:
        yield ArticleStore(make_sessionmaker(engine))
    finally:
        await engine.dispose()
