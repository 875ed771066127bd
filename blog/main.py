from contextlib import asynccontextmanager

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from blog import config
from blog.api import articles
from blog.api import pages
from blog.core.csrf import CSRFMiddleware
from blog.core.errors import StoreError
from blog.db import sa


logger = logging.getLogger("blog.app")
http_logger = logging.getLogger("blog.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await sa.init_sa_engine()
    engine = sa.engine()
    if config.CREATE_TABLES and engine is not None:
        try:
            await sa.create_tables(engine)
        except (SQLAlchemyError, OSError) as exc:
            # Schema may be managed externally with narrower grants
            logger.warning(
                "Could not create articles table: %s",
                exc,
                extra={"event": "create_tables_failed"},
            )
    try:
        yield
    finally:
        await sa.close_sa_engine()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        http_logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


app = FastAPI(
    lifespan=lifespan,
    root_path=config.ROOT_PATH,
)
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(CSRFMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.mount("/static", StaticFiles(directory=config.STATIC_DIR), name="static")
app.include_router(articles.router)
app.include_router(pages.router)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    # Detail stays out of the response; the store already logged the cause
    return JSONResponse(status_code=500, content={"detail": ""})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


# Basic logging configuration (can be overridden by server config)
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
