#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import os
import subprocess


def run(cmd: list[str]) -> int:
    print("$", " ".join(cmd))
    return subprocess.call(cmd)


def cmd_test(args: argparse.Namespace) -> int:
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
    pytest_args = ["pytest"]
    if args.quiet:
        pytest_args.append("-q")
    if args.k:
        pytest_args += ["-k", args.k]
    return run(pytest_args)


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("blog.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


async def _init_db(dsn: str | None) -> None:
    from blog.db import sa

    await sa.init_sa_engine(dsn)
    try:
        await sa.create_tables(sa.engine())
    finally:
        await sa.close_sa_engine()


def cmd_init_db(args: argparse.Namespace) -> int:
    asyncio.run(_init_db(args.dsn))
    print("articles table ready")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="blog-cli", description="Tech blog CLI helper")
    sub = parser.add_subparsers(dest="command", required=True)

    p_test = sub.add_parser("test", help="Run pytest")
    p_test.add_argument("-q", "--quiet", action="store_true", help="Quiet mode (-q)")
    p_test.add_argument("-k", help="Only run tests matching expression")
    p_test.set_defaults(func=cmd_test)

    p_serve = sub.add_parser("serve", help="Run the web server")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8080)
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    p_init = sub.add_parser("init-db", help="Create the articles table if missing")
    p_init.add_argument("--dsn", default=None, help="Database URL (defaults to DATABASE_URL)")
    p_init.set_defaults(func=cmd_init_db)

    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
