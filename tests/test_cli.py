from __future__ import annotations

import sqlite3

import cli


def test_init_db_creates_articles_table(tmp_path):
    db_file = tmp_path / "cli.db"
    assert cli.main(["init-db", "--dsn", f"sqlite+aiosqlite:///{db_file}"]) == 0

    with sqlite3.connect(db_file) as conn:
        info = list(conn.execute("PRAGMA table_info(articles)"))
        cols = [row[1] for row in info]
        not_null = {row[1]: bool(row[3]) for row in info}
        ddl = conn.execute("SELECT sql FROM sqlite_master WHERE name = 'articles'").fetchone()[0]
    assert cols == ["id", "title", "body", "created", "updated"]
    assert "AUTOINCREMENT" in ddl
    assert not_null["created"] and not_null["updated"]

    # running it twice is harmless
    assert cli.main(["init-db", "--dsn", f"sqlite+aiosqlite:///{db_file}"]) == 0


def test_test_command_builds_pytest_args(monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "run", lambda cmd: calls.append(cmd) or 0)
    assert cli.main(["test", "-q", "-k", "store"]) == 0
    assert calls == [["pytest", "-q", "-k", "store"]]
