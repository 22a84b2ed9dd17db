from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Optional

from ..core.logging import get_logger
from .connection import DBConfig, DatabaseConnection

logger = get_logger(__name__)

_DATABASE_LINE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")
_COMMENT_LINE = re.compile(r"(?m)^\s*--.*$")


def _statements(sql: str) -> Iterator[str]:
    # Splits on ';' outside quoted literals.
    current: list[str] = []
    quote: Optional[str] = None
    chars = iter(sql)
    for ch in chars:
        if quote is not None:
            current.append(ch)
            if ch == "\\":
                current.append(next(chars, ""))
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(current).strip()
            current = []
            if stmt:
                yield stmt
            continue
        current.append(ch)

    tail = "".join(current).strip()
    if tail:
        yield tail


def split_schema(sql: str) -> list[str]:
    """Table DDL from a schema file; database selection lines are dropped so
    the configured database name always wins."""

    cleaned = _COMMENT_LINE.sub("", _DATABASE_LINE.sub("", sql))
    return list(_statements(cleaned))


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    statements = split_schema(Path(schema_path).read_text(encoding="utf-8"))

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema_applied", statements=len(statements), schema=str(schema_path))


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
