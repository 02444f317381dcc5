from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Union

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from ..permissions.model import DEFAULT_ROLE_PERMISSIONS
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_ADMIN_EMAIL = "admin@example.com"
DEMO_ADMIN_PASSWORD = "admin123"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connection(db_config: dict) -> DatabaseConnection:
    return DatabaseConnection(DBConfig.from_dict(db_config))


def ensure_database_exists(db_config: dict) -> None:
    factory = _connection(db_config)
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Union[str, Path] = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_admin(
    db_config: dict,
    *,
    email: str = DEMO_ADMIN_EMAIL,
    password: str = DEMO_ADMIN_PASSWORD,
    full_name: str = "Admin Demo",
) -> None:
    """Create the admin profile, or reset its password and role when it already exists."""

    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)
        password_hash = generate_password_hash(password)
        cur.execute("SELECT profile_id FROM profiles WHERE email=%s", (email,))
        if cur.fetchone():
            cur.execute(
                "UPDATE profiles SET full_name=%s, password_hash=%s, role=%s, is_active=1 WHERE email=%s",
                (full_name, password_hash, Role.ADMIN.value, email),
            )
        else:
            cur.execute(
                """
                INSERT INTO profiles (email, full_name, role, password_hash, employment_type, is_active)
                VALUES (%s, %s, %s, %s, 'full-time', 1)
                """,
                (email, full_name, Role.ADMIN.value, password_hash),
            )
        conn.commit()
    finally:
        conn.close()


def seed_role_permissions(db_config: dict, *, overwrite: bool = False) -> int:
    """Insert the default permission matrix for roles not configured yet.

    Roles an administrator already configured are kept unless overwrite is set.
    """

    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        if overwrite:
            cur.execute("DELETE FROM role_permissions")
            cur.execute("DELETE FROM role_permission_overrides")
        inserted = 0
        for role, perms in DEFAULT_ROLE_PERMISSIONS.items():
            cur.execute("INSERT IGNORE INTO role_permission_overrides(role) VALUES(%s)", (role.value,))
            if cur.rowcount != 1:
                continue
            rows = [(role.value, perm.value) for perm in perms]
            cur.executemany("INSERT IGNORE INTO role_permissions(role, permission) VALUES(%s,%s)", rows)
            inserted += len(rows)
        conn.commit()
        return inserted
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
