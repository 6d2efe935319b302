from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "ChangeMe123!"

# (email, first_name, last_name, role, employee_code, department, position)
DEMO_ACCOUNTS = (
    ("admin@company.local", "System", "Admin", "SUPER_ADMIN", "EMP-0001", "Management", "Administrator"),
    ("hr@company.local", "Hannah", "Reyes", "HR_MANAGER", "EMP-0002", "Human Resources", "HR Manager"),
    ("manager@company.local", "Marco", "Diaz", "DEPARTMENT_MANAGER", "EMP-0003", "Engineering", "Team Lead"),
    ("employee@company.local", "Elena", "Park", "EMPLOYEE", "EMP-0004", "Engineering", "Developer"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
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
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db: DatabaseConnection, path: Path) -> int:
    sql = _strip_comments(_strip_create_db_and_use(path.read_text(encoding="utf-8")))
    conn = db.connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


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
    db = DatabaseConnection(DBConfig.from_dict(db_config))
    count = _run_script(db, Path(schema_path))
    logger.info("Applied %s (%d statements) to %s", schema_path, count, db.config.describe())


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    db = DatabaseConnection(DBConfig.from_dict(db_config))
    count = _run_script(db, Path(seed_path))
    logger.info("Applied %s (%d statements)", seed_path, count)


def ensure_demo_users(db_config: dict, *, password: str = DEMO_PASSWORD) -> None:
    """Create (or reset) one login per role, each with an employee profile."""

    db = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = db.connect()
    try:
        cur = conn.cursor(dictionary=True)
        password_hash = generate_password_hash(password)

        for email, first_name, last_name, role, code, department, position in DEMO_ACCOUNTS:
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    """
                    UPDATE users
                    SET first_name=%s, last_name=%s, password_hash=%s, role=%s, is_active=1
                    WHERE user_id=%s
                    """,
                    (first_name, last_name, password_hash, role, user_id),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (email, first_name, last_name, password_hash, role)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (email, first_name, last_name, password_hash, role),
                )
                user_id = int(cur.lastrowid)

            cur.execute(
                """
                INSERT INTO employees (user_id, employee_code, department, position)
                VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE department=VALUES(department), position=VALUES(position), is_active=1
                """,
                (user_id, code, department, position),
            )

        conn.commit()
    finally:
        conn.close()
    logger.info("Demo accounts ready (%d users)", len(DEMO_ACCOUNTS))


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
