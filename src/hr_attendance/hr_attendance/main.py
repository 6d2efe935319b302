from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, request

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.auth import client_ip
from .common.errors import ok, register_error_handlers
from .common.logging_config import setup_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .payroll.controller import register as register_payroll
from .shifts.controller import register as register_shifts
from .users.controller import register as register_users

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("Demo seed ready")


def _register_access_log(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        access_logger.info(
            "%s %s -> %s (%.1fms) ip=%s",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
            client_ip() or "-",
        )
        return response


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), log_dir=getattr(settings, "LOG_DIR", None))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("Starting with settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())
        _bootstrap_database(settings, db_config)
        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            jwt_algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
            jwt_expires_hours=int(getattr(settings, "JWT_EXPIRES_HOURS", 168)),
            timezone=getattr(settings, "TIMEZONE", None),
        )

    app.extensions["container"] = container

    register_error_handlers(app)
    _register_access_log(app)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "OK", "environment": settings_module.rsplit(".", 1)[-1]})

    register_users(app, container)
    register_employees(app, container)
    register_shifts(app, container)
    register_attendance(app, container)
    register_leave(app, container)
    register_payroll(app, container)

    return app
