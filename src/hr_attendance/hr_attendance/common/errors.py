from __future__ import annotations

import logging

import mysql.connector
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import ConflictError, DomainError

logger = logging.getLogger(__name__)


def ok(data: dict | None = None, *, message: str | None = None, status: int = 200):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(error: str, code: str, status: int, *, data: dict | None = None):
    body: dict = {"success": False, "error": error, "code": code}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.http_status >= 500:
            logger.error("%s: %s", e.code, e.message)
        else:
            logger.info("%s %s: %s", e.http_status, e.code, e.message)
        data = e.data if isinstance(e, ConflictError) else None
        return fail(e.message, e.code, e.http_status, data=data)

    @app.errorhandler(mysql.connector.Error)
    def handle_database_error(e: mysql.connector.Error):
        logger.exception("Database operation failed")
        return fail("Database operation failed", "DATABASE_ERROR", 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        codes = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED", 400: "BAD_REQUEST", 415: "UNSUPPORTED_MEDIA_TYPE"}
        return fail(e.description or e.name, codes.get(e.code, "HTTP_ERROR"), e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        return fail("Server Error", "INTERNAL_ERROR", 500)
