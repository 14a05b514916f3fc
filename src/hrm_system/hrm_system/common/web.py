"""Helpers shared by the Flask controllers (session gate and JSON envelopes)."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Iterable

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StateError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_HTTP_STATUS = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StateError, 409),
    (StoreError, 503),
)


def http_status_for(err: DomainError) -> int:
    for exc_type, status in _HTTP_STATUS:
        if isinstance(err, exc_type):
            return status
    return 400


def ok(data: Any = None, *, reload: Iterable[str] = (), status: int = 200):
    """Success envelope. ``reload`` names the aggregates the caller should refetch."""
    return jsonify({"ok": True, "data": data, "reload": list(reload)}), status


def fail(err: DomainError):
    return jsonify({"ok": False, "error": err.to_dict()}), http_status_for(err)


def json_body() -> dict:
    """Request JSON object; a missing body is empty, any other shape is rejected."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def current_user() -> tuple[int, Role]:
    return int(session["employee_id"]), Role(session["role"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return fail(AuthenticationError("Please log in to continue"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return fail(AuthenticationError("Please log in to continue"))
        if session.get("role") != Role.ADMIN.value:
            return fail(AuthorizationError("Admin access required"))
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(err: DomainError):
        return fail(err)

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        from werkzeug.exceptions import HTTPException

        if isinstance(err, HTTPException):
            return jsonify({"ok": False, "error": {"kind": "http", "message": err.description}}), err.code
        logger.exception("Unhandled error")
        message = str(err) if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"ok": False, "error": {"kind": "internal", "message": message}}), 500
