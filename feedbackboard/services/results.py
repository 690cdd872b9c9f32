"""
Error taxonomy and the discriminated result every public service operation
returns. Service code raises ``ServiceError`` subclasses internally; the
``service_action`` wrapper turns them into ``ActionResult`` failures so
nothing but a result crosses the service boundary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Dict, Optional

import sentry_sdk
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from feedbackboard.extensions import db

GENERIC_ERROR = "An unexpected error occurred"


class ServiceError(RuntimeError):
    """Recoverable service error (validation/authorization/uniqueness/etc.)."""

    code = "error"
    status = 400

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ServiceError):
    code = "validation_error"
    status = 400


class Unauthenticated(ServiceError):
    code = "unauthenticated"
    status = 401


class Forbidden(ServiceError):
    code = "forbidden"
    status = 403


class NotFound(ServiceError):
    code = "not_found"
    status = 404


class Conflict(ServiceError):
    code = "conflict"
    status = 409


class Internal(ServiceError):
    code = "internal"
    status = 500


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    status: int = 200
    details: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, data: Any = None, status: int = 200) -> "ActionResult":
        return cls(ok=True, data=data, status=status)

    @classmethod
    def failure(cls, exc: ServiceError) -> "ActionResult":
        return cls(
            ok=False,
            error=exc.message,
            code=exc.code,
            status=exc.status,
            details=dict(exc.details),
        )


def service_action(name: str) -> Callable:
    """
    Wrap a public service operation:
      - return value -> ActionResult.success
      - ServiceError -> rollback + ActionResult.failure (message kept)
      - database errors -> rollback, log with context, report, generic Internal
    """
    def decorator(fn: Callable) -> Callable:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return ActionResult.success(fn(*args, **kwargs))
            except ServiceError as exc:
                db.session.rollback()
                current_app.logger.info("%s refused: %s (%s)", name, exc.message, exc.code)
                return ActionResult.failure(exc)
            except SQLAlchemyError as exc:
                db.session.rollback()
                current_app.logger.exception("%s failed: args=%r kwargs=%r", name, args, sorted(kwargs))
                sentry_sdk.capture_exception(exc)
                return ActionResult.failure(Internal(GENERIC_ERROR))
        wrapper.action_name = name
        return wrapper
    return decorator
