"""
Application error taxonomy.

Services raise these; the handlers registered in app.main turn them into
``{"message": ..., "code": ...}`` JSON responses.
"""

from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[list] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["errors"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class AuthError(AppError):
    status_code = 400
    code = "auth_error"


class PermissionDeniedError(AppError):
    status_code = 403
    code = "forbidden"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class DependencyError(AppError):
    # Email / media / identity provider failures
    status_code = 502
    code = "dependency_error"


def validation_error_from(errors: list[dict]) -> ValidationError:
    """Build a ValidationError from pydantic / FastAPI error dicts."""
    details = []
    missing = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "form", "query", "path")]
        field = ".".join(loc) or "body"
        if err.get("type") == "missing":
            missing.append(field)
        details.append({"field": field, "message": err.get("msg", "Invalid value")})

    if missing and len(missing) == len(details):
        message = f"Missing required fields: {', '.join(missing)}"
    elif details:
        first = details[0]
        message = f"Invalid value for '{first['field']}': {first['message']}"
    else:
        message = "Invalid request data"
    return ValidationError(message, details=details)
