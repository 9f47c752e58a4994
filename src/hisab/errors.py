"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Iterable


class HisabError(Exception):
    """Base class for errors raised by Hisab services."""

    status_code = 500
    message = "Internal error"

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(HisabError):
    """A payload broke a domain rule; carries field-level issues."""

    status_code = 400
    message = "Validation error"

    def __init__(self, errors: Iterable[dict[str, Any]]):
        self.errors = list(errors)
        super().__init__(self.message)

    @classmethod
    def single(cls, field: str, msg: str, error_type: str = "value_error") -> "ValidationError":
        return cls([{"loc": [field], "msg": msg, "type": error_type}])

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """Convert a ``pydantic.ValidationError`` into field-level issues."""

        issues = []
        for error in exc.errors(include_url=False):
            issues.append(
                {
                    "loc": [str(part) for part in error.get("loc", ())],
                    "msg": error.get("msg", "Invalid value"),
                    "type": error.get("type", "value_error"),
                }
            )
        return cls(issues)

    def fields(self) -> dict[str, list[str]]:
        """Group messages by the top-level field they refer to."""

        structured: dict[str, list[str]] = {}
        for issue in self.errors:
            loc = issue.get("loc") or ["__root__"]
            structured.setdefault(str(loc[0]), []).append(issue["msg"])
        return structured

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class BadIdentifierError(HisabError):
    """A path id or name is malformed or outside its closed set."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnknownOwnerError(HisabError):
    """The session names an owner that does not exist."""

    status_code = 401
    message = "Unknown session owner"


class NotFoundError(HisabError):
    """An id or name does not resolve within the caller's owner scope."""

    status_code = 404

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        self.message = f"{entity} not found"
        super().__init__(f"{entity} {key!r} not found")


class StorageError(HisabError):
    """Unexpected persistence failure; details stay in the logs."""

    status_code = 500

    def __init__(self, operation: str, entity: str, key: Any = None):
        self.operation = operation
        self.entity = entity
        self.key = key
        self.message = f"Error {operation} {entity}"
        super().__init__(self.message if key is None else f"{self.message} {key!r}")


__all__ = [
    "BadIdentifierError",
    "HisabError",
    "NotFoundError",
    "StorageError",
    "UnknownOwnerError",
    "ValidationError",
]
