from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ValidationError(Exception):
    """Raised when a submission fails input validation."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        fields = ", ".join(item["field"] for item in errors) or "payload"
        super().__init__(f"invalid fields: {fields}")


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part != "__root__"]
    return ".".join(parts) or "payload"


def _message(error: dict[str, Any]) -> str:
    message = str(error.get("msg") or "Invalid value")
    # pydantic prefixes custom validator messages with "Value error, "
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


def validate_submission(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a raw request payload against ``model``."""

    if not isinstance(payload, dict):
        raise ValidationError([{"field": "payload", "message": "Request body must be a JSON object"}])
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [{"field": _field_name(err.get("loc", ())), "message": _message(err)} for err in exc.errors()]
        raise ValidationError(errors) from exc
