from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ActionResult(BaseModel, Generic[T]):
    """Uniform outcome of a mutation: ``ok`` with a value, or a human-readable ``error``."""

    ok: bool
    value: T | None = None
    error: str | None = None
    field_errors: dict[str, list[str]] | None = None

    @classmethod
    def success(cls, value: T) -> "ActionResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, field_errors: dict[str, list[str]] | None = None) -> "ActionResult[T]":
        return cls(ok=False, error=error, field_errors=field_errors)
