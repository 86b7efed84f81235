"""Typed errors and the Success/Failure result envelope.

Every outward-facing ``QuoteService`` operation returns either ``Success``
or ``Failure``. Both carry a ``kind`` discriminant, and so does every
error variant, so callers branch on ``kind`` rather than on the shape of
the payload.
"""

from __future__ import annotations

from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


# --- Errors ---


class NotFound(BaseModel):
    """A requested identifier or date does not exist upstream."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["not_found"] = "not_found"
    field: str
    value: str


class Unknown(BaseModel):
    """Any other downstream failure: transport, shape mismatch, provider fault."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"


class InvalidParameter(BaseModel):
    """A request field failed validation before any provider was called."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["invalid"] = "invalid"
    field: str
    value: str
    reason: str


Error = Annotated[Union[NotFound, Unknown, InvalidParameter], Field(discriminator="kind")]


# --- Envelope ---


class Success(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    value: T

    @property
    def ok(self) -> bool:
        return True


class Failure(BaseModel):
    """Non-empty, ordered list of errors."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    errors: list[Error]

    @field_validator("errors")
    @classmethod
    def errors_not_empty(cls, v: list[Any]) -> list[Any]:
        if not v:
            raise ValueError("a failure must carry at least one error")
        return v

    @property
    def ok(self) -> bool:
        return False

    def only_not_found(self) -> bool:
        return all(e.kind == "not_found" for e in self.errors)


def success(value: Any) -> Success[Any]:
    return Success(value=value)


def failure(*errors: NotFound | Unknown | InvalidParameter) -> Failure:
    return Failure(errors=list(errors))
