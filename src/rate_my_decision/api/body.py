"""Bounded, strict JSON request-body parsing.

Route handlers declare ``Annotated[Model, Depends(json_body(Model, max_bytes))]``.
The body is read with a byte ceiling before any parsing happens, must hold
exactly one JSON object, and is validated against a model that forbids
unknown fields.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Final, TypeVar

import pydantic
from fastapi import Request

from rate_my_decision.core.errors import ValidationError

MAX_DECISION_BODY_BYTES: Final[int] = 4 * 1024
MAX_RESPONSE_BODY_BYTES: Final[int] = 4 * 1024
MAX_VOTE_BODY_BYTES: Final[int] = 2 * 1024

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def _too_large(max_bytes: int) -> ValidationError:
    return ValidationError(f"request body must be {max_bytes} bytes or fewer")


async def read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the raw body, refusing it as soon as it exceeds ``max_bytes``."""
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            if int(declared) > max_bytes:
                raise _too_large(max_bytes)
        except ValueError:
            raise ValidationError("invalid Content-Length header") from None

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise _too_large(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def describe_validation_error(exc: pydantic.ValidationError) -> str:
    """Render the first pydantic error as a message naming the field."""
    error = exc.errors(include_url=False)[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    kind = error.get("type", "")
    if kind == "extra_forbidden":
        return f'invalid JSON: unknown field "{field}"'
    if kind == "missing":
        return f"{field} is required"
    message = str(error.get("msg", "is invalid"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{field}: {message}" if field else message


def parse_json_model(raw: bytes, model: type[ModelT]) -> ModelT:
    """Parse ``raw`` as a single JSON object and validate it against ``model``."""
    if not raw.strip():
        raise ValidationError("invalid JSON: request body is empty")
    try:
        # json.loads rejects trailing values ("Extra data").
        document = json.loads(raw)
    except UnicodeDecodeError:
        raise ValidationError("invalid JSON: request body must be UTF-8") from None
    except json.JSONDecodeError as exc:
        if exc.msg == "Extra data":
            raise ValidationError(
                "invalid JSON: request body must contain a single JSON object"
            ) from None
        raise ValidationError(f"invalid JSON: {exc.msg}") from None
    if not isinstance(document, dict):
        raise ValidationError("invalid JSON: request body must be a JSON object")

    try:
        return model.model_validate_json(raw)
    except pydantic.ValidationError as exc:
        raise ValidationError(describe_validation_error(exc)) from None


def json_body(model: type[ModelT], max_bytes: int) -> Callable[[Request], Awaitable[ModelT]]:
    """Build a dependency that yields a validated ``model`` from the request body."""

    async def _dependency(request: Request) -> ModelT:
        raw = await read_limited_body(request, max_bytes)
        return parse_json_model(raw, model)

    return _dependency
