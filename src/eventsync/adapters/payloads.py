"""Validation of JSON payloads against the adapters' response models."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .http_resilience import ApiResponseError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], payload: object, *, method: str, url: str) -> ModelT:
    """Validate ``payload`` or fail with a classified :class:`ApiResponseError`."""

    if payload is None:
        raise ApiResponseError(
            f"{method} {url} returned an empty body, expected {model.__name__}",
            method=method,
            url=url,
        )
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        raise ApiResponseError(
            f"{method} {url} returned an unexpected {model.__name__} payload ({fields})",
            method=method,
            url=url,
        ) from exc
