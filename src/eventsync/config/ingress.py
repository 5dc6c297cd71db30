"""Change-signal ingress configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_list, require_env_vars

DEFAULT_JWT_ALGORITHMS = ("HS256",)


@dataclass(frozen=True)
class IngressConfig:
    jwt_secret: str
    jwt_algorithms: tuple[str, ...] = DEFAULT_JWT_ALGORITHMS
    allowed_origins: tuple[str, ...] = field(default_factory=tuple)


def get_ingress_config() -> IngressConfig:
    values = require_env_vars(("JWT_SECRET",))
    return IngressConfig(
        jwt_secret=values["JWT_SECRET"],
        allowed_origins=optional_env_list("CORS_ALLOWED_ORIGINS"),
    )
