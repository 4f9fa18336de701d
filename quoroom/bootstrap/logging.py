"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from quoroom.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_ENV = "QUOROOM_ENV"


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog for the given environment.

    Args:
        environment: 'production' or 'development'. Defaults to QUOROOM_ENV,
            then 'production'.
    """
    if environment is None:
        environment = os.environ.get(ENVIRONMENT_ENV, "production")
    _configure_structlog(environment=environment)


__all__ = ["configure_structlog"]
