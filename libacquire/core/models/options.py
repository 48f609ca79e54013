"""
Runtime options — per-run switches read from the environment.

These are the knobs a caller flips without touching libacquire.yml:
forcing a source build, choosing the crypto backend, dropping the GPU
feature, and authenticating against the release API.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_TRUTHY = {"1", "true", "yes", "on"}

# Environment variable → option field
ENV_OPTIONS: dict[str, str] = {
    "FORCE_BUILD_FROM_SOURCE": "force_build",
    "USE_ALTERNATE_CRYPTO_BACKEND": "alternate_backend",
    "USE_PORTABLE_BACKEND": "portable_backend",
    "DISABLE_GPU": "disable_gpu",
}

API_TOKEN_ENV = "API_AUTH_TOKEN"


def env_flag(value: str | None) -> bool:
    """Interpret an environment string as a boolean switch."""
    return value is not None and value.strip().lower() in _TRUTHY


class AcquireOptions(BaseModel):
    """Immutable switches for one acquisition run."""

    model_config = ConfigDict(frozen=True)

    force_build: bool = False
    alternate_backend: bool = False
    portable_backend: bool = False
    disable_gpu: bool = False
    api_token: str | None = Field(default=None, repr=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AcquireOptions:
        """Build options from environment variables (default: ``os.environ``)."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            field: env_flag(env.get(name)) for name, field in ENV_OPTIONS.items()
        }
        token = env.get(API_TOKEN_ENV, "").strip()
        values["api_token"] = token or None
        return cls(**values)

    def with_overrides(self, **overrides: bool | None) -> AcquireOptions:
        """Return a copy with every non-None override applied."""
        update = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=update) if update else self
