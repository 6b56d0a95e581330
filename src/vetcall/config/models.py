"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, vetcall.toml only contains overrides.
An empty (or missing) vetcall.toml is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel

# --- vetcall.toml sections ---


class DispatchConfig(BaseModel):
    """[dispatch] section."""

    model_config = {"frozen": True}

    collect_all: bool = False
    cache_descriptors: bool = True
    allow_private: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
