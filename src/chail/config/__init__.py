from __future__ import annotations

from chail.config.models import ConfigError, RequestSpec, SweepConfig, TlsPolicy

__all__ = [
    "ConfigError",
    "RequestSpec",
    "SweepConfig",
    "TlsPolicy",
]
