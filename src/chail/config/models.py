from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping


class ConfigError(ValueError):
    """Raised for a structurally invalid configuration, before any request is sent."""


@dataclass(frozen=True, slots=True)
class RequestSpec:
    url: str
    method: str = "GET"
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""


@dataclass(frozen=True, slots=True)
class TlsPolicy:
    insecure: bool = False
    ca_cert: str | None = None  # PEM text


@dataclass(frozen=True, slots=True)
class SweepConfig:
    max_clients: int = 1
    repeats: int = 1
    accepted_gradient: float = 1.1
    timeout_sec: float = 1.0
    tls: TlsPolicy = field(default_factory=TlsPolicy)
    verbose: bool = False

    def validate(self) -> None:
        if self.max_clients < 1:
            msg = f"Number of clients must be at least 1, got {self.max_clients}"
            raise ConfigError(msg)
        if self.repeats < 1:
            msg = f"Number of iterations must be at least 1, got {self.repeats}"
            raise ConfigError(msg)
        if not self.accepted_gradient > 0 or math.isinf(self.accepted_gradient):
            msg = f"Accepted gradient must be a positive number, got {self.accepted_gradient}"
            raise ConfigError(msg)
        if not self.timeout_sec > 0:
            msg = f"Timeout must be positive, got {self.timeout_sec}"
            raise ConfigError(msg)

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "max_clients": self.max_clients,
            "repeats": self.repeats,
            "accepted_gradient": self.accepted_gradient,
            "timeout_sec": self.timeout_sec,
            "tls": {
                "insecure": self.tls.insecure,
                "ca_cert": self.tls.ca_cert is not None,
            },
            "verbose": self.verbose,
        }
