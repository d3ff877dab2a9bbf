"""
hostbridge/client/configuration.py

Runtime configuration owned by a HostClient.

- host:       mutable through set_host() (e.g. by the ChangeHost command);
              read once per call, at invocation time
- timeout_ms: fixed at construction
"""

from __future__ import annotations

import structlog

from hostbridge.utils.settings import DEFAULT_HOST, DEFAULT_TIMEOUT_MS, Settings, parse_timeout_ms

logger = structlog.get_logger(__name__)


class ClientConfig:
    def __init__(self, host: str = DEFAULT_HOST, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self._host = host or DEFAULT_HOST
        self._timeout_ms = parse_timeout_ms(timeout_ms)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        return cls(host=settings.host, timeout_ms=settings.timeout_ms)

    def set_host(self, new_host: str) -> None:
        """Overwrite the host immediately. The value is not validated."""
        logger.info("host_changed", previous=self._host, host=new_host)
        self._host = new_host

    def get_host(self) -> str:
        return self._host

    def get_timeout(self) -> int:
        return self._timeout_ms

    @property
    def host(self) -> str:
        return self._host

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_ms / 1000.0
