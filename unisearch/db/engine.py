"""
Database engines for the search indexes.

Each species site is backed by several databases (core, vega, est,
variation, compara, funcgen). Engines are created lazily, one per
connection id, and shared for the life of the process.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from unisearch.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class ConnectionProvider(Protocol):
    def get_connection(self, connection_id: str) -> Optional[Engine]:
        ...


class EngineRegistry:
    """Lazily created SQLAlchemy engines keyed by connection id."""

    def __init__(self, urls: dict[str, str], query_timeout: Optional[int] = None):
        self._urls = dict(urls)
        self._query_timeout = query_timeout
        self._engines: dict[str, Engine] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "EngineRegistry":
        config = config or default_settings
        return cls(config.databases, query_timeout=config.query_timeout)

    def register(self, connection_id: str, engine: Engine) -> None:
        """Register an already built engine under a connection id."""
        with self._lock:
            self._engines[connection_id] = engine

    def get_connection(self, connection_id: str) -> Optional[Engine]:
        """
        Return the engine for a connection id.

        A database the site is not configured with returns None, so that
        partial deployments simply yield no matches for it.
        """
        with self._lock:
            engine = self._engines.get(connection_id)
            if engine is None and connection_id in self._urls:
                try:
                    engine = self._build_engine(self._urls[connection_id])
                except (ArgumentError, ImportError) as e:
                    logger.error(f"Cannot create engine for '{connection_id}': {e}")
                    engine = None
                else:
                    self._engines[connection_id] = engine
        return engine

    def _build_engine(self, url: str) -> Engine:
        connect_args = {}
        if self._query_timeout and make_url(url).get_backend_name() == "mysql":
            connect_args = {
                "read_timeout": self._query_timeout,
                "write_timeout": self._query_timeout,
            }
        return create_engine(url, pool_pre_ping=True, connect_args=connect_args)

    def dispose(self) -> None:
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()


_registry: Optional[EngineRegistry] = None


def get_engine_registry() -> EngineRegistry:
    """Process-wide registry built from settings."""
    global _registry
    if _registry is None:
        _registry = EngineRegistry.from_settings()
    return _registry
