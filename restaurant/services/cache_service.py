"""
Redis read cache for stock levels.

The menu reads the dessert stock map on every page load while stock only
changes on admin edits and checkouts, so the map is cached per category
and dropped on every stock write. Redis is optional: when it is disabled
or unreachable every lookup falls through to the database.
"""

import logging
import json
from typing import Any, Optional, Callable

import redis
from redis.exceptions import RedisError
from flask import Flask, current_app

logger = logging.getLogger(__name__)


class CacheService:
    """
    JSON values in Redis under `{prefix}:{namespace}:{key}`.

    A Redis error during use marks the cache degraded; reads then go
    straight to their loader until the app restarts. Deletes keep
    reaching Redis so writes from this worker still invalidate the
    shared keys.
    """

    def __init__(self, app: Optional[Flask] = None):
        self.client: Optional[redis.Redis] = None
        self.enabled: bool = False
        self.prefix: str = 'restaurant'

        if app:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Connect using REDIS_URL unless CACHE_ENABLED is off."""
        self.prefix = app.config.get('CACHE_KEY_PREFIX', 'restaurant')

        if not app.config.get('CACHE_ENABLED', True):
            logger.info("[CACHE] Stock cache disabled via config")
            return

        self._connect(app.config.get('REDIS_URL', 'redis://redis:6379/0'))

    def _connect(self, redis_url: str) -> None:
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                retry_on_timeout=True,
                health_check_interval=30
            )
            client.ping()
        except RedisError as e:
            logger.warning(f"[CACHE] Redis unreachable at {redis_url}: {e}. Serving stock from the database.")
            return

        self.client = client
        self.enabled = True
        logger.info(f"[CACHE] Redis connected: {redis_url}")

    def _degrade(self, action: str, error: Exception) -> None:
        logger.warning(f"[CACHE] {action} failed, disabling cache: {error}")
        self.enabled = False

    def key(self, namespace: str, key: str) -> str:
        return f"{self.prefix}:{namespace}:{key}"

    def get(self, namespace: str, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = self.client.get(self.key(namespace, key))
        except RedisError as e:
            self._degrade('GET', e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"[CACHE] Dropping undecodable entry {self.key(namespace, key)}")
            return None

    def set(self, namespace: str, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a JSON-serializable value; TTL defaults to CACHE_DEFAULT_TTL."""
        if not self.enabled:
            return False
        if ttl is None:
            ttl = current_app.config.get('CACHE_DEFAULT_TTL', 60)
        try:
            self.client.setex(self.key(namespace, key), ttl, json.dumps(value))
        except RedisError as e:
            self._degrade('SET', e)
            return False
        return True

    def delete(self, namespace: str, key: str) -> bool:
        """
        Drop a key; tried even while degraded, since other workers may
        still be reading it.
        """
        if self.client is None:
            return False
        try:
            self.client.delete(self.key(namespace, key))
        except RedisError as e:
            self._degrade('DELETE', e)
            return False
        logger.info(f"[CACHE] Invalidated {self.key(namespace, key)}")
        return True

    def memoize(self, namespace: str, key: str, loader_fn: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Return the cached value, or load it, store it and return it."""
        cached = self.get(namespace, key)
        if cached is not None:
            return cached
        value = loader_fn()
        self.set(namespace, key, value, ttl)
        return value


_cache_service: Optional[CacheService] = None


def init_cache(app: Flask) -> None:
    global _cache_service
    _cache_service = CacheService(app)
    app.extensions['cache'] = _cache_service


def get_cache() -> CacheService:
    """The app's cache; RuntimeError before `init_cache` has run."""
    if _cache_service is None:
        raise RuntimeError("Cache not initialized.")
    return _cache_service
