from __future__ import annotations

import json
import logging
from threading import RLock
from typing import Any, Protocol

import redis


log = logging.getLogger(__name__)


class Store(Protocol):
    def get(self, key: str) -> dict | None: ...

    def put(self, key: str, value: dict) -> None: ...


class MemoryStore:
    """Process-local store. Values are kept as JSON text so callers never alias them."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._data: dict[str, str] = {}

    def get(self, key: str) -> dict | None:
        with self._lock:
            raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def put(self, key: str, value: dict) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = raw


class RedisStore:
    def __init__(self, url: str = "", client: Any = None) -> None:
        if client is None:
            client = redis.from_url(url, decode_responses=True)
        self._client = client

    def get(self, key: str) -> dict | None:
        raw = self._client.get(key)
        if not raw:
            return None
        return json.loads(raw)

    def put(self, key: str, value: dict) -> None:
        self._client.set(key, json.dumps(value))


def state_key(prefix: str, room_code: str) -> str:
    return f"{prefix}:room:{room_code}:state"


def create_store(redis_url: str = "") -> Store:
    if redis_url:
        log.info("using redis store")
        return RedisStore(redis_url)
    log.info("using in-memory store")
    return MemoryStore()
