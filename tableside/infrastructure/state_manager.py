import json
import logging
from typing import List, Optional

import redis
from redis.exceptions import RedisError

from tableside.core.errors import TransientError
from tableside.core.retry import retry_read
from tableside.interfaces.ISessionStore import ISessionStore

logger = logging.getLogger(__name__)

BACKEND_REDIS = "redis"
BACKEND_MEMORY = "memory"


class StateManager(ISessionStore):
    """
    Guest session storage.

    Redis is the primary memory. If it cannot be reached at startup the
    manager runs on a process-local dict instead. Once running on Redis,
    a failed write is rejected (TransientError) rather than silently
    diverging into RAM, and a failed read is retried with backoff.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl: int = 3600,
        read_attempts: int = 3,
        read_base_delay: float = 0.2,
        client=None,
    ):
        self.ttl = ttl
        self.read_attempts = read_attempts
        self.read_base_delay = read_base_delay
        self._memory_store: dict[str, str] = {}
        self.redis = client

        if self.redis is None and redis_url:
            try:
                self.redis = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=1  # Fail fast if Redis is down
                )
                self.redis.ping()
                logger.info("✅ StateManager: Connected to Redis.")
            except RedisError as e:
                logger.warning(f"⚠️ StateManager: Redis unreachable ({e}). Using RAM store.")
                self.redis = None
        elif self.redis is None:
            logger.warning("⚠️ StateManager: REDIS_URL not set. Using RAM store.")

    @property
    def backend(self) -> str:
        return BACKEND_REDIS if self.redis is not None else BACKEND_MEMORY

    # ---------------------------------------------------------
    # Raw key access
    # ---------------------------------------------------------
    def _get(self, key: str) -> Optional[str]:
        if self.redis is None:
            return self._memory_store.get(key)
        return retry_read(
            lambda: self.redis.get(key),
            retry_on=(RedisError,),
            attempts=self.read_attempts,
            base_delay=self.read_base_delay,
            description=f"Session read ({key})",
        )

    def _set(self, key: str, value: str):
        if self.redis is None:
            self._memory_store[key] = value
            return
        try:
            self.redis.setex(key, self.ttl, value)
        except RedisError as e:
            logger.error(f"❌ Redis write failed for {key}: {e}")
            raise TransientError("Session storage is temporarily unavailable") from e

    def _delete(self, key: str):
        if self.redis is None:
            self._memory_store.pop(key, None)
            return
        try:
            self.redis.delete(key)
        except RedisError as e:
            logger.error(f"❌ Redis delete failed for {key}: {e}")
            raise TransientError("Session storage is temporarily unavailable") from e

    # ---------------------------------------------------------
    # Cart document
    # ---------------------------------------------------------
    def get_cart(self, guest_id: str) -> List[dict]:
        data = self._get(f"guest:{guest_id}:cart")
        return json.loads(data) if data else []

    def save_cart(self, guest_id: str, lines: List[dict]):
        """Whole-document write: either the new cart lands or the old one stays."""
        key = f"guest:{guest_id}:cart"
        if not lines:
            self._delete(key)
            return
        self._set(key, json.dumps(lines))

    def delete_cart(self, guest_id: str):
        self._delete(f"guest:{guest_id}:cart")

    # ---------------------------------------------------------
    # Table binding
    # ---------------------------------------------------------
    def get_table(self, guest_id: str) -> Optional[int]:
        data = self._get(f"guest:{guest_id}:table")
        return int(data) if data else None

    def set_table(self, guest_id: str, table_number: int):
        self._set(f"guest:{guest_id}:table", str(table_number))

    def delete_table(self, guest_id: str):
        self._delete(f"guest:{guest_id}:table")
