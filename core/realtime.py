"""
Realtime publishing for open conversations.

The coordinator publishes through a RealtimeChannel it is handed; the push
transport to browsers subscribes on the other side and is not part of this
service.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from redis import Redis

logger = logging.getLogger(__name__)

NEW_MESSAGE_EVENT = "new-message"


def conversation_channel(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


class RealtimeChannel(ABC):
    @abstractmethod
    def publish(self, conversation_id: str, payload: Dict[str, Any]) -> None:
        """Publish an event to everyone watching the conversation."""
        pass


class NullRealtimeChannel(RealtimeChannel):
    """Used when realtime is disabled. Events are only logged."""

    def publish(self, conversation_id: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"Realtime disabled, dropping {payload.get('event')} for {conversation_id}")


class RedisRealtimeChannel(RealtimeChannel):
    """Publishes JSON events on the Redis pub/sub channel conversation:<id>."""

    def __init__(self, redis_url: Optional[str] = None, redis_conn: Optional[Redis] = None):
        self.redis_url = redis_url or 'redis://localhost:6379/0'
        self._redis = redis_conn

    def _get_redis(self) -> Redis:
        """Get Redis connection (lazy init)."""
        if self._redis is None:
            self._redis = Redis.from_url(self.redis_url)
        return self._redis

    def publish(self, conversation_id: str, payload: Dict[str, Any]) -> None:
        self._get_redis().publish(conversation_channel(conversation_id), json.dumps(payload, default=str))
