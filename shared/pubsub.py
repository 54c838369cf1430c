import logging
from typing import List

import redis

from .events import Event

logger = logging.getLogger(__name__)


class PubSubClient:
    """
    Publishes engine events to Redis.
    Each namespace gets a live channel plus a capped event log.
    """

    def __init__(self, redis_client: redis.Redis, log_size: int = 1000):
        self.redis = redis_client
        self.log_size = log_size

    @classmethod
    def from_url(cls, redis_url: str, log_size: int = 1000) -> "PubSubClient":
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        return cls(client, log_size=log_size)

    @staticmethod
    def channel_for(namespace: str) -> str:
        return f"game:{namespace}:events"

    @staticmethod
    def log_key_for(namespace: str) -> str:
        return f"game:{namespace}:event_log"

    def publish(self, channel: str, event: Event):
        self.redis.publish(channel, event.to_json())

    def publish_game_event(self, namespace: str, event: Event) -> bool:
        """
        Publish an event for a namespace and append it to the event log.

        Returns False instead of raising when Redis is unreachable.
        """
        try:
            self.publish(self.channel_for(namespace), event)
            self.log_event(namespace, event)
            return True
        except redis.RedisError as e:
            logger.error(f"Failed to publish {event.type} for {namespace}: {e}")
            return False

    def log_event(self, namespace: str, event: Event):
        key = self.log_key_for(namespace)
        self.redis.lpush(key, event.to_json())
        self.redis.ltrim(key, 0, self.log_size - 1)

    def get_recent_events(self, namespace: str, count: int = 50) -> List[Event]:
        events_json = self.redis.lrange(self.log_key_for(namespace), 0, count - 1)
        return [Event.from_json(e) for e in events_json]
