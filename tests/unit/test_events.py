"""
Unit tests for shared events and the Redis publisher.
"""
import json
import pytest
import redis

from shared.events import (
    Event,
    EventType,
    game_initialized_event,
    match_created_event,
    match_resolved_event,
    rating_minted_event,
    rating_updated_event,
    registry_created_event,
)
from shared.pubsub import PubSubClient


class TestEvent:
    """Tests for Event serialization."""

    def test_timestamp_defaults(self):
        event = Event(type=EventType.MATCH_CREATED, namespace="chess")
        assert event.timestamp.endswith("Z")
        assert event.data == {}

    def test_to_dict(self):
        event = Event(type=EventType.MATCH_RESOLVED, namespace="chess", timestamp="t", data={"x": 1})
        assert event.to_dict() == {
            "type": "match.resolved",
            "namespace": "chess",
            "timestamp": "t",
            "data": {"x": 1},
        }

    def test_json_round_trip(self):
        event = match_resolved_event("chess", "0xabc", 1)
        restored = Event.from_json(event.to_json())
        assert restored.type == EventType.MATCH_RESOLVED
        assert restored.namespace == "chess"
        assert restored.data == {"match": "0xabc", "winner_index": 1}

    def test_unknown_type_kept_as_string(self):
        restored = Event.from_dict({"type": "custom.thing", "namespace": "chess"})
        assert restored.type == "custom.thing"


class TestEventConstructors:
    """Tests for the event helper constructors."""

    def test_game_initialized(self):
        event = game_initialized_event("chess", "0xad")
        assert event.type == EventType.GAME_INITIALIZED
        assert event.data == {"owner": "0xad"}

    def test_registry_created(self):
        event = registry_created_event("chess", "ratings", "0x1")
        assert event.data == {"kind": "ratings", "address": "0x1"}

    def test_rating_minted(self):
        event = rating_minted_event("chess", "0xa", "0x1", 100)
        assert event.data["score"] == 100

    def test_rating_updated(self):
        event = rating_updated_event("chess", "0xa", 100, 95, "loss")
        assert event.data == {"player": "0xa", "old_score": 100, "new_score": 95, "result": "loss"}

    def test_match_created(self):
        event = match_created_event("chess", "0xm", [["0xa"], ["0xb"]])
        assert event.data["teams"] == [["0xa"], ["0xb"]]


class TestPubSubClient:
    """Tests for PubSubClient against a mocked Redis client."""

    @pytest.fixture
    def redis_client(self, mocker):
        return mocker.MagicMock()

    def test_publish_game_event(self, redis_client):
        client = PubSubClient(redis_client, log_size=10)
        event = game_initialized_event("chess", "0xad")

        assert client.publish_game_event("chess", event) is True

        redis_client.publish.assert_called_once_with("game:chess:events", event.to_json())
        redis_client.lpush.assert_called_once_with("game:chess:event_log", event.to_json())
        redis_client.ltrim.assert_called_once_with("game:chess:event_log", 0, 9)

    def test_publish_failure_returns_false(self, redis_client):
        redis_client.publish.side_effect = redis.ConnectionError("down")
        client = PubSubClient(redis_client)

        assert client.publish_game_event("chess", game_initialized_event("chess", "0xad")) is False

    def test_get_recent_events(self, redis_client):
        stored = [match_resolved_event("chess", "0xm", 0).to_json()]
        redis_client.lrange.return_value = stored
        client = PubSubClient(redis_client)

        events = client.get_recent_events("chess", count=5)

        redis_client.lrange.assert_called_once_with("game:chess:event_log", 0, 4)
        assert len(events) == 1
        assert json.loads(stored[0])["type"] == events[0].type.value
