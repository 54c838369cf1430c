from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List
import json


class EventType(str, Enum):
    # Namespace lifecycle
    GAME_INITIALIZED = "game.initialized"
    REGISTRY_CREATED = "registry.created"

    # Ratings
    RATING_MINTED = "rating.minted"
    RATING_UPDATED = "rating.updated"

    # Matches
    MATCH_CREATED = "match.created"
    MATCH_RESOLVED = "match.resolved"


@dataclass
class Event:
    type: EventType
    namespace: str
    timestamp: str = None
    data: dict = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"
        if self.data is None:
            self.data = {}

    def to_dict(self) -> dict:
        return {
            "type": self.type.value if isinstance(self.type, EventType) else self.type,
            "namespace": self.namespace,
            "timestamp": self.timestamp,
            "data": self.data
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        return cls(
            type=EventType(data["type"]) if data["type"] in [e.value for e in EventType] else data["type"],
            namespace=data["namespace"],
            timestamp=data.get("timestamp"),
            data=data.get("data", {})
        )

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        return cls.from_dict(json.loads(json_str))


def game_initialized_event(namespace: str, owner: str) -> Event:
    return Event(
        type=EventType.GAME_INITIALIZED,
        namespace=namespace,
        data={"owner": owner}
    )


def registry_created_event(namespace: str, kind: str, address: str) -> Event:
    return Event(
        type=EventType.REGISTRY_CREATED,
        namespace=namespace,
        data={
            "kind": kind,
            "address": address
        }
    )


def rating_minted_event(namespace: str, player: str, address: str, score: int) -> Event:
    return Event(
        type=EventType.RATING_MINTED,
        namespace=namespace,
        data={
            "player": player,
            "address": address,
            "score": score
        }
    )


def rating_updated_event(namespace: str, player: str, old_score: int, new_score: int, result: str) -> Event:
    return Event(
        type=EventType.RATING_UPDATED,
        namespace=namespace,
        data={
            "player": player,
            "old_score": old_score,
            "new_score": new_score,
            "result": result
        }
    )


def match_created_event(namespace: str, match_address: str, teams: List[List[str]]) -> Event:
    return Event(
        type=EventType.MATCH_CREATED,
        namespace=namespace,
        data={
            "match": match_address,
            "teams": teams
        }
    )


def match_resolved_event(namespace: str, match_address: str, winner_index: int) -> Event:
    return Event(
        type=EventType.MATCH_RESOLVED,
        namespace=namespace,
        data={
            "match": match_address,
            "winner_index": winner_index
        }
    )
