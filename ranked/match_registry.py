import logging
from typing import List, Optional, Sequence, Tuple

from shared.events import match_created_event, registry_created_event
from shared.pubsub import PubSubClient
from shared.state_machine import MatchState

from .addressing import (
    collection_address,
    match_collection_name,
    match_entity_name,
    normalize_address,
)
from .authority import AuthorityCapability, AuthorityRegistry, GameNamespace
from .entity_factory import EntityFactory
from .errors import AlreadyExists, InvalidInput, NotFound
from .models import atomic, Collection, Match

logger = logging.getLogger(__name__)

MATCHES_KIND = 'matches'
MATCHES_DESCRIPTION = 'Match results'
MATCHES_URI = ''

MIN_TEAMS = 2


def validate_teams(teams: Sequence[Sequence[str]]) -> List[List[str]]:
    """
    Check the team layout of a new match and normalize player addresses.

    Requires at least two teams, no empty team, and equal team sizes.
    """
    if isinstance(teams, (str, bytes)) or not isinstance(teams, (list, tuple)):
        raise InvalidInput("Teams must be a list of player lists")

    if len(teams) < MIN_TEAMS:
        raise InvalidInput(f"A match needs at least {MIN_TEAMS} teams, got {len(teams)}")

    normalized = []
    for index, team in enumerate(teams):
        if isinstance(team, (str, bytes)) or not isinstance(team, (list, tuple)):
            raise InvalidInput(f"Team {index} must be a list of players")
        if not team:
            raise InvalidInput(f"Team {index} is empty")
        normalized.append([normalize_address(player) for player in team])

    sizes = {len(team) for team in normalized}
    if len(sizes) != 1:
        raise InvalidInput(f"Teams must be the same size, got sizes {[len(t) for t in normalized]}")

    return normalized


class MatchRegistry:
    """
    Per-namespace match collection.

    Matches are minted into the admin's collection, owned by the admin and
    never transferable. Resolution lives in ``MatchResolutionEngine``.
    """

    def __init__(
        self,
        authority: AuthorityRegistry,
        factory: EntityFactory = None,
        pubsub: PubSubClient = None
    ):
        self.authority = authority
        self.factory = factory or EntityFactory()
        self.pubsub = pubsub

    def get_registry_address(self, namespace: GameNamespace) -> str:
        return collection_address(namespace.owner, match_collection_name(namespace.name))

    def get_registry(self, namespace: GameNamespace) -> Optional[Collection]:
        return self.factory.get_collection_at(self.get_registry_address(namespace))

    def registry_exists(self, namespace: GameNamespace) -> bool:
        return self.get_registry(namespace) is not None

    def initialize_match_registry(self, capability: AuthorityCapability) -> Collection:
        self.authority.require_authority(capability)
        namespace = capability.namespace

        if self.registry_exists(namespace):
            raise AlreadyExists(f"Match registry for '{namespace.name}' already exists")

        with atomic():
            registry = self.factory.create_collection(
                capability,
                description=MATCHES_DESCRIPTION,
                name=match_collection_name(namespace.name),
                royalty_bps=None,
                uri=MATCHES_URI,
                kind=MATCHES_KIND
            )

        logger.info(f"Created match registry for {namespace.name} at {registry.address}")
        if self.pubsub:
            self.pubsub.publish_game_event(
                namespace.name,
                registry_created_event(namespace.name, MATCHES_KIND, registry.address)
            )
        return registry

    def create_match(self, capability: AuthorityCapability, teams: Sequence[Sequence[str]]) -> Match:
        """Create an open match between ``teams``."""
        self.authority.require_authority(capability)
        namespace = capability.namespace

        registry = self.get_registry(namespace)
        if not registry:
            raise NotFound(f"Match registry for '{namespace.name}' not found")

        teams = validate_teams(teams)

        with atomic():
            match = self.factory.mint_entity(
                capability,
                collection_name=registry.name,
                name=match_entity_name(registry.supply + 1),
                entity_cls=Match,
                transferable=False,
                teams=teams,
                outcome=None,
                status=MatchState.OPEN.value
            )

        logger.info(f"Created match {match.name} ({match.address}) in {namespace.name}")
        if self.pubsub:
            self.pubsub.publish_game_event(
                namespace.name,
                match_created_event(namespace.name, match.address, teams)
            )
        return match

    def get_match_record(self, namespace: GameNamespace, match_address: str) -> Optional[Match]:
        return Match.query.filter_by(
            namespace=namespace.name,
            address=normalize_address(match_address)
        ).first()

    def get_match(self, namespace: GameNamespace, match_address: str) -> Tuple[List[List[str]], Optional[int]]:
        """Return ``(teams, outcome)``; outcome is None while the match is open."""
        match = self.get_match_record(namespace, match_address)
        if not match:
            raise NotFound(f"Match {match_address} not found in '{namespace.name}'")
        return ([list(team) for team in match.teams], match.outcome)

    def list_matches(
        self,
        namespace: GameNamespace,
        status: str = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[Match]:
        query = Match.query.filter_by(namespace=namespace.name)

        if status:
            query = query.filter_by(status=status)

        query = query.order_by(Match.id.desc())
        return query.offset(offset).limit(limit).all()
