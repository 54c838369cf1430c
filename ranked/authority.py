"""
Capabilities and the authority registry.

A capability is a call-scoped proof: ``AuthorityCapability`` says the
caller is the admin of a namespace, ``PlayerCapability`` binds an
operation to one player. Neither is stored. The only persisted state is
the per-namespace ``Game`` marker written by ``initialize``.

The registry only accepts the namespaces declared to it at construction
(``RANKED_GAMES``); a witness naming an undeclared game, or a declared
game with a different owner, is rejected.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from shared.events import game_initialized_event
from shared.pubsub import PubSubClient

from .addressing import normalize_address
from .errors import AlreadyExists, InvalidInput, NotFound, Unauthorized
from .models import atomic, Game

logger = logging.getLogger(__name__)

_ISSUER_SEAL = object()


def _seal_for(namespace, account) -> tuple:
    # Tied to the fields it was issued for.
    return (_ISSUER_SEAL, namespace, account)


@dataclass(frozen=True)
class GameNamespace:
    """Partition key for one game, bound to the address allowed to administer it."""
    name: str
    owner: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidInput("Namespace name is required")
        object.__setattr__(self, 'owner', normalize_address(self.owner))


@dataclass(frozen=True)
class AuthorityCapability:
    namespace: GameNamespace
    account: str
    _seal: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._seal != _seal_for(self.namespace, self.account):
            raise Unauthorized("Authority capabilities are issued by AuthorityRegistry only")


@dataclass(frozen=True)
class PlayerCapability:
    namespace: GameNamespace
    account: str
    _seal: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._seal != _seal_for(self.namespace, self.account):
            raise Unauthorized("Player capabilities are issued by AuthorityRegistry only")


def load_namespaces(games: Dict[str, str]) -> Dict[str, GameNamespace]:
    """Build namespaces from a ``{name: owner address}`` mapping."""
    return {name: GameNamespace(name=name, owner=owner) for name, owner in games.items()}


class AuthorityRegistry:
    """
    Issues and re-validates capabilities from caller identity.
    """

    def __init__(self, namespaces: Dict[str, GameNamespace] = None, pubsub: PubSubClient = None):
        self.namespaces = dict(namespaces or {})
        self.pubsub = pubsub

    def get_marker(self, namespace: GameNamespace) -> Optional[Game]:
        return Game.query.filter_by(namespace=namespace.name).first()

    def is_initialized(self, namespace: GameNamespace) -> bool:
        return self.get_marker(namespace) is not None

    def initialize(self, caller: str, namespace: GameNamespace) -> AuthorityCapability:
        """Record the namespace marker and hand the owner its first capability."""
        namespace = self._require_declared(namespace)
        caller = normalize_address(caller)

        if self.is_initialized(namespace):
            raise AlreadyExists(f"Game '{namespace.name}' is already initialized")

        if caller != namespace.owner:
            logger.warning(f"Rejected initialize of {namespace.name} by {caller}")
            raise Unauthorized(f"{caller} is not the owner of game '{namespace.name}'")

        with atomic() as session:
            session.add(Game(namespace=namespace.name, owner=caller))

        logger.info(f"Initialized game {namespace.name} owned by {caller}")
        if self.pubsub:
            self.pubsub.publish_game_event(namespace.name, game_initialized_event(namespace.name, caller))

        return AuthorityCapability(namespace=namespace, account=caller, _seal=_seal_for(namespace, caller))

    def create_authority_capability(self, caller: str, namespace: GameNamespace) -> AuthorityCapability:
        namespace = self._require_declared(namespace)
        caller = normalize_address(caller)

        marker = self._require_marker(namespace)

        if caller != marker.owner:
            logger.warning(f"Rejected authority capability for {namespace.name} requested by {caller}")
            raise Unauthorized(f"{caller} is not the owner of game '{namespace.name}'")

        return AuthorityCapability(namespace=namespace, account=caller, _seal=_seal_for(namespace, caller))

    def create_player_capability(self, caller: str, namespace: GameNamespace) -> PlayerCapability:
        # Any caller may act as themselves; per-player uniqueness is
        # enforced by the operations that consume the capability.
        namespace = self._require_declared(namespace)
        caller = normalize_address(caller)

        self._require_marker(namespace)

        return PlayerCapability(namespace=namespace, account=caller, _seal=_seal_for(namespace, caller))

    def require_authority(self, capability: AuthorityCapability) -> Game:
        """Re-validate an authority capability against the stored marker."""
        if not isinstance(capability, AuthorityCapability):
            raise Unauthorized("An authority capability is required")

        marker = self._require_marker(self._require_declared(capability.namespace))

        if capability.account != marker.owner:
            raise Unauthorized(f"{capability.account} is not the owner of game '{marker.namespace}'")

        return marker

    def require_player(self, capability: PlayerCapability) -> str:
        if not isinstance(capability, PlayerCapability):
            raise Unauthorized("A player capability is required")

        self._require_marker(self._require_declared(capability.namespace))

        return capability.account

    def _require_marker(self, namespace: GameNamespace) -> Game:
        marker = self.get_marker(namespace)
        if not marker:
            raise NotFound(f"Game '{namespace.name}' is not initialized")

        if namespace.owner != marker.owner:
            logger.warning(f"Rejected witness for {namespace.name} naming owner {namespace.owner}")
            raise Unauthorized(f"{namespace.owner} is not the owner of game '{namespace.name}'")

        return marker

    def _require_declared(self, namespace: GameNamespace) -> GameNamespace:
        """Return the declared namespace a witness stands for."""
        if not isinstance(namespace, GameNamespace):
            raise InvalidInput("A GameNamespace is required")

        declared = self.namespaces.get(namespace.name)
        if declared is None:
            logger.warning(f"Rejected witness for undeclared game {namespace.name}")
            raise Unauthorized(f"Game '{namespace.name}' is not declared")

        if namespace.owner != declared.owner:
            logger.warning(f"Rejected witness for {namespace.name} naming owner {namespace.owner}")
            raise Unauthorized(f"{namespace.owner} is not the owner of game '{namespace.name}'")

        return declared
