import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from shared.events import registry_created_event, rating_minted_event
from shared.pubsub import PubSubClient

from .addressing import (
    collection_address,
    entity_address,
    normalize_address,
    rating_collection_name,
)
from .authority import AuthorityCapability, AuthorityRegistry, GameNamespace, PlayerCapability
from .entity_factory import EntityFactory
from .errors import AlreadyExists, NotFound
from .models import atomic, db, Collection, RatingHistory, RatingRecord
from .rating_calculator import Rating, RatingCalculator

logger = logging.getLogger(__name__)

RATINGS_KIND = 'ratings'
RATINGS_DESCRIPTION = 'Player skill ratings'
RATINGS_URI = ''


@dataclass
class StagedRating:
    """Scratch copy of one record while a batch of results is applied."""
    record: RatingRecord
    rating: Rating
    changes: List[Tuple[str, int, int, int]] = field(default_factory=list)  # (result, old, new, change)


class RatingRegistry:
    """
    Per-namespace registry of player rating records.

    Each player holds at most one record, addressed by
    ``(rating collection address, player address)``.
    """

    def __init__(
        self,
        authority: AuthorityRegistry,
        factory: EntityFactory = None,
        calculator: RatingCalculator = None,
        pubsub: PubSubClient = None
    ):
        self.authority = authority
        self.factory = factory or EntityFactory()
        self.calculator = calculator or RatingCalculator()
        self.pubsub = pubsub

    # ==================== Registry ====================

    def get_registry_address(self, namespace: GameNamespace) -> str:
        return collection_address(namespace.owner, rating_collection_name(namespace.name))

    def get_registry(self, namespace: GameNamespace) -> Optional[Collection]:
        return self.factory.get_collection_at(self.get_registry_address(namespace))

    def registry_exists(self, namespace: GameNamespace) -> bool:
        return self.get_registry(namespace) is not None

    def initialize_rating_registry(self, capability: AuthorityCapability) -> Collection:
        self.authority.require_authority(capability)
        namespace = capability.namespace

        if self.registry_exists(namespace):
            raise AlreadyExists(f"Rating registry for '{namespace.name}' already exists")

        with atomic():
            registry = self.factory.create_collection(
                capability,
                description=RATINGS_DESCRIPTION,
                name=rating_collection_name(namespace.name),
                royalty_bps=None,
                uri=RATINGS_URI,
                kind=RATINGS_KIND
            )

        logger.info(f"Created rating registry for {namespace.name} at {registry.address}")
        self._publish(namespace, registry_created_event(namespace.name, RATINGS_KIND, registry.address))
        return registry

    # ==================== Records ====================

    def mint_rating_record(self, capability: PlayerCapability) -> RatingRecord:
        """Create the caller's record with the initial rating."""
        player = self.authority.require_player(capability)
        namespace = capability.namespace

        if not self.registry_exists(namespace):
            raise NotFound(f"Rating registry for '{namespace.name}' not found")

        if self.has_record(namespace, player):
            raise AlreadyExists(f"Player {player} already has a rating in '{namespace.name}'")

        score, wins, losses = self.calculator.initial_rating()
        with atomic():
            record = self.factory.mint_entity(
                capability,
                collection_name=rating_collection_name(namespace.name),
                name=player,
                entity_cls=RatingRecord,
                transferable=False,
                player=player,
                score=score,
                wins=wins,
                losses=losses
            )

        logger.info(f"Minted rating for {player} in {namespace.name}")
        self._publish(namespace, rating_minted_event(namespace.name, player, record.address, score))
        return record

    def get_record_address(self, namespace: GameNamespace, player: str) -> str:
        return entity_address(self.get_registry_address(namespace), normalize_address(player))

    def get_record(self, namespace: GameNamespace, player: str) -> Optional[RatingRecord]:
        return RatingRecord.query.filter_by(address=self.get_record_address(namespace, player)).first()

    def has_record(self, namespace: GameNamespace, player: str) -> bool:
        return self.get_record(namespace, player) is not None

    def get_rating(self, namespace: GameNamespace, player: str) -> Rating:
        """Return ``(score, wins, losses)`` for a player."""
        record = self.get_record(namespace, player)
        if not record:
            raise NotFound(f"No rating for {player} in '{namespace.name}'")
        return record.to_tuple()

    def get_rating_history(self, namespace: GameNamespace, player: str, limit: int = 50) -> List[RatingHistory]:
        player = normalize_address(player)
        return (
            RatingHistory.query
            .filter_by(namespace=namespace.name, player=player)
            .order_by(RatingHistory.id.desc())
            .limit(limit)
            .all()
        )

    # ==================== Updates ====================
    #
    # These run inside the caller's unit of work and never commit. Every
    # player is checked before any record changes.

    def update_player_rating(
        self,
        namespace: GameNamespace,
        player: str,
        did_win: bool,
        match_address: str = None
    ) -> List[RatingHistory]:
        return self._apply_results(namespace, [(player, did_win)], match_address)

    def update_team_ratings(
        self,
        namespace: GameNamespace,
        team: Sequence[str],
        did_win: bool,
        match_address: str = None
    ) -> List[RatingHistory]:
        return self._apply_results(namespace, [(player, did_win) for player in team], match_address)

    def update_match_ratings(
        self,
        namespace: GameNamespace,
        teams: Sequence[Sequence[str]],
        winner_index: int,
        match_address: str = None
    ) -> List[RatingHistory]:
        if not self.registry_exists(namespace):
            raise NotFound(f"Rating registry for '{namespace.name}' not found")

        results = [
            (player, index == winner_index)
            for index, team in enumerate(teams)
            for player in team
        ]
        return self._apply_results(namespace, results, match_address)

    def stage_results(
        self,
        namespace: GameNamespace,
        results: Sequence[Tuple[str, bool]]
    ) -> Dict[str, StagedRating]:
        """
        Compute every result on scratch copies, in order.

        Raises NotFound naming every player without a record before
        anything is computed. Records are not modified.
        """
        players = []
        for player, _ in results:
            player = normalize_address(player)
            if player not in players:
                players.append(player)

        records = {player: self.get_record(namespace, player) for player in players}
        missing = [player for player, record in records.items() if record is None]
        if missing:
            raise NotFound(f"No rating in '{namespace.name}' for: {', '.join(missing)}")

        staged = {player: StagedRating(record=record, rating=record.to_tuple()) for player, record in records.items()}

        for player, did_win in results:
            entry = staged[normalize_address(player)]
            old_score = entry.rating[0]
            change = self.calculator.get_rating_change_amount(old_score, did_win)
            entry.rating = self.calculator.apply_result(entry.rating, did_win)
            entry.changes.append(('win' if did_win else 'loss', old_score, entry.rating[0], change))

        return staged

    def commit_staged(
        self,
        namespace: GameNamespace,
        staged: Dict[str, StagedRating],
        match_address: str = None
    ) -> List[RatingHistory]:
        history = []
        for player, entry in staged.items():
            entry.record.score, entry.record.wins, entry.record.losses = entry.rating
            for result, old_score, new_score, change in entry.changes:
                row = RatingHistory(
                    namespace=namespace.name,
                    player=player,
                    match_address=match_address,
                    old_score=old_score,
                    new_score=new_score,
                    rating_change=change,
                    result=result
                )
                db.session.add(row)
                history.append(row)

        db.session.flush()
        return history

    def _apply_results(
        self,
        namespace: GameNamespace,
        results: Sequence[Tuple[str, bool]],
        match_address: str = None
    ) -> List[RatingHistory]:
        staged = self.stage_results(namespace, results)
        return self.commit_staged(namespace, staged, match_address)

    def _publish(self, namespace: GameNamespace, event):
        if self.pubsub:
            self.pubsub.publish_game_event(namespace.name, event)
