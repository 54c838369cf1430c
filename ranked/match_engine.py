import logging
from typing import List

from shared.events import match_resolved_event, rating_updated_event
from shared.pubsub import PubSubClient
from shared.state_machine import MatchStateMachine, TransitionError

from .authority import AuthorityCapability, AuthorityRegistry
from .errors import AlreadyResolved, InvalidInput, NotFound
from .match_registry import MatchRegistry
from .models import atomic, utcnow, Match, RatingHistory
from .rating_registry import RatingRegistry

logger = logging.getLogger(__name__)


class MatchResolutionEngine:
    """
    Resolves open matches and fans the outcome out to player ratings.

    A resolution is all-or-nothing: the match outcome and every rating
    change are written in one unit of work. Any failure rolls all of it
    back and leaves the match open.
    """

    def __init__(
        self,
        authority: AuthorityRegistry,
        matches: MatchRegistry,
        ratings: RatingRegistry,
        pubsub: PubSubClient = None
    ):
        self.authority = authority
        self.matches = matches
        self.ratings = ratings
        self.pubsub = pubsub

    def resolve_match(self, capability: AuthorityCapability, match_address: str, winner_index: int) -> Match:
        """
        Record ``winner_index`` as the winning team and update every rating.

        Raises:
            NotFound: the match, the rating registry or any player's record is missing
            AlreadyResolved: the match already has an outcome
            InvalidInput: ``winner_index`` is not a team index
        """
        self.authority.require_authority(capability)
        namespace = capability.namespace

        match = self.matches.get_match_record(namespace, match_address)
        if not match:
            raise NotFound(f"Match {match_address} not found in '{namespace.name}'")

        sm = MatchStateMachine.from_state_string(match.status)
        if match.outcome is not None or not sm.can_transition('resolve'):
            logger.warning(f"Rejected second resolution of {match.address}")
            raise AlreadyResolved(match.address)

        teams = [list(team) for team in match.teams]
        if not self._is_team_index(winner_index, teams):
            raise InvalidInput(f"Winner index {winner_index!r} is out of range for {len(teams)} teams")

        try:
            with atomic():
                history = self.ratings.update_match_ratings(
                    namespace, teams, winner_index, match_address=match.address
                )
                sm.transition('resolve', guard_context={'teams': teams, 'winner_index': winner_index})
                match.outcome = winner_index
                match.status = sm.state.value
                match.resolved_at = utcnow()
        except TransitionError as e:
            raise AlreadyResolved(match_address) from e

        logger.info(f"Resolved {match.address} in {namespace.name}: team {winner_index} won")
        self._publish_resolution(namespace.name, match, history)
        return match

    @staticmethod
    def _is_team_index(winner_index, teams: List[List[str]]) -> bool:
        if isinstance(winner_index, bool) or not isinstance(winner_index, int):
            return False
        return 0 <= winner_index < len(teams)

    def _publish_resolution(self, namespace: str, match: Match, history: List[RatingHistory]):
        if not self.pubsub:
            return

        self.pubsub.publish_game_event(namespace, match_resolved_event(namespace, match.address, match.outcome))
        for row in history:
            self.pubsub.publish_game_event(
                namespace,
                rating_updated_event(namespace, row.player, row.old_score, row.new_score, row.result)
            )
