"""
Judge/Moderator system for rule enforcement and game management.

Every command passes through the judge before it touches state: it answers
"who is asking" and "is this allowed right now", and raises a ``GameError``
otherwise.
"""

from typing import List, Optional, Iterable, Dict, Any, TYPE_CHECKING

from .game_engine import GameState, GamePhase
from .player import Player
from .roles import RoleType
from .exceptions import (
    NotHost, HostOnlyForbidden, UnknownPlayer, WrongPhase, GamePaused,
)
from ..config.game_config import GameConfig, default_config

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


class Judge:
    """Judge/Moderator that enforces rules and narrates game flow."""

    def __init__(self, game_state: GameState, config: GameConfig = default_config,
                 event_emitter: Optional['EventEmitter'] = None):
        self.game_state = game_state
        self.config = config
        self.event_emitter = event_emitter
        self.announcements: List[str] = []

    def announce(self, message: str, tag: str = "HOST") -> None:
        """Make a console announcement."""
        if self.config.use_announcements:
            self.announcements.append(message)
            print(f"[{tag}] {message}")

    def require_player(self, player_id: str) -> Player:
        player = self.game_state.get_player(player_id)
        if player is None:
            raise UnknownPlayer()
        return player

    def require_host(self, player_id: str) -> Player:
        player = self.game_state.get_player(player_id)
        if player is None or not player.is_host:
            raise NotHost()
        return player

    def require_participant(self, player_id: str) -> Player:
        """A seated player who is not the narrator."""
        player = self.require_player(player_id)
        if player.is_host:
            raise HostOnlyForbidden()
        return player

    def require_phase(self, *phases: GamePhase, message: str = "") -> None:
        if self.game_state.phase not in phases:
            raise WrongPhase(message)

    def require_started(self) -> None:
        if not self.game_state.game_started:
            raise WrongPhase("Game has not started")

    def require_not_paused(self) -> None:
        if self.game_state.is_paused:
            raise GamePaused()

    def require_no_pending_outcome(self) -> None:
        if self.game_state.pending_outcome is not None:
            raise WrongPhase("The game is over")

    def require_host_action(self, player_id: str, *phases: GamePhase) -> Player:
        """
        Admission for phase-advancing and night/voting-resolving commands:
        issued by the host, game not paused, no outcome pending and, when
        ``phases`` is given, one of those phases current.
        """
        host = self.require_host(player_id)
        self.require_started()
        self.require_not_paused()
        self.require_no_pending_outcome()
        if phases:
            self.require_phase(*phases)
        return host

    def living_targets(self, exclude: Iterable[str] = ()) -> List[Player]:
        """Living non-host players, disconnected ones included."""
        excluded = set(exclude)
        return [p for p in self.game_state.get_alive_players() if p.id not in excluded]

    def publish_roster(self) -> None:
        """Broadcast the public roster, and the roster with roles to the host."""
        if not self.event_emitter:
            return
        roster = self.game_state.roster
        self.event_emitter.emit_update_players(roster.snapshot())
        if roster.host_id:
            self.event_emitter.emit_host_roster(roster.host_id, roster.snapshot(include_roles=True))

    def publish_phase(self, to: Optional[str] = None, **extra: Any) -> None:
        """Broadcast the current phase with its phase-specific payload."""
        if not self.event_emitter:
            return
        state = self.game_state
        self.event_emitter.emit_phase_update(
            state.phase.value,
            state.round,
            state.roster.snapshot(),
            state.settings.to_dict(),
            to=to,
            **extra
        )

    def role_status(self) -> Dict[str, Any]:
        """Which night roles can still act."""
        roster = self.game_state.roster
        doctor = roster.find_role(RoleType.DOCTOR)
        detective = roster.find_role(RoleType.DETECTIVE)
        return {
            "doctorAlive": bool(doctor and doctor.is_alive),
            "detectiveAlive": bool(detective and detective.is_alive),
            "mafiaCount": len(roster.get_alive_mafia()),
        }
