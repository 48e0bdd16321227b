"""
Lobby phase handler: game start, role reveal and readiness.
"""

import random
from typing import Optional

from ..core import GameState, GamePhase, GameSettings, Judge, Player, assign_roles
from ..core.exceptions import NotEnoughPlayers, RoleNotViewed, WrongPhase
from ..web.event_emitter import EventEmitter


class LobbyPhaseHandler:
    """Handles the start of a game and the role reveal that follows."""

    def __init__(self, game_state: GameState, judge: Judge,
                 event_emitter: Optional[EventEmitter] = None,
                 rng: Optional[random.Random] = None):
        self.game_state = game_state
        self.judge = judge
        self.event_emitter = event_emitter or EventEmitter()
        self.rng = rng or random.Random()

    def start_game(self, player_id: str) -> None:
        """
        Assign roles and tell every player theirs.
        Host only; needs ``min_players`` people at the table, host included.
        """
        self.judge.require_host(player_id)
        if self.game_state.game_started:
            raise WrongPhase("Game already started")

        minimum = self.judge.config.min_players
        if len(self.game_state.roster) < minimum:
            raise NotEnoughPlayers(minimum)

        self.game_state.game_started = True
        self.game_state.phase = GamePhase.LOBBY
        self.game_state.settings = GameSettings(
            allow_spectator_view=self.judge.config.allow_spectator_view
        )
        assign_roles(self.game_state.roster.players, self.rng, self.judge.config.mafia_ratio)

        for player in self.game_state.roster:
            self.send_role(player)

        self.send_ready_status()
        self.judge.publish_roster()

        mafia = len(self.game_state.roster.get_alive_mafia())
        self.judge.announce(
            f"Game started with {len(self.game_state.get_alive_players())} players ({mafia} Mafia)."
        )

    def send_role(self, player: Player, to: Optional[str] = None) -> None:
        """Privately tell a player its role; Mafia also learn their teammates."""
        payload = player.role_payload()
        self.event_emitter.emit_role_assigned(
            to or player.id,
            payload["role"],
            payload.get("mafiaTeam")
        )

    def viewed_role(self, player_id: str) -> None:
        player = self.judge.require_participant(player_id)
        self.judge.require_started()
        player.has_seen_role = True
        self.send_ready_status()

    def ready(self, player_id: str) -> None:
        player = self.judge.require_participant(player_id)
        self.judge.require_started()
        if not player.has_seen_role:
            raise RoleNotViewed()

        player.is_ready = True
        self.send_ready_status()
        self.event_emitter.emit_notification(f"{player.name} is ready", "info")

    def send_ready_status(self) -> None:
        """Tell the host who has looked at their role and who is ready."""
        host_id = self.game_state.roster.host_id
        if host_id is None:
            return

        playing = self.game_state.roster.get_playing_players()
        self.event_emitter.emit_player_ready_update(
            host_id,
            [
                {"id": p.id, "name": p.name, "hasSeenRole": p.has_seen_role, "isReady": p.is_ready}
                for p in playing
            ],
            viewed_count=sum(1 for p in playing if p.has_seen_role),
            ready_count=sum(1 for p in playing if p.is_ready),
            total_players=len(playing),
        )
