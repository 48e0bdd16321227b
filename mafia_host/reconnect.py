"""
Reconnection and host-failover handling.

Players drop off and come back all the time on phones. Before the game
starts a dropped player is simply gone. Once it has started the player keeps
its seat: a returning connection takes over the player's identity, and every
vote, target and save recorded under the old identity is moved across.
"""

from typing import Optional

from .core import GameState, GamePhase, Judge, JoinResult, DisconnectResult
from .core.exceptions import GameInProgress
from .phases import LobbyPhaseHandler, VotingHandler
from .web.event_emitter import EventEmitter


class ReconnectionManager:
    """Maps joins and disconnects onto the roster and keeps the table in sync."""

    def __init__(self, game_state: GameState, judge: Judge, lobby_handler: LobbyPhaseHandler,
                 voting_handler: VotingHandler, event_emitter: Optional[EventEmitter] = None):
        self.game_state = game_state
        self.judge = judge
        self.lobby_handler = lobby_handler
        self.voting_handler = voting_handler
        self.event_emitter = event_emitter or EventEmitter()

    def join(self, connection_id: str, name: str, token: Optional[str] = None) -> JoinResult:
        """
        Seat a new player or take back an existing seat.

        Raises:
            NameTaken: name in use before the game started
            GameInProgress: unknown player after the game started
            AlreadyJoined: this connection already owns a different player
        """
        try:
            result = self.game_state.roster.join(
                connection_id, name, in_progress=self.game_state.game_started, token=token
            )
        except GameInProgress:
            self.event_emitter.emit_game_already_started(connection_id)
            raise

        if result.rejoined:
            self._restore(result)
        elif result.repeated:
            self._send_state(result.player.id, reconnected=self.game_state.game_started)
        else:
            self.judge.publish_roster()
            self._send_joined(result.player.id, reconnected=False)
            self.judge.announce(f"{result.player.name} joined. Total players: {len(self.game_state.roster)}")
        return result

    def _restore(self, result: JoinResult) -> None:
        player = result.player
        self.game_state.remap_identity(result.previous_id, player.id)

        if player.is_host:
            self.event_emitter.emit_game_resumed()
            self.event_emitter.emit_notification(
                f"{player.name} (HOST) has reconnected! Game resumed.", "success"
            )
            self.judge.announce(f"Host {player.name} reconnected. Game resumed.")
        else:
            self.event_emitter.emit_notification(f"{player.name} has reconnected!", "info")
            self.judge.announce(f"{player.name} reconnected")

        self.judge.publish_roster()
        self._send_state(player.id, reconnected=True)

        # Everyone gets the tally again so all screens agree
        if self.game_state.is_voting:
            self.voting_handler.broadcast_tally()

    def _send_joined(self, connection_id: str, reconnected: bool) -> None:
        player = self.game_state.get_player(connection_id)
        self.event_emitter.emit_joined_game(
            connection_id,
            is_host=player.is_host,
            reconnected=reconnected,
            token=player.token,
            player_name=player.name,
            is_alive=player.is_alive,
        )

    def _send_state(self, connection_id: str, reconnected: bool) -> None:
        """Re-deliver everything a returning connection needs to rebuild its screen."""
        state = self.game_state
        player = state.get_player(connection_id)
        self._send_joined(connection_id, reconnected)
        if not state.game_started:
            return

        self.event_emitter.emit_history_update(state.history.to_list(), to=connection_id)
        if state.last_elimination_info:
            self.event_emitter.emit_vote_result(state.last_elimination_info, to=connection_id)

        extra = {}
        if state.phase == GamePhase.DAY and state.last_death_info:
            extra["death_info"] = state.last_death_info
        if state.phase == GamePhase.TIE_REVOTE:
            extra["tied_candidates"] = list(state.tied_candidates)
        self.judge.publish_phase(to=connection_id, **extra)

        if player.role is not None:
            self.lobby_handler.send_role(player, to=connection_id)

    def disconnect(self, connection_id: str) -> Optional[DisconnectResult]:
        """
        Handle a dropped connection. A connection that no longer owns a
        player (it was taken over by a rejoin) is ignored.
        """
        state = self.game_state
        result = state.roster.mark_disconnected(connection_id, in_progress=state.game_started)
        if result is None:
            return None

        player = result.player
        if result.removed:
            self.judge.announce(f"{player.name} left the lobby")
            if result.new_host:
                self.event_emitter.emit_host_transferred(
                    connection_id, result.new_host.id, result.new_host.name
                )
                self.judge.announce(f"Host left the lobby. Control transferred to {result.new_host.name}")
        elif result.was_host and state.is_paused:
            self.event_emitter.emit_notification(
                f"{player.name} (HOST) disconnected. Game paused. Waiting for host to reconnect...",
                "warning"
            )
            self.event_emitter.emit_game_paused(
                player.name, "Host disconnected. Game is paused until host reconnects."
            )
            self.judge.announce(f"Host {player.name} disconnected. Game paused, waiting for reconnection.")
        else:
            self.event_emitter.emit_notification(
                f"{player.name} disconnected. They can reconnect anytime.", "info"
            )
            self.judge.announce(f"{player.name} marked as disconnected but kept in game")

        if not result.emptied:
            self.judge.publish_roster()
        return result
