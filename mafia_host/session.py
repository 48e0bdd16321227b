"""
Game session: the phase state machine behind the socket server.

``GameSession`` owns the state aggregate, the countdown timer and the phase
handlers. Every inbound command and every timer callback goes through it,
one at a time; the server wraps each call in its lock.
"""

import random
from typing import Any, Callable, Dict, Optional

from .config.game_config import GameConfig, default_config
from .core import (
    GameState, GameSettings, Judge, WinResult, Winner, CountdownTimer, Scheduler, ScheduledCall,
    ThreadScheduler, VOTING_PHASES,
)
from .core.exceptions import GameError, InvalidTarget, NoActiveTimer
from .phases import LobbyPhaseHandler, NightPhaseHandler, VotingHandler
from .reconnect import ReconnectionManager
from .web.commands import Command, parse_command
from .web import commands as cmd
from .web.event_emitter import EventEmitter


class GameSession:
    """Single game session for the process."""

    def __init__(self, config: GameConfig = default_config,
                 event_emitter: Optional[EventEmitter] = None,
                 scheduler: Optional[Scheduler] = None,
                 rng: Optional[random.Random] = None):
        self.config = config
        self.event_emitter = event_emitter or EventEmitter()
        self.scheduler = scheduler or ThreadScheduler()
        self.rng = rng or random.Random(config.random_seed)

        self.game_state = GameState(
            settings=GameSettings(allow_spectator_view=config.allow_spectator_view),
            event_emitter=self.event_emitter,
        )
        self.judge = Judge(self.game_state, config, event_emitter=self.event_emitter)
        self.timer = CountdownTimer(self.scheduler, self._on_timer_tick, config.timer_tick_interval)

        self.lobby_handler = LobbyPhaseHandler(self.game_state, self.judge, self.event_emitter, self.rng)
        self.night_handler = NightPhaseHandler(self.game_state, self.judge, self.event_emitter)
        self.voting_handler = VotingHandler(self.game_state, self.judge, self.event_emitter)
        self.reconnection = ReconnectionManager(
            self.game_state, self.judge, self.lobby_handler, self.voting_handler, self.event_emitter
        )

        # Bumped on every reset so a Game Over scheduled before it never fires after it
        self._generation = 0
        self._game_over_call: Optional[ScheduledCall] = None

        self._handlers: Dict[type, Callable[[str, Any], None]] = {
            cmd.JoinGame: lambda sid, c: self.join(sid, c.name, c.token),
            cmd.StartGame: lambda sid, c: self.start_game(sid),
            cmd.PlayerViewedRole: lambda sid, c: self.player_viewed_role(sid),
            cmd.PlayerReady: lambda sid, c: self.player_ready(sid),
            cmd.StartNight: lambda sid, c: self.start_night(sid),
            cmd.WakeMafia: lambda sid, c: self.wake_mafia(sid),
            cmd.MarkKill: lambda sid, c: self.mark_kill(sid, c.player_id),
            cmd.WakeDoctor: lambda sid, c: self.wake_doctor(sid),
            cmd.MarkSave: lambda sid, c: self.mark_save(sid, c.player_id),
            cmd.WakeDetective: lambda sid, c: self.wake_detective(sid),
            cmd.Investigate: lambda sid, c: self.investigate(sid, c.player_id),
            cmd.StartDay: lambda sid, c: self.start_day(sid),
            cmd.StartTentativeVoting: lambda sid, c: self.start_tentative_voting(sid),
            cmd.StartFinalVoting: lambda sid, c: self.start_final_voting(sid, c.duration),
            cmd.StartVotingTimer: lambda sid, c: self.start_voting_timer(sid, c.duration),
            cmd.ExtendTimer: lambda sid, c: self.extend_timer(sid, c.seconds),
            cmd.EndVoting: lambda sid, c: self.end_voting(sid),
            cmd.PlayerVote: lambda sid, c: self.player_vote(sid, c.target_id),
            cmd.TransferHost: lambda sid, c: self.transfer_host(sid, c.player_id),
            cmd.ResetGame: lambda sid, c: self.reset_game(sid),
            cmd.UpdateGameSettings: lambda sid, c: self.update_game_settings(sid, c.allow_spectator_view),
        }

    # Boundary

    def handle(self, connection_id: str, event: str, payload: Any = None) -> bool:
        """Parse and apply a raw socket event. Returns False if it was rejected."""
        try:
            command = parse_command(event, payload, max_name_length=self.config.max_name_length)
        except GameError as e:
            self._reject(connection_id, event, e)
            return False
        return self.dispatch(connection_id, command)

    def dispatch(self, connection_id: str, command: Command) -> bool:
        """
        Apply a parsed command. A rejected command leaves the session as it
        was and only the issuing connection hears about it.
        """
        handler = self._handlers[type(command)]
        try:
            handler(connection_id, command)
        except GameError as e:
            self._reject(connection_id, command.type, e)
            return False
        return True

    def _reject(self, connection_id: str, event: str, error: GameError) -> None:
        self.event_emitter.emit_error(connection_id, error.message, error.kind)
        self.judge.announce(f"Rejected {event} from {connection_id}: {error.message}", tag="SERVER")

    # Connections

    def join(self, connection_id: str, name: str, token: Optional[str] = None) -> None:
        self.reconnection.join(connection_id, name, token)

    def disconnect(self, connection_id: str) -> None:
        result = self.reconnection.disconnect(connection_id)
        if result is not None and result.emptied:
            self._reset_session()
            self.judge.announce("All players disconnected. Game reset.", tag="SERVER")

    # Lobby

    def start_game(self, connection_id: str) -> None:
        self.lobby_handler.start_game(connection_id)

    def player_viewed_role(self, connection_id: str) -> None:
        self.lobby_handler.viewed_role(connection_id)

    def player_ready(self, connection_id: str) -> None:
        self.lobby_handler.ready(connection_id)

    # Night

    def start_night(self, connection_id: str) -> None:
        self.night_handler.start_night(connection_id)

    def wake_mafia(self, connection_id: str) -> None:
        self.night_handler.wake_mafia(connection_id)

    def mark_kill(self, connection_id: str, target_id: str) -> None:
        self.night_handler.mark_kill(connection_id, target_id)

    def wake_doctor(self, connection_id: str) -> None:
        self.night_handler.wake_doctor(connection_id)

    def mark_save(self, connection_id: str, target_id: str) -> None:
        self.night_handler.mark_save(connection_id, target_id)

    def wake_detective(self, connection_id: str) -> None:
        self.night_handler.wake_detective(connection_id)

    def investigate(self, connection_id: str, target_id: str) -> None:
        self.night_handler.investigate(connection_id, target_id)

    def start_day(self, connection_id: str) -> None:
        result = self.night_handler.start_day(connection_id)
        if result is not None:
            self._schedule_game_over(result)

    # Voting

    def start_tentative_voting(self, connection_id: str) -> None:
        self.voting_handler.start_tentative_voting(connection_id)
        self.timer.cancel()

    def start_final_voting(self, connection_id: str, duration: Optional[int] = None) -> None:
        self.voting_handler.start_final_voting(connection_id)
        self.timer.cancel()
        if duration:
            self._start_voting_timer(duration)

    def start_voting_timer(self, connection_id: str, duration: Optional[int] = None) -> None:
        self.judge.require_host_action(connection_id, *VOTING_PHASES)
        self._start_voting_timer(duration or self.config.default_voting_duration)

    def _start_voting_timer(self, duration: int) -> None:
        self.timer.start(duration, self._on_voting_timer_expired)
        self.event_emitter.emit_timer_update(duration)
        self.judge.announce(f"Voting timer started with {duration} seconds", tag="TIMER")

    def extend_timer(self, connection_id: str, seconds: Optional[int] = None) -> None:
        self.judge.require_host_action(connection_id, *VOTING_PHASES)
        if not self.timer.is_active:
            raise NoActiveTimer()

        seconds = seconds or self.config.default_extend_seconds
        self.timer.extend(seconds)
        self.event_emitter.emit_timer_extended(seconds)
        self.judge.announce(f"Timer extended by {seconds} seconds", tag="TIMER")

    def end_voting(self, connection_id: str) -> None:
        self.judge.require_host_action(connection_id, *VOTING_PHASES)
        self._finish_voting()

    def player_vote(self, connection_id: str, target_id: str) -> None:
        self.voting_handler.cast_vote(connection_id, target_id)

    def _finish_voting(self) -> None:
        self.timer.cancel()
        result = self.voting_handler.resolve()
        if result is not None:
            self._schedule_game_over(result)

    def _on_timer_tick(self, remaining: int) -> None:
        self.event_emitter.emit_timer_update(remaining)

    def _on_voting_timer_expired(self) -> None:
        """
        Resolve on expiry only if every eligible voter has voted (disconnected
        players included); otherwise tell the host how many are missing.
        Runs while the game is paused too: expiry is not a host command.
        """
        state = self.game_state
        if not state.is_voting or state.pending_outcome is not None:
            return

        if self.voting_handler.has_everyone_voted():
            self.judge.announce("Timer expired and all players voted, automatically ending voting", tag="TIMER")
            self._finish_voting()
            return

        voted = len(state.votes)
        eligible = len(self.voting_handler.eligible_voters())
        host_id = state.roster.host_id
        if host_id:
            self.event_emitter.emit_timer_expired_not_all_voted(host_id, voted, eligible)
        self.judge.announce(f"Timer expired but not all players voted ({voted}/{eligible})", tag="TIMER")

    # Game over

    def _schedule_game_over(self, result: WinResult) -> None:
        """Announce Game Over after a short delay so the last death is seen first."""
        self.game_state.pending_outcome = result
        self.timer.cancel()
        generation = self._generation
        self._game_over_call = self.scheduler.call_later(
            self.config.game_over_delay, lambda: self._end_game(generation)
        )

    def _end_game(self, generation: int) -> None:
        state = self.game_state
        if generation != self._generation or state.pending_outcome is None:
            return

        result = state.pending_outcome
        self._game_over_call = None
        self.timer.cancel()
        state.end_game(result)

        self.event_emitter.emit_game_over(
            result.winner.value,
            result.reason,
            [
                {"id": p.id, "name": p.name, "role": p.role.value if p.role else None, "isAlive": p.is_alive}
                for p in state.roster
            ],
            state.history.to_list()
        )
        if result.winner == Winner.DRAW:
            self.judge.announce(f"Game Over! Draw! Reason: {result.reason}")
        else:
            self.judge.announce(f"Game Over! {result.winner.value} wins! Reason: {result.reason}")

    # Host controls

    def transfer_host(self, connection_id: str, target_id: str) -> None:
        """
        Hand the narrator seat to another player. During a game only an
        eliminated, connected player can take over, so role and win counts
        never change.
        """
        state = self.game_state
        old_host = self.judge.require_host(connection_id)
        target = state.get_player(target_id)
        if target is None:
            raise InvalidTarget("Invalid player selected")

        in_game = state.game_started and state.pending_outcome is None and not state.winner
        if in_game and target.is_alive and target.is_playing:
            raise InvalidTarget("Only an eliminated player can take over as host during a game")
        if target.is_disconnected:
            raise InvalidTarget("That player is disconnected")

        new_host = state.roster.transfer_host(target.id)
        self.event_emitter.emit_host_transferred(old_host.id, new_host.id, new_host.name)
        self.judge.publish_roster()
        self.judge.announce(f"Host transferred from {old_host.name} to {new_host.name}")

    def reset_game(self, connection_id: str) -> None:
        self.judge.require_host(connection_id)

        dropped = self.game_state.roster.reset_for_new_game()
        self._reset_session()
        self.event_emitter.emit_game_reset()
        self.judge.publish_roster()
        self.judge.announce(
            f"Game reset by host ({len(dropped)} disconnected players removed)", tag="SERVER"
        )

    def _reset_session(self) -> None:
        self.timer.cancel()
        self._generation += 1
        if self._game_over_call is not None:
            self._game_over_call.cancel()
            self._game_over_call = None
        self.game_state.reset()
        self.game_state.settings = GameSettings(allow_spectator_view=self.config.allow_spectator_view)

    def update_game_settings(self, connection_id: str, allow_spectator_view: Optional[bool] = None) -> None:
        self.judge.require_host(connection_id)
        if allow_spectator_view is not None:
            self.game_state.settings.allow_spectator_view = allow_spectator_view
        self.event_emitter.emit_game_settings_update(self.game_state.settings.to_dict())
        self.judge.announce(f"Game settings updated: {self.game_state.settings.to_dict()}")
