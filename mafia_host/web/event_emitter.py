"""
Event emitter for outbound broadcasts.

Each ``emit_*`` method is one outbound event with a fixed field set. Events
go to every registered listener (the socket transport, tests) and are
recorded to the current run.
"""

import copy
from typing import Dict, Any, Optional, List, Callable

from .run_recorder import RunRecorder

# (event_type, payload, audience); audience None means the whole table
Listener = Callable[[str, Dict[str, Any], Optional[str]], None]


class EventEmitter:
    """Event emitter that delivers game events and records them to files."""

    def __init__(self, run_recorder: Optional[RunRecorder] = None):
        self.run_recorder = run_recorder
        self.listeners: List[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def _emit(self, event_type: str, data: Dict[str, Any], to: Optional[str] = None) -> None:
        """Deliver an event, then record it to file."""
        for listener in list(self.listeners):
            listener(event_type, data, to)

        if self.run_recorder:
            try:
                self.run_recorder.record_event(event_type, data, audience=to)
            except Exception as e:
                # Don't let recording errors break the game
                print(f"Error recording event: {e}")

    # Roster and identity

    def emit_update_players(self, players: List[Dict[str, Any]]) -> None:
        """Public roster snapshot (no roles)."""
        self._emit("updatePlayers", {"players": players})

    def emit_host_roster(self, host_id: str, players: List[Dict[str, Any]]) -> None:
        """Roster with roles, for the narrator only."""
        self._emit("hostRoster", {"players": players}, to=host_id)

    def emit_joined_game(self, to: str, is_host: bool, reconnected: bool, token: str,
                         player_name: str, is_alive: bool) -> None:
        self._emit("joinedGame", {
            "isHost": is_host,
            "reconnected": reconnected,
            "token": token,
            "playerName": player_name,
            "isAlive": is_alive
        }, to=to)

    def emit_game_already_started(self, to: str) -> None:
        self._emit("gameAlreadyStarted", {}, to=to)

    def emit_role_assigned(self, to: str, role: Optional[str],
                           mafia_team: Optional[List[str]] = None) -> None:
        data: Dict[str, Any] = {"role": role}
        if mafia_team is not None:
            data["mafiaTeam"] = mafia_team
        self._emit("roleAssigned", data, to=to)

    def emit_player_ready_update(self, host_id: str, players: List[Dict[str, Any]],
                                 viewed_count: int, ready_count: int, total_players: int) -> None:
        self._emit("playerReadyUpdate", {
            "players": players,
            "viewedCount": viewed_count,
            "readyCount": ready_count,
            "totalPlayers": total_players,
            "allReady": ready_count == total_players
        }, to=host_id)

    def emit_host_transferred(self, old_host_id: Optional[str], new_host_id: str,
                              new_host_name: str) -> None:
        self._emit("hostTransferred", {
            "oldHostId": old_host_id,
            "newHostId": new_host_id,
            "newHostName": new_host_name
        })

    # Phases

    def emit_phase_update(self, phase: str, round_number: int, players: List[Dict[str, Any]],
                          game_settings: Dict[str, Any], to: Optional[str] = None,
                          death_info: Optional[Dict[str, Any]] = None,
                          role_status: Optional[Dict[str, Any]] = None,
                          tied_candidates: Optional[List[str]] = None,
                          voting_completed: bool = False) -> None:
        """Phase transition with its phase-specific payload."""
        data: Dict[str, Any] = {
            "phase": phase,
            "round": round_number,
            "players": players,
            "gameSettings": game_settings
        }
        if death_info is not None:
            data["deathInfo"] = dict(death_info)
        if role_status is not None:
            data["roleStatus"] = role_status
        if tied_candidates is not None:
            data["tiedCandidates"] = tied_candidates
        if voting_completed:
            data["votingCompleted"] = True
        self._emit("phaseUpdate", data, to=to)

    def emit_game_settings_update(self, settings: Dict[str, Any]) -> None:
        self._emit("gameSettingsUpdate", settings)

    # Night (narrator only)

    def emit_night_action_update(self, host_id: str, action: str, players: List[Dict[str, Any]],
                                 saved_history: Optional[List[str]] = None) -> None:
        data: Dict[str, Any] = {"action": action, "players": players}
        if saved_history is not None:
            data["savedHistory"] = saved_history
        self._emit("nightActionUpdate", data, to=host_id)

    def emit_kill_marked(self, host_id: str, player_id: str, player_name: str) -> None:
        self._emit("killMarked", {"playerId": player_id, "playerName": player_name}, to=host_id)

    def emit_save_marked(self, host_id: str, player_id: str, player_name: str) -> None:
        self._emit("saveMarked", {"playerId": player_id, "playerName": player_name}, to=host_id)

    def emit_investigation_result(self, host_id: str, player_id: str, player_name: str,
                                  is_mafia: bool) -> None:
        self._emit("investigationResult", {
            "playerId": player_id,
            "playerName": player_name,
            "isMafia": is_mafia
        }, to=host_id)

    # Voting

    def emit_vote_update(self, voter_id: Optional[str], voter_name: Optional[str],
                         target_id: Optional[str], target_name: Optional[str],
                         vote_counts: List[Dict[str, Any]],
                         vote_details: Dict[str, List[Dict[str, Any]]]) -> None:
        """Tally after a vote; voter/target are None for a resync broadcast."""
        self._emit("voteUpdate", {
            "voterId": voter_id,
            "voterName": voter_name,
            "targetId": target_id,
            "targetName": target_name,
            "voteCounts": vote_counts,
            "voteDetails": vote_details
        })

    def emit_all_players_voted(self, host_id: str, phase: str, message: str,
                               vote_counts: List[Dict[str, Any]]) -> None:
        self._emit("allPlayersVoted", {
            "phase": phase,
            "message": message,
            "voteCounts": vote_counts
        }, to=host_id)

    def emit_tie_revote(self, tied_candidates: List[Dict[str, Any]], revote_count: int,
                        vote_counts: List[Dict[str, Any]]) -> None:
        self._emit("tieRevote", {
            "tiedCandidates": tied_candidates,
            "revoteCount": revote_count,
            "voteCounts": vote_counts
        })

    def emit_vote_result(self, result: Dict[str, Any], to: Optional[str] = None) -> None:
        """Elimination summary: ``eliminated``, ``reason`` and, when votes were cast, ``voteCounts``."""
        self._emit("voteResult", copy.deepcopy(result), to=to)

    # Timer

    def emit_timer_update(self, remaining: int) -> None:
        self._emit("timerUpdate", {"remaining": remaining})

    def emit_timer_extended(self, seconds: int) -> None:
        self._emit("timerExtended", {"seconds": seconds})

    def emit_timer_expired_not_all_voted(self, host_id: str, voted_count: int,
                                         total_players: int) -> None:
        self._emit("timerExpiredNotAllVoted", {
            "votedCount": voted_count,
            "totalPlayers": total_players
        }, to=host_id)

    # Session

    def emit_history_update(self, history: List[Dict[str, Any]], to: Optional[str] = None) -> None:
        self._emit("historyUpdate", {"history": history}, to=to)

    def emit_game_paused(self, host_name: str, message: str) -> None:
        self._emit("gamePaused", {"hostName": host_name, "message": message})

    def emit_game_resumed(self) -> None:
        self._emit("gameResumed", {})

    def emit_notification(self, message: str, severity: str = "info") -> None:
        self._emit("notification", {"message": message, "type": severity})

    def emit_error(self, to: str, message: str, kind: str) -> None:
        """Rejection notice for the issuing connection only."""
        self._emit("error", {"message": message, "kind": kind}, to=to)

    def emit_game_over(self, winner: str, reason: Optional[str], players: List[Dict[str, Any]],
                       history: List[Dict[str, Any]]) -> None:
        self._emit("gameOver", {
            "winner": winner,
            "reason": reason,
            "players": players,
            "history": history
        })

    def emit_game_reset(self) -> None:
        self._emit("gameReset", {})
