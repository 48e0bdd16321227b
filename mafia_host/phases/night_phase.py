"""
Night phase handler for mafia kills, doctor saves and detective checks.
"""

from typing import Optional, Dict, Any

from ..core import (
    GameState, GamePhase, Judge, Player, RoleType, HistoryCategory, Investigation, WinResult,
)
from ..core.exceptions import (
    InvalidTarget, AlreadySaved, DoctorUnavailable, DetectiveUnavailable,
)
from ..web.event_emitter import EventEmitter


class NightPhaseHandler:
    """
    Handles night phase operations.

    The host wakes each role in any order and records its target as a draft.
    Nothing happens to anyone until ``start_day`` resolves the night.
    """

    def __init__(self, game_state: GameState, judge: Judge, event_emitter: Optional[EventEmitter] = None):
        self.game_state = game_state
        self.judge = judge
        self.event_emitter = event_emitter or EventEmitter()

    @property
    def host_id(self) -> Optional[str]:
        return self.game_state.roster.host_id

    def start_night(self, player_id: str) -> None:
        """Enter the next night. Allowed after the game starts and from day."""
        self.judge.require_host_action(player_id, GamePhase.LOBBY, GamePhase.DAY)

        self.game_state.start_night()
        self.game_state.add_history(HistoryCategory.NIGHT, f"Night {self.game_state.round} begins")
        self.judge.publish_phase(role_status=self.judge.role_status())
        self.judge.announce(f"Night {self.game_state.round} falls.", tag="NIGHT")

    # Mafia

    def wake_mafia(self, player_id: str) -> None:
        self.judge.require_host_action(player_id, GamePhase.NIGHT)
        self.game_state.current_night_action = "mafia"
        self.event_emitter.emit_night_action_update(
            self.host_id, "mafia", self._target_list()
        )
        self.judge.announce("The mafia wakes up.", tag="NIGHT")

    def mark_kill(self, player_id: str, target_id: str) -> None:
        self.judge.require_host_action(player_id, GamePhase.NIGHT)
        target = self._require_living_target(target_id)

        self.game_state.draft_kill = target.id
        self.event_emitter.emit_kill_marked(self.host_id, target.id, target.name)
        self.judge.announce(f"Mafia marked {target.name} for kill", tag="NIGHT")

    # Doctor

    def _require_doctor(self) -> Player:
        doctor = self.game_state.roster.find_role(RoleType.DOCTOR)
        if doctor is None or not doctor.is_alive:
            raise DoctorUnavailable()
        return doctor

    def wake_doctor(self, player_id: str) -> None:
        self.judge.require_host_action(player_id, GamePhase.NIGHT)
        self._require_doctor()

        self.game_state.current_night_action = "doctor"
        self.event_emitter.emit_night_action_update(
            self.host_id,
            "doctor",
            self._target_list(exclude=self.game_state.doctor_save_history),
            saved_history=list(self.game_state.doctor_save_history)
        )
        self.judge.announce("The doctor wakes up.", tag="NIGHT")

    def mark_save(self, player_id: str, target_id: str) -> None:
        """Record the doctor's save. Nobody can be saved twice in a game."""
        self.judge.require_host_action(player_id, GamePhase.NIGHT)
        self._require_doctor()
        if target_id in self.game_state.doctor_save_history:
            raise AlreadySaved()
        target = self._require_living_target(target_id)

        self.game_state.draft_save = target.id
        self.game_state.doctor_save_history.append(target.id)
        self.event_emitter.emit_save_marked(self.host_id, target.id, target.name)
        self.judge.announce(f"Doctor marked {target.name} for save", tag="NIGHT")

    # Detective

    def _require_detective(self) -> Player:
        detective = self.game_state.roster.find_role(RoleType.DETECTIVE)
        if detective is None or not detective.is_alive:
            raise DetectiveUnavailable()
        return detective

    def wake_detective(self, player_id: str) -> None:
        self.judge.require_host_action(player_id, GamePhase.NIGHT)
        detective = self._require_detective()

        self.game_state.current_night_action = "detective"
        self.event_emitter.emit_night_action_update(
            self.host_id, "detective", self._target_list(exclude=[detective.id])
        )
        self.judge.announce("The detective wakes up.", tag="NIGHT")

    def investigate(self, player_id: str, target_id: str) -> None:
        """Check whether the target is Mafia. Only the host sees the answer tonight."""
        self.judge.require_host_action(player_id, GamePhase.NIGHT)
        detective = self._require_detective()
        if target_id == detective.id:
            raise InvalidTarget("The detective cannot investigate themselves")
        target = self._require_living_target(target_id)

        is_mafia = target.is_mafia
        self.game_state.detective_investigation = Investigation(
            target_id=target.id,
            target_name=target.name,
            is_mafia=is_mafia,
            detective_name=detective.name,
            found_role=RoleType.MAFIA.value if is_mafia else target.role.value,
        )
        self.event_emitter.emit_investigation_result(self.host_id, target.id, target.name, is_mafia)
        self.judge.announce(
            f"Detective investigated {target.name}: {'Mafia' if is_mafia else 'Not Mafia'}", tag="NIGHT"
        )

    # Resolution

    def resolve_night(self) -> Optional[Player]:
        """
        Turn the drafts into the night's outcome.

        History is written in a fixed order: mafia target, doctor attempt,
        detective finding, result. A save on the kill target cancels the kill.
        Returns the player who died, if any.
        """
        state = self.game_state
        roster = state.roster

        if state.draft_kill:
            target_name = state.player_name(state.draft_kill)
            state.add_history(
                HistoryCategory.NIGHT_ACTION,
                f"Mafia ({len(roster.get_alive_mafia())} alive) targeted {target_name} for elimination",
                [target_name],
            )

        if state.draft_save:
            saved_name = state.player_name(state.draft_save)
            doctor = roster.find_role(RoleType.DOCTOR)
            doctor_name = doctor.name if doctor else "Doctor"
            state.add_history(
                HistoryCategory.NIGHT_ACTION,
                f"{doctor_name} 🩺 attempted to save {saved_name}",
                [doctor_name, saved_name],
            )

        investigation = state.detective_investigation
        if investigation:
            state.add_history(
                HistoryCategory.INVESTIGATION,
                f"{investigation.detective_name} 🔍 investigated {investigation.target_name} "
                f"and found they are {investigation.found_role}",
                [investigation.detective_name, investigation.target_name],
            )

        if state.draft_kill and state.draft_kill == state.draft_save:
            state.actual_kill = None
            saved_name = state.player_name(state.draft_save) or "Someone"
            state.add_history(
                HistoryCategory.NIGHT,
                f"✅ {saved_name} was successfully saved! No one died during the night.",
                [saved_name],
            )
            return None

        if state.draft_kill:
            state.actual_kill = state.draft_kill
            victim = roster.get(state.actual_kill)
            if victim:
                victim.eliminate()
                state.add_history(
                    HistoryCategory.DEATH,
                    f"💀 {victim.name} was killed during the night",
                    [victim.name],
                )
            return victim

        state.actual_kill = None
        state.add_history(HistoryCategory.NIGHT, "✅ No one died during the night")
        return None

    def start_day(self, player_id: str) -> Optional[WinResult]:
        """
        Resolve the night and announce the morning.
        Returns the win result if the night ended the game.
        """
        self.judge.require_host_action(player_id, GamePhase.NIGHT)

        victim = self.resolve_night()
        self.game_state.phase = GamePhase.DAY
        self.game_state.current_night_action = None

        death_info: Dict[str, Any] = {"died": False}
        if victim:
            death_info = {"died": True, "playerId": victim.id, "playerName": victim.name}
        self.game_state.last_death_info = death_info

        self.judge.publish_phase(death_info=death_info)
        self.judge.publish_roster()

        if victim:
            self.judge.announce(f"Morning has come. {victim.name} did not survive the night.")
        else:
            self.judge.announce("Morning has come. Nobody died tonight.")

        return self.game_state.check_win_condition()

    def _target_list(self, exclude=()):
        """Eligible targets with roles, for the host's screen."""
        return [p.to_dict(include_role=True) for p in self.judge.living_targets(exclude)]

    def _require_living_target(self, target_id: str) -> Player:
        target = self.game_state.get_player(target_id)
        if target is None or not target.is_playing or not target.is_alive:
            raise InvalidTarget("Invalid player selected")
        return target
