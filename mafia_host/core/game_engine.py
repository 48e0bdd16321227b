"""
Core game state: the single session aggregate and its win evaluation.
"""

from enum import Enum
from typing import List, Optional, Dict, Any, TYPE_CHECKING
from dataclasses import dataclass, field

from .history import HistoryLog, HistoryCategory, HistoryEvent
from .player import Player
from .roster import Roster

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


class GamePhase(Enum):
    """Current game phase."""
    LOBBY = "lobby"
    NIGHT = "night"
    DAY = "day"
    TENTATIVE_VOTING = "tentativeVoting"
    FINAL_VOTING = "finalVoting"
    TIE_REVOTE = "tieRevote"
    GAME_OVER = "gameOver"


VOTING_PHASES = (GamePhase.TENTATIVE_VOTING, GamePhase.FINAL_VOTING, GamePhase.TIE_REVOTE)


class VoteType(Enum):
    TENTATIVE = "tentative"
    FINAL = "final"


class Winner(Enum):
    MAFIA = "mafia"
    VILLAGERS = "villagers"
    DRAW = "draw"


@dataclass
class WinResult:
    winner: Winner
    reason: str


@dataclass
class Investigation:
    """The detective's finding for the current night."""
    target_id: str
    target_name: str
    is_mafia: bool
    detective_name: str
    found_role: str


@dataclass
class GameSettings:
    allow_spectator_view: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"allowSpectatorView": self.allow_spectator_view}


def evaluate_win(roster: Roster) -> Optional[WinResult]:
    """
    Check if the game has ended.
    Returns None if the game continues.
    """
    alive_mafia = len(roster.get_alive_mafia())
    alive_villagers = len(roster.get_alive_villagers())

    # 1 v 1: no majority is possible
    if alive_mafia == 1 and alive_villagers == 1:
        return WinResult(Winner.DRAW, "1 Mafia vs 1 Villager - No majority possible, game is a draw")

    if alive_mafia >= alive_villagers and alive_mafia > 0:
        return WinResult(
            Winner.MAFIA,
            f"Mafia ({alive_mafia}) equals or outnumbers Villagers ({alive_villagers})"
        )

    if alive_mafia == 0:
        return WinResult(Winner.VILLAGERS, "All Mafia members have been eliminated")

    return None


@dataclass
class GameState:
    """Complete session state. Mutated only through the session's command handlers."""
    roster: Roster = field(default_factory=Roster)
    history: HistoryLog = field(default_factory=HistoryLog)
    settings: GameSettings = field(default_factory=GameSettings)

    game_started: bool = False
    phase: GamePhase = GamePhase.LOBBY
    round: int = 0

    # Night phase
    current_night_action: Optional[str] = None  # 'mafia', 'doctor', 'detective'
    draft_kill: Optional[str] = None
    draft_save: Optional[str] = None
    actual_kill: Optional[str] = None
    detective_investigation: Optional[Investigation] = None
    doctor_save_history: List[str] = field(default_factory=list)

    # Voting
    votes: Dict[str, str] = field(default_factory=dict)  # {voter_id: target_id}
    vote_type: Optional[VoteType] = None
    tied_candidates: List[str] = field(default_factory=list)
    revote_count: int = 0

    # Outcomes kept for players who join late or come back
    last_death_info: Optional[Dict[str, Any]] = None
    last_elimination_info: Optional[Dict[str, Any]] = None

    # Win condition
    pending_outcome: Optional[WinResult] = None  # Game Over announced after a short delay
    winner: Optional[Winner] = None

    # Event emitter for broadcasting history (optional)
    event_emitter: Optional['EventEmitter'] = None

    @property
    def is_voting(self) -> bool:
        return self.phase in VOTING_PHASES

    @property
    def is_paused(self) -> bool:
        """A game in progress stops while its host is offline."""
        if not self.game_started or self.phase == GamePhase.GAME_OVER:
            return False
        host = self.roster.get_host()
        return host is not None and host.is_disconnected

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        return self.roster.get(player_id)

    def player_name(self, player_id: Optional[str]) -> Optional[str]:
        player = self.roster.get(player_id)
        return player.name if player else None

    def get_alive_players(self) -> List[Player]:
        return self.roster.get_alive_players()

    def add_history(self, category: HistoryCategory, description: str,
                    players: Optional[List[Optional[str]]] = None) -> HistoryEvent:
        event = self.history.append(self.round, category, description, players)
        if self.event_emitter:
            self.event_emitter.emit_history_update(self.history.to_list())
        return event

    def eliminate_player(self, player_id: str, reason: str) -> Optional[Player]:
        """Eliminate a player by vote and record it."""
        player = self.roster.get(player_id)
        if player and player.is_alive:
            player.eliminate()
            self.add_history(
                HistoryCategory.ELIMINATION,
                f"{player.name} was eliminated ({reason})",
                [player.name],
            )
        return player

    def check_win_condition(self) -> Optional[WinResult]:
        return evaluate_win(self.roster)

    def start_night(self) -> None:
        """Transition to night phase."""
        self.round += 1
        self.phase = GamePhase.NIGHT
        self.current_night_action = None
        self.draft_kill = None
        self.draft_save = None
        self.actual_kill = None
        self.detective_investigation = None
        self.last_death_info = None
        self.last_elimination_info = None

    def start_voting(self, phase: GamePhase, vote_type: VoteType) -> None:
        """Enter a voting sub-phase with a clean ballot."""
        self.phase = phase
        self.vote_type = vote_type
        self.votes = {}

    def clear_voting(self) -> None:
        self.votes = {}
        self.vote_type = None
        self.tied_candidates = []
        self.revote_count = 0

    def end_game(self, result: WinResult) -> None:
        self.phase = GamePhase.GAME_OVER
        self.winner = result.winner
        self.pending_outcome = None
        if result.winner == Winner.DRAW:
            description = f"Game is a draw! {result.reason}"
        else:
            side = "Mafia" if result.winner == Winner.MAFIA else "Villagers"
            description = f"{side} win! {result.reason}"
        self.add_history(HistoryCategory.GAME_OVER, description)

    def remap_identity(self, old_id: str, new_id: str) -> None:
        """Point every reference to ``old_id`` at ``new_id``."""
        if old_id == new_id:
            return

        votes = {}
        for voter, target in self.votes.items():
            voter = new_id if voter == old_id else voter
            votes[voter] = new_id if target == old_id else target
        self.votes = votes

        self.tied_candidates = [new_id if c == old_id else c for c in self.tied_candidates]
        self.doctor_save_history = [new_id if s == old_id else s for s in self.doctor_save_history]
        if self.draft_kill == old_id:
            self.draft_kill = new_id
        if self.draft_save == old_id:
            self.draft_save = new_id
        if self.actual_kill == old_id:
            self.actual_kill = new_id
        if self.detective_investigation and self.detective_investigation.target_id == old_id:
            self.detective_investigation.target_id = new_id

    def reset(self) -> None:
        """Return every session field to its initial value. Players are kept."""
        self.game_started = False
        self.phase = GamePhase.LOBBY
        self.round = 0
        self.current_night_action = None
        self.draft_kill = None
        self.draft_save = None
        self.actual_kill = None
        self.detective_investigation = None
        self.doctor_save_history = []
        self.clear_voting()
        self.last_death_info = None
        self.last_elimination_info = None
        self.pending_outcome = None
        self.winner = None
        self.history.clear()
        self.settings = GameSettings()

    def get_game_summary(self) -> Dict[str, Any]:
        """Get a summary of the current game state."""
        return {
            "phase": self.phase.value,
            "round": self.round,
            "alive_players": len(self.get_alive_players()),
            "alive_mafia": len(self.roster.get_alive_mafia()),
            "alive_villagers": len(self.roster.get_alive_villagers()),
            "winner": self.winner.value if self.winner else None,
            "paused": self.is_paused,
        }
