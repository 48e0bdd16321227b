"""
Core game engine components: session state, players, roles, and rule enforcement.
"""

from .game_engine import (
    GameState, GamePhase, VoteType, Winner, WinResult, Investigation, GameSettings,
    VOTING_PHASES, evaluate_win,
)
from .player import Player, new_token
from .roles import RoleType, get_mafia_count, get_role_distribution, shuffle_roles, assign_roles
from .roster import Roster, JoinResult, DisconnectResult
from .history import HistoryLog, HistoryEvent, HistoryCategory
from .timer import Scheduler, ScheduledCall, ThreadScheduler, CountdownTimer
from .judge import Judge
from . import exceptions
from .exceptions import GameError, ErrorKind

__all__ = [
    'GameState',
    'GamePhase',
    'VoteType',
    'Winner',
    'WinResult',
    'Investigation',
    'GameSettings',
    'VOTING_PHASES',
    'evaluate_win',
    'Player',
    'new_token',
    'RoleType',
    'get_mafia_count',
    'get_role_distribution',
    'shuffle_roles',
    'assign_roles',
    'Roster',
    'JoinResult',
    'DisconnectResult',
    'HistoryLog',
    'HistoryEvent',
    'HistoryCategory',
    'Scheduler',
    'ScheduledCall',
    'ThreadScheduler',
    'CountdownTimer',
    'Judge',
    'exceptions',
    'GameError',
    'ErrorKind',
]
