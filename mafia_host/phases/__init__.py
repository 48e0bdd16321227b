"""
Phase handlers for the lobby, night, and voting phases.
"""

from .lobby_phase import LobbyPhaseHandler
from .night_phase import NightPhaseHandler
from .voting import VotingHandler

__all__ = ['LobbyPhaseHandler', 'NightPhaseHandler', 'VotingHandler']
