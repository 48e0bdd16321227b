"""
Web boundary: inbound command models, outbound events and run recording.
"""

from .event_emitter import EventEmitter
from .run_recorder import RunRecorder
from .commands import Command, parse_command, COMMAND_TYPES

__all__ = ['EventEmitter', 'RunRecorder', 'Command', 'parse_command', 'COMMAND_TYPES']
