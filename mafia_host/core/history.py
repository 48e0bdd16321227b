"""
Append-only history of narrated game events.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Tuple, Optional


class HistoryCategory(Enum):
    NIGHT = "night"
    NIGHT_ACTION = "night_action"
    INVESTIGATION = "investigation"
    DEATH = "death"
    ELIMINATION = "elimination"
    GAME_OVER = "gameOver"


@dataclass(frozen=True)
class HistoryEvent:
    """A single narrated event. Immutable once appended."""
    round: int
    category: HistoryCategory
    description: str
    players: Tuple[str, ...] = ()
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "timestamp": int(self.timestamp * 1000),
            "type": self.category.value,
            "description": self.description,
            "players": list(self.players),
        }


class HistoryLog:
    """Ordered record of events, replayed to reconnecting players."""

    def __init__(self):
        self._events: List[HistoryEvent] = []

    def append(self, round_number: int, category: HistoryCategory, description: str,
               players: Optional[List[Optional[str]]] = None) -> HistoryEvent:
        names = tuple(name for name in (players or []) if name)
        event = HistoryEvent(round=round_number, category=category,
                             description=description, players=names)
        self._events.append(event)
        return event

    def clear(self) -> None:
        """Only used by a full game reset."""
        self._events = []

    def to_list(self) -> List[Dict[str, Any]]:
        return [event.to_dict() for event in self._events]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))

    def __getitem__(self, index: int) -> HistoryEvent:
        return self._events[index]
