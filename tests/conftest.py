"""
Pytest fixtures for Mafia game tests.
"""

import random
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from mafia_host.config.game_config import GameConfig
from mafia_host.core import RoleType, Scheduler, ScheduledCall
from mafia_host.session import GameSession
from mafia_host.web.event_emitter import EventEmitter


class ManualCall(ScheduledCall):
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Fake clock: callbacks only run when the test advances time."""

    def __init__(self):
        self.clock = 0.0
        self.calls: List[ManualCall] = []

    def now(self) -> float:
        return self.clock

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualCall:
        call = ManualCall(self.clock + delay, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> List[ManualCall]:
        return [c for c in self.calls if not c.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.clock + seconds
        while True:
            due = [c for c in self.calls if not c.cancelled and c.due <= target + 1e-9]
            if not due:
                break
            call = min(due, key=lambda c: c.due)
            self.calls.remove(call)
            self.clock = max(self.clock, call.due)
            call.callback()
        self.clock = target


class RecordingListener:
    """Collects every outbound event as (event_type, payload, audience)."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any], Optional[str]]] = []

    def __call__(self, event_type: str, data: Dict[str, Any], to: Optional[str]) -> None:
        self.events.append((event_type, data, to))

    def of(self, event_type: str) -> List[Tuple[Dict[str, Any], Optional[str]]]:
        return [(data, to) for name, data, to in self.events if name == event_type]

    def last(self, event_type: str) -> Tuple[Dict[str, Any], Optional[str]]:
        matches = self.of(event_type)
        assert matches, f"no {event_type} event was emitted"
        return matches[-1]

    def names(self) -> List[str]:
        return [name for name, _, _ in self.events]

    def clear(self) -> None:
        self.events = []


HOST = "h"
PLAYERS = ["p1", "p2", "p3", "p4", "p5"]

# Fixed roles used by most tests, applied after the random assignment
FIXED_ROLES = {
    "p1": RoleType.MAFIA,
    "p2": RoleType.DOCTOR,
    "p3": RoleType.DETECTIVE,
    "p4": RoleType.VILLAGER,
    "p5": RoleType.VILLAGER,
}


def player_name(sid: str) -> str:
    return "Host" if sid == HOST else sid.upper()


def set_roles(session: GameSession, roles: Dict[str, RoleType]) -> None:
    """Overwrite the random assignment with known roles."""
    roster = session.game_state.roster
    for sid, role in roles.items():
        roster.get(sid).role = role
    mafia = [p for p in roster if p.role is RoleType.MAFIA]
    for player in roster:
        player.known_mafia = [m.name for m in mafia if m is not player] if player.is_mafia else []


@pytest.fixture
def game_config():
    """Test game configuration."""
    return GameConfig(
        use_announcements=False,  # Disable for cleaner test output
        record_events=False,
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def event_emitter(listener):
    emitter = EventEmitter()
    emitter.add_listener(listener)
    return emitter


@pytest.fixture
def session(game_config, event_emitter, scheduler):
    """Fresh session with nobody seated."""
    return GameSession(game_config, event_emitter=event_emitter, scheduler=scheduler,
                       rng=random.Random(7))


@pytest.fixture
def lobby(session):
    """Host plus five players in the lobby."""
    for sid in [HOST] + PLAYERS:
        session.join(sid, player_name(sid))
    return session


@pytest.fixture
def started(lobby, listener):
    """Started game with fixed roles: P1 Mafia, P2 Doctor, P3 Detective, P4/P5 Villagers."""
    lobby.start_game(HOST)
    set_roles(lobby, FIXED_ROLES)
    listener.clear()
    return lobby


@pytest.fixture
def night(started):
    """First night in progress."""
    started.start_night(HOST)
    return started


@pytest.fixture
def day(night, listener):
    """Day 1 after a night where nobody died."""
    night.start_day(HOST)
    listener.clear()
    return night
