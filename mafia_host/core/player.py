"""
Player class representing a connected participant.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .roles import RoleType


def new_token() -> str:
    """Issue a session-scoped player token."""
    return uuid.uuid4().hex


@dataclass
class Player:
    """Represents a participant at the table (the host included)."""
    id: str  # Connection-derived identity; reassigned when the player reconnects
    name: str
    token: str = field(default_factory=new_token)
    role: Optional[RoleType] = None
    is_host: bool = False
    is_alive: bool = True
    is_disconnected: bool = False
    has_seen_role: bool = False
    is_ready: bool = False

    # Private information (role-specific)
    known_mafia: List[str] = field(default_factory=list)  # Teammate names, Mafia only

    def __str__(self) -> str:
        role = self.role.value if self.role else "unassigned"
        return f"{self.name} ({role})"

    @property
    def is_mafia(self) -> bool:
        return self.role is RoleType.MAFIA

    @property
    def is_playing(self) -> bool:
        """True for anyone holding a playing role, i.e. not the narrator."""
        return self.role is not None and self.role is not RoleType.GOD and not self.is_host

    @property
    def can_vote(self) -> bool:
        return self.is_playing and self.is_alive

    def eliminate(self) -> None:
        """Mark player as eliminated."""
        self.is_alive = False

    def clear_game_state(self) -> None:
        """Drop everything assigned during a game; identity and host flag survive."""
        self.role = None
        self.is_alive = True
        self.is_disconnected = False
        self.has_seen_role = False
        self.is_ready = False
        self.known_mafia = []

    def to_dict(self, include_role: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "isHost": self.is_host,
            "isAlive": self.is_alive,
            "isDisconnected": self.is_disconnected,
            "hasSeenRole": self.has_seen_role,
            "isReady": self.is_ready,
        }
        if include_role:
            data["role"] = self.role.value if self.role else None
        return data

    def role_payload(self) -> Dict[str, Any]:
        """What a player is told about its own role."""
        data: Dict[str, Any] = {"role": self.role.value if self.role else None}
        if self.is_mafia:
            data["mafiaTeam"] = list(self.known_mafia)
        return data
