"""
Authoritative list of participants.
"""

from dataclasses import dataclass
from typing import List, Optional, Dict, Any

from .player import Player
from .roles import RoleType
from .exceptions import NameTaken, GameInProgress, AlreadyJoined, InvalidTarget


@dataclass
class JoinResult:
    """Outcome of a join attempt."""
    player: Player
    rejoined: bool = False
    previous_id: Optional[str] = None  # Identity the player held before a rejoin
    repeated: bool = False  # Same connection joined again under the same name


@dataclass
class DisconnectResult:
    """Outcome of a disconnect event."""
    player: Player
    removed: bool = False  # Deleted outright (game not started)
    was_host: bool = False
    new_host: Optional[Player] = None
    emptied: bool = False


class Roster:
    """Players in join order. Exactly one host whenever the roster is non-empty."""

    def __init__(self):
        self.players: List[Player] = []

    def __len__(self) -> int:
        return len(self.players)

    def __iter__(self):
        return iter(list(self.players))

    def get(self, player_id: Optional[str]) -> Optional[Player]:
        """Get player by identity."""
        if player_id is None:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_by_name(self, name: str) -> Optional[Player]:
        key = name.strip().casefold()
        for player in self.players:
            if player.name.casefold() == key:
                return player
        return None

    def get_by_token(self, token: Optional[str]) -> Optional[Player]:
        if not token:
            return None
        for player in self.players:
            if player.token == token:
                return player
        return None

    def get_host(self) -> Optional[Player]:
        for player in self.players:
            if player.is_host:
                return player
        return None

    @property
    def host_id(self) -> Optional[str]:
        host = self.get_host()
        return host.id if host else None

    def find_role(self, role: RoleType) -> Optional[Player]:
        """First player holding ``role``, alive or not."""
        for player in self.players:
            if player.role is role:
                return player
        return None

    def get_playing_players(self) -> List[Player]:
        return [p for p in self.players if p.is_playing]

    def get_alive_players(self) -> List[Player]:
        """Living players who hold a playing role (the host is never included)."""
        return [p for p in self.players if p.is_playing and p.is_alive]

    def get_alive_mafia(self) -> List[Player]:
        return [p for p in self.get_alive_players() if p.is_mafia]

    def get_alive_villagers(self) -> List[Player]:
        return [p for p in self.get_alive_players() if not p.is_mafia]

    def join(self, connection_id: str, name: str, in_progress: bool,
             token: Optional[str] = None) -> JoinResult:
        """
        Add a player, or reattach a returning one.

        Before the game starts names must be unique. Once it has started only
        an existing player (matched by token, then by name) may come back;
        its identity moves to the new connection.
        """
        name = name.strip()
        existing = self.get_by_token(token) if in_progress else None
        existing = existing or self.get_by_name(name)
        current = self.get(connection_id)

        if existing is not None and existing is current:
            return JoinResult(player=existing, repeated=True)
        if current is not None:
            raise AlreadyJoined()

        if in_progress:
            if existing is None:
                raise GameInProgress()
            previous_id = existing.id
            existing.id = connection_id
            existing.is_disconnected = False
            return JoinResult(player=existing, rejoined=True, previous_id=previous_id)

        if existing is not None:
            raise NameTaken()

        player = Player(id=connection_id, name=name, is_host=not self.players)
        self.players.append(player)
        return JoinResult(player=player)

    def mark_disconnected(self, player_id: str, in_progress: bool) -> Optional[DisconnectResult]:
        """
        Handle a dropped connection.

        Before the game starts the player is deleted and host passes to the
        next player in join order. During a game the player is only flagged;
        host status never moves on its own.
        """
        player = self.get(player_id)
        if player is None:
            return None

        if in_progress:
            player.is_disconnected = True
            return DisconnectResult(player=player, was_host=player.is_host)

        was_host = player.is_host
        self.players.remove(player)
        result = DisconnectResult(player=player, removed=True, was_host=was_host)
        if was_host and self.players:
            self.players[0].is_host = True
            result.new_host = self.players[0]
        result.emptied = not self.players
        return result

    def transfer_host(self, new_host_id: str) -> Player:
        new_host = self.get(new_host_id)
        if new_host is None:
            raise InvalidTarget("Invalid player selected")
        if new_host.is_host:
            raise InvalidTarget("That player is already the host")
        for player in self.players:
            player.is_host = False
        new_host.is_host = True
        return new_host

    def reset_for_new_game(self) -> List[Player]:
        """
        Clear every player's game attributes and drop players whose
        connection is gone.
        Returns the dropped players.
        """
        dropped = [p for p in self.players if p.is_disconnected]
        self.players = [p for p in self.players if not p.is_disconnected]
        for player in self.players:
            player.clear_game_state()
        if self.players and self.get_host() is None:
            self.players[0].is_host = True
        return dropped

    def snapshot(self, include_roles: bool = False) -> List[Dict[str, Any]]:
        """Copy of the roster for broadcasting."""
        return [p.to_dict(include_role=include_roles) for p in self.players]
