"""
Role definitions and role assignment for the Mafia game.
"""

import random
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .player import Player


class RoleType(Enum):
    """Player role types."""
    MAFIA = "Mafia"
    DOCTOR = "Doctor"
    DETECTIVE = "Detective"
    VILLAGER = "Villager"
    GOD = "God"  # The host/narrator, never a playing role


def get_mafia_count(non_host_count: int, ratio: float = 0.25) -> int:
    """
    Number of Mafia for a table of ``non_host_count`` playing participants.

    Rounds half up: (n - 2) * ratio == 2.5 gives 3.
    """
    return max(1, int((non_host_count - 2) * ratio + 0.5))


def get_role_distribution(non_host_count: int, ratio: float = 0.25) -> List[RoleType]:
    """
    Get the (unshuffled) role list for ``non_host_count`` players.
    Returns: 1 Doctor, 1 Detective, the Mafia share, then Villagers.
    """
    roles = [RoleType.DOCTOR, RoleType.DETECTIVE]
    roles.extend([RoleType.MAFIA] * get_mafia_count(non_host_count, ratio))
    roles.extend([RoleType.VILLAGER] * (non_host_count - len(roles)))
    return roles


def shuffle_roles(roles: List[RoleType], rng: Optional[random.Random] = None) -> List[RoleType]:
    """Fisher-Yates shuffle, returning a new list."""
    rng = rng or random.Random()
    shuffled = list(roles)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def assign_roles(players: List['Player'], rng: Optional[random.Random] = None,
                 ratio: float = 0.25) -> None:
    """
    Assign roles to every player in roster order.

    The host is fixed to God and excluded from the partition; everyone else
    gets a role from the shuffled distribution. Mafia players are told who
    their teammates are. The minimum-player check belongs to the caller.
    """
    non_host = [p for p in players if not p.is_host]
    roles = shuffle_roles(get_role_distribution(len(non_host), ratio), rng)

    for player, role in zip(non_host, roles):
        player.role = role
        player.is_alive = True

    for player in players:
        if player.is_host:
            player.role = RoleType.GOD
            player.is_alive = True

    mafia = [p for p in non_host if p.role is RoleType.MAFIA]
    for player in mafia:
        player.known_mafia = [p.name for p in mafia if p is not player]
