"""
Tests for role distribution and assignment.
"""

import random
from collections import Counter

import pytest

from mafia_host.core import Player, RoleType, get_mafia_count, get_role_distribution, shuffle_roles, assign_roles


@pytest.mark.parametrize("non_host,expected", [
    (4, 1),
    (5, 1),
    (6, 1),
    (7, 1),
    (8, 2),
    (10, 2),
    (12, 3),  # 2.5 rounds up
    (14, 3),
])
def test_mafia_count(non_host, expected):
    """Test the mafia share rounds half up and never drops below one."""
    assert get_mafia_count(non_host) == expected


def test_distribution_four_players():
    """Test the smallest table: one of each special role and one villager."""
    counts = Counter(get_role_distribution(4))
    assert counts == {
        RoleType.DOCTOR: 1,
        RoleType.DETECTIVE: 1,
        RoleType.MAFIA: 1,
        RoleType.VILLAGER: 1,
    }


def test_distribution_eight_players():
    """Test eight players get two Mafia and four Villagers."""
    roles = get_role_distribution(8)
    counts = Counter(roles)
    assert len(roles) == 8
    assert counts[RoleType.DOCTOR] == 1
    assert counts[RoleType.DETECTIVE] == 1
    assert counts[RoleType.MAFIA] == 2
    assert counts[RoleType.VILLAGER] == 4


def test_shuffle_keeps_roles():
    """Test shuffling reorders without adding or losing roles."""
    roles = get_role_distribution(9)
    shuffled = shuffle_roles(roles, random.Random(3))
    assert Counter(shuffled) == Counter(roles)
    assert roles == get_role_distribution(9)  # input untouched


def test_shuffle_is_reproducible_with_seed():
    """Test the same seed gives the same order."""
    roles = get_role_distribution(10)
    assert shuffle_roles(roles, random.Random(42)) == shuffle_roles(roles, random.Random(42))


def test_assign_roles_host_is_god():
    """Test the host is fixed to God and excluded from the partition."""
    players = [Player(id=f"s{i}", name=f"P{i}", is_host=(i == 0)) for i in range(9)]
    assign_roles(players, random.Random(1))

    assert players[0].role is RoleType.GOD
    non_host_roles = Counter(p.role for p in players[1:])
    assert non_host_roles[RoleType.GOD] == 0
    assert non_host_roles[RoleType.MAFIA] == get_mafia_count(8)
    assert sum(non_host_roles.values()) == 8


def test_mafia_know_teammates():
    """Test each Mafia player is told the other Mafia names."""
    players = [Player(id=f"s{i}", name=f"P{i}", is_host=(i == 0)) for i in range(13)]
    assign_roles(players, random.Random(5))

    mafia = [p for p in players if p.is_mafia]
    assert len(mafia) == 3
    for player in mafia:
        assert sorted(player.known_mafia) == sorted(m.name for m in mafia if m is not player)
    for player in players:
        if not player.is_mafia:
            assert player.known_mafia == []
