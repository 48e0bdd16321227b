"""
Tests for the roster: joining, rejoining, disconnects and host status.
"""

import pytest

from mafia_host.core import Roster, RoleType
from mafia_host.core.exceptions import NameTaken, GameInProgress, AlreadyJoined, InvalidTarget


@pytest.fixture
def roster():
    r = Roster()
    for sid, name in [("a", "Alice"), ("b", "Bob"), ("c", "Carol")]:
        r.join(sid, name, in_progress=False)
    return r


def test_first_joiner_is_host(roster):
    """Test the first player to join becomes host, nobody else."""
    assert roster.get("a").is_host
    assert not roster.get("b").is_host
    assert roster.host_id == "a"


def test_name_taken_before_start(roster):
    """Test names are unique (case-insensitive) in the lobby."""
    with pytest.raises(NameTaken):
        roster.join("d", "  bob ", in_progress=False)
    assert len(roster) == 3


def test_new_name_rejected_after_start(roster):
    """Test strangers cannot join a game in progress."""
    with pytest.raises(GameInProgress):
        roster.join("d", "Dave", in_progress=True)


def test_rejoin_moves_identity(roster):
    """Test a returning player gets the new connection as identity."""
    roster.mark_disconnected("b", in_progress=True)
    result = roster.join("b2", "Bob", in_progress=True)

    assert result.rejoined
    assert result.previous_id == "b"
    assert result.player.id == "b2"
    assert not result.player.is_disconnected
    assert roster.get("b") is None


def test_rejoin_by_token(roster):
    """Test the session token wins over the typed name."""
    token = roster.get("c").token
    result = roster.join("c2", "Someone Else", in_progress=True, token=token)
    assert result.rejoined
    assert result.player.name == "Carol"
    assert result.player.id == "c2"


def test_repeated_join_is_idempotent(roster):
    """Test the same connection joining again under its name changes nothing."""
    result = roster.join("b", "Bob", in_progress=False)
    assert result.repeated
    assert len(roster) == 3


def test_connection_cannot_own_two_players(roster):
    """Test a connection that already joined cannot take another seat."""
    with pytest.raises(AlreadyJoined):
        roster.join("b", "Bobby", in_progress=False)


def test_lobby_disconnect_removes_and_moves_host(roster):
    """Test the host leaving the lobby hands host to the next player."""
    result = roster.mark_disconnected("a", in_progress=False)

    assert result.removed
    assert result.was_host
    assert result.new_host.id == "b"
    assert roster.get("a") is None
    assert roster.get("b").is_host
    assert not result.emptied


def test_last_player_leaving_empties_roster():
    """Test the roster reports when it becomes empty."""
    r = Roster()
    r.join("a", "Alice", in_progress=False)
    result = r.mark_disconnected("a", in_progress=False)
    assert result.emptied
    assert len(r) == 0


def test_in_game_disconnect_only_flags(roster):
    """Test players keep their seat during a game."""
    result = roster.mark_disconnected("a", in_progress=True)
    assert not result.removed
    assert result.was_host
    assert roster.get("a").is_disconnected
    assert roster.get("a").is_host  # host never moves on its own


def test_unknown_disconnect_ignored(roster):
    """Test a disconnect for a connection that owns no player is ignored."""
    assert roster.mark_disconnected("zzz", in_progress=True) is None


def test_transfer_host(roster):
    """Test explicit host transfer."""
    new_host = roster.transfer_host("c")
    assert new_host.is_host
    assert not roster.get("a").is_host
    assert sum(1 for p in roster if p.is_host) == 1

    with pytest.raises(InvalidTarget):
        roster.transfer_host("nobody")
    with pytest.raises(InvalidTarget):
        roster.transfer_host("c")


def test_reset_purges_disconnected(roster):
    """Test reset drops disconnected players and clears game attributes."""
    for player in roster:
        player.role = RoleType.VILLAGER
        player.is_ready = True
    roster.get("b").is_alive = False
    roster.mark_disconnected("c", in_progress=True)

    dropped = roster.reset_for_new_game()

    assert [p.name for p in dropped] == ["Carol"]
    assert [p.id for p in roster] == ["a", "b"]
    for player in roster:
        assert player.role is None
        assert player.is_alive
        assert not player.is_ready


def test_reset_keeps_a_host_when_host_was_dropped(roster):
    """Test a host dropped by the reset is replaced by the first remaining player."""
    roster.mark_disconnected("a", in_progress=True)
    roster.reset_for_new_game()
    assert roster.host_id == "b"


def test_public_snapshot_hides_roles(roster):
    """Test only the host snapshot carries roles."""
    roster.get("b").role = RoleType.MAFIA
    public = roster.snapshot()
    private = roster.snapshot(include_roles=True)
    assert all("role" not in p for p in public)
    assert private[1]["role"] == "Mafia"
