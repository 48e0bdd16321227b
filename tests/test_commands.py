"""
Tests for inbound command validation.
"""

import pytest

from mafia_host.core.exceptions import MalformedCommand
from mafia_host.web.commands import (
    COMMAND_TYPES, JoinGame, MarkKill, PlayerVote, StartFinalVoting, StartGame, UpdateGameSettings,
    parse_command,
)


def test_parse_object_payload():
    """Test a camelCase payload maps onto the command model."""
    command = parse_command("godMarkKill", {"playerId": "p1"})
    assert isinstance(command, MarkKill)
    assert command.player_id == "p1"


def test_parse_bare_value_payload():
    """Test single-field events accept the bare value."""
    command = parse_command("playerVote", "p3")
    assert isinstance(command, PlayerVote)
    assert command.target_id == "p3"

    command = parse_command("godStartFinalVoting", 45)
    assert isinstance(command, StartFinalVoting)
    assert command.duration == 45


def test_parse_without_payload():
    """Test commands without fields need no payload."""
    assert isinstance(parse_command("startGame"), StartGame)
    assert parse_command("godStartFinalVoting").duration is None


def test_unknown_event():
    """Test unknown events are malformed."""
    with pytest.raises(MalformedCommand, match="Unknown command: godSmite"):
        parse_command("godSmite", {})


def test_wrong_payload_shape():
    """Test a list payload is refused."""
    with pytest.raises(MalformedCommand, match="Invalid payload for startGame"):
        parse_command("startGame", [1, 2])


def test_missing_field():
    """Test a required field must be present."""
    with pytest.raises(MalformedCommand, match="Invalid godMarkKill"):
        parse_command("godMarkKill", {})


def test_unexpected_field():
    """Test unexpected fields are refused."""
    with pytest.raises(MalformedCommand):
        parse_command("startGame", {"force": True})


@pytest.mark.parametrize("duration", [0, -5, 100000])
def test_duration_bounds(duration):
    """Test timer durations must be positive and bounded."""
    with pytest.raises(MalformedCommand):
        parse_command("godStartVotingTimer", {"duration": duration})


def test_join_name_is_trimmed_and_limited():
    """Test names are trimmed and held to the configured length."""
    command = parse_command("joinGame", {"name": "  Dana  ", "token": "abc"})
    assert isinstance(command, JoinGame)
    assert command.name == "Dana"
    assert command.token == "abc"

    with pytest.raises(MalformedCommand, match="at most 5"):
        parse_command("joinGame", {"name": "Bartholomew"}, max_name_length=5)
    with pytest.raises(MalformedCommand, match="empty"):
        parse_command("joinGame", "  ")


def test_settings_ignore_unknown_keys():
    """Test unknown settings are dropped rather than rejected."""
    command = parse_command("updateGameSettings", {"allowSpectatorView": False, "theme": "dark"})
    assert isinstance(command, UpdateGameSettings)
    assert command.allow_spectator_view is False


def test_every_event_is_known():
    """Test the full inbound event set is registered."""
    assert COMMAND_TYPES == {
        "joinGame", "startGame", "playerViewedRole", "playerReady",
        "godStartNight", "godWakeMafia", "godMarkKill", "godWakeDoctor", "godMarkSave",
        "godWakeDetective", "godInvestigate", "godStartDay",
        "godStartTentativeVoting", "godStartFinalVoting", "godStartVotingTimer", "godExtendTimer",
        "godEndVoting", "playerVote", "transferHost", "resetGame", "updateGameSettings",
    }
