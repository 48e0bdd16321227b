"""
Tests for event delivery and run recording.
"""

import json

from mafia_host.web import EventEmitter, RunRecorder


def read_events(recorder):
    path = recorder.get_run_path() / "events.jsonl"
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_listeners_receive_audience(listener):
    """Test listeners get the event name, payload and audience."""
    emitter = EventEmitter()
    emitter.add_listener(listener)

    emitter.emit_notification("hello")
    emitter.emit_error("a", "nope", "malformed")

    assert listener.events == [
        ("notification", {"message": "hello", "type": "info"}, None),
        ("error", {"message": "nope", "kind": "malformed"}, "a"),
    ]


def test_removed_listener_gets_nothing(listener):
    """Test a removed listener stops receiving events."""
    emitter = EventEmitter()
    emitter.add_listener(listener)
    emitter.remove_listener(listener)
    emitter.emit_game_reset()
    assert listener.events == []


def test_phase_update_optional_fields(listener):
    """Test phase-specific fields only appear when given."""
    emitter = EventEmitter()
    emitter.add_listener(listener)

    emitter.emit_phase_update("day", 1, [], {"allowSpectatorView": False})
    emitter.emit_phase_update("tieRevote", 1, [], {}, tied_candidates=["a", "b"], voting_completed=False)

    plain, tie = [data for data, _ in listener.of("phaseUpdate")]
    assert set(plain) == {"phase", "round", "players", "gameSettings"}
    assert tie["tiedCandidates"] == ["a", "b"]
    assert "votingCompleted" not in tie


def test_recorder_writes_jsonl(tmp_path):
    """Test every emitted event is appended to the run's events file."""
    recorder = RunRecorder(str(tmp_path / "runs"))
    assert recorder.create_run("test_run") == "test_run"
    emitter = EventEmitter(recorder)

    emitter.emit_timer_update(30)
    emitter.emit_kill_marked("h", "p1", "P1")

    events = read_events(recorder)
    assert [e["event_type"] for e in events] == ["timerUpdate", "killMarked"]
    assert [e["sequence"] for e in events] == [0, 1]
    assert events[0]["audience"] is None
    assert events[1]["audience"] == "h"
    assert events[1]["data"] == {"playerId": "p1", "playerName": "P1"}


def test_recording_failure_does_not_stop_delivery(tmp_path, listener, capsys):
    """Test a broken recorder is reported and the event still goes out."""
    class BrokenRecorder(RunRecorder):
        def record_event(self, event_type, data, audience=None):
            raise OSError("disk full")

    emitter = EventEmitter(BrokenRecorder(str(tmp_path)))
    emitter.add_listener(listener)
    emitter.emit_game_resumed()

    assert listener.names() == ["gameResumed"]
    assert "Error recording event: disk full" in capsys.readouterr().out


def test_state_backed_payloads_are_copies(listener):
    """Test changing a sent payload does not reach the session's stored outcomes."""
    emitter = EventEmitter()
    emitter.add_listener(listener)
    death_info = {"died": True, "playerId": "p4", "playerName": "P4"}
    elimination = {
        "eliminated": [{"playerId": "p5", "playerName": "P5"}],
        "reason": "majority",
        "voteCounts": [{"playerId": "p5", "playerName": "P5", "count": 3}],
    }

    emitter.emit_phase_update("day", 1, [], {}, death_info=death_info)
    emitter.emit_vote_result(elimination)
    listener.last("phaseUpdate")[0]["deathInfo"]["died"] = False
    sent = listener.last("voteResult")[0]
    sent["eliminated"].clear()
    sent["voteCounts"][0]["count"] = 0

    assert death_info["died"] is True
    assert elimination["eliminated"] == [{"playerId": "p5", "playerName": "P5"}]
    assert elimination["voteCounts"][0]["count"] == 3
