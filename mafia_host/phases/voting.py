"""
Voting system with tie-breaking logic.
"""

from typing import List, Dict, Optional, Any

from ..core import GameState, GamePhase, VoteType, Judge, Player, WinResult
from ..core.exceptions import InvalidVote, WrongPhase
from ..web.event_emitter import EventEmitter

ALL_VOTED_MESSAGES = {
    GamePhase.TENTATIVE_VOTING: "All players have voted! You can now start Final Voting or continue discussion.",
    GamePhase.FINAL_VOTING: "All players have voted! You can end voting now or wait for the timer.",
    GamePhase.TIE_REVOTE: "All players have voted in the revote! You can end voting now or wait for the timer.",
}


class VotingHandler:
    """Handles voting phase and tie-breaking."""

    def __init__(self, game_state: GameState, judge: Judge, event_emitter: Optional[EventEmitter] = None):
        self.game_state = game_state
        self.judge = judge
        self.event_emitter = event_emitter or EventEmitter()

    @property
    def max_revotes(self) -> int:
        return self.judge.config.max_revotes

    def start_tentative_voting(self, player_id: str) -> None:
        self.judge.require_host_action(player_id, GamePhase.DAY)
        self._open_ballot(GamePhase.TENTATIVE_VOTING, VoteType.TENTATIVE)
        self.judge.announce("Tentative voting started", tag="VOTE")

    def start_final_voting(self, player_id: str) -> None:
        self.judge.require_host_action(player_id, GamePhase.DAY, GamePhase.TENTATIVE_VOTING)
        self._open_ballot(GamePhase.FINAL_VOTING, VoteType.FINAL)
        self.judge.announce("Final voting started", tag="VOTE")

    def _open_ballot(self, phase: GamePhase, vote_type: VoteType) -> None:
        self.game_state.start_voting(phase, vote_type)
        self.game_state.tied_candidates = []
        self.game_state.revote_count = 0
        self.judge.publish_phase()

    def eligible_voters(self) -> List[Player]:
        """Living non-host players. Disconnected players still count."""
        return self.game_state.get_alive_players()

    def cast_vote(self, voter_id: str, target_id: str) -> None:
        """
        Record (or replace) a vote and broadcast the tally.
        Tells the host once everyone eligible has voted.
        """
        state = self.game_state
        if not state.is_voting:
            raise WrongPhase("Not in voting phase")
        self.judge.require_no_pending_outcome()

        voter = state.get_player(voter_id)
        if voter is None or not voter.can_vote:
            raise InvalidVote("You cannot vote")
        if target_id == voter.id:
            raise InvalidVote("You cannot vote for yourself")
        if state.phase == GamePhase.TIE_REVOTE and target_id not in state.tied_candidates:
            raise InvalidVote("You can only vote for tied candidates")
        target = state.get_player(target_id)
        if target is None or not target.can_vote:
            raise InvalidVote("You cannot vote for that player")

        state.votes[voter.id] = target.id
        vote_counts = self.get_vote_counts()
        self.event_emitter.emit_vote_update(
            voter.id, voter.name, target.id, target.name, vote_counts, self.get_vote_details()
        )
        self.judge.announce(f"{voter.name} voted for {target.name}", tag="VOTE")

        eligible = len(self.eligible_voters())
        if eligible > 0 and len(state.votes) == eligible:
            host_id = state.roster.host_id
            if host_id:
                self.event_emitter.emit_all_players_voted(
                    host_id, state.phase.value, ALL_VOTED_MESSAGES[state.phase], vote_counts
                )
            self.judge.announce("All players have voted!", tag="VOTE")

    def get_vote_counts(self) -> List[Dict[str, Any]]:
        """
        Per-target counts, highest first.
        Equal counts keep the order in which the targets first received a vote.
        """
        counts: Dict[str, int] = {}
        for target_id in self.game_state.votes.values():
            counts[target_id] = counts.get(target_id, 0) + 1

        tally = [
            {"playerId": target_id, "playerName": self.game_state.player_name(target_id), "count": count}
            for target_id, count in counts.items()
        ]
        return sorted(tally, key=lambda entry: entry["count"], reverse=True)

    def get_vote_details(self) -> Dict[str, List[Dict[str, Any]]]:
        """Who voted for whom: {target_id: [{voterId, voterName}]}."""
        details: Dict[str, List[Dict[str, Any]]] = {}
        for voter_id, target_id in self.game_state.votes.items():
            voter = self.game_state.get_player(voter_id)
            if voter:
                details.setdefault(target_id, []).append({"voterId": voter.id, "voterName": voter.name})
        return details

    def broadcast_tally(self) -> None:
        """Resend the current tally to everyone (no new vote)."""
        self.event_emitter.emit_vote_update(
            None, None, None, None, self.get_vote_counts(), self.get_vote_details()
        )

    def has_everyone_voted(self) -> bool:
        voted = len(self.game_state.votes)
        return voted > 0 and voted == len(self.eligible_voters())

    def resolve(self) -> Optional[WinResult]:
        """
        Close the current ballot.

        No votes: nobody is eliminated. A tie in final voting (or a revote)
        starts another revote among the tied players until ``max_revotes``
        is reached, after which every tied player is eliminated. Anything
        else eliminates the top entry. Returns the win result if the
        elimination ended the game.
        """
        state = self.game_state
        vote_counts = self.get_vote_counts()

        if not vote_counts:
            self.event_emitter.emit_vote_result({"eliminated": [], "reason": "No votes cast"})
            state.clear_voting()
            state.phase = GamePhase.DAY
            self.judge.publish_phase()
            self.judge.announce("Voting ended with no votes cast", tag="VOTE")
            return None

        max_votes = vote_counts[0]["count"]
        tied = [entry for entry in vote_counts if entry["count"] == max_votes]
        is_final = state.vote_type == VoteType.FINAL

        if len(tied) > 1 and is_final and state.revote_count < self.max_revotes:
            self._start_revote(tied, vote_counts)
            return None

        if len(tied) > 1 and is_final:
            for entry in tied:
                state.eliminate_player(entry["playerId"], "tie vote after max revotes")
            eliminated = tied
            reason = "tie_max_revotes"
        else:
            eliminated = tied[:1]
            state.eliminate_player(tied[0]["playerId"], "tie vote" if len(tied) > 1 else "majority vote")
            reason = "tie" if len(tied) > 1 else "majority"

        info = {
            "eliminated": [{"playerId": e["playerId"], "playerName": e["playerName"]} for e in eliminated],
            "reason": reason,
            "voteCounts": vote_counts,
        }
        state.last_elimination_info = info
        self.event_emitter.emit_vote_result(info)
        self.judge.announce(
            f"Eliminated: {', '.join(e['playerName'] for e in eliminated)} ({reason})", tag="VOTE"
        )

        state.clear_voting()
        result = state.check_win_condition()
        if result is None:
            state.phase = GamePhase.DAY
            self.judge.publish_phase(voting_completed=True)
        self.judge.publish_roster()
        return result

    def _start_revote(self, tied: List[Dict[str, Any]], vote_counts: List[Dict[str, Any]]) -> None:
        state = self.game_state
        state.tied_candidates = [entry["playerId"] for entry in tied]
        state.revote_count += 1
        state.start_voting(GamePhase.TIE_REVOTE, VoteType.FINAL)

        self.event_emitter.emit_tie_revote(
            [{"playerId": e["playerId"], "playerName": e["playerName"]} for e in tied],
            state.revote_count,
            vote_counts
        )
        self.judge.publish_phase(tied_candidates=list(state.tied_candidates))
        self.judge.announce(
            f"Tie between {', '.join(e['playerName'] for e in tied)}, "
            f"starting revote round {state.revote_count}", tag="VOTE"
        )
