import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from evoting.errors import (
    AlreadyVoted,
    CandidateMismatch,
    ElectionNotOpen,
    NotFound,
    StorageFailure,
)


def test_cast_vote_records_one_immutable_vote(ledger, store, open_election, make_voter):
    election, a, _, _ = open_election
    voter = make_voter()

    vote = ledger.cast_vote(election.id, voter.id, 0, a.id)

    assert (vote.election_id, vote.voter_id, vote.position_idx, vote.candidate_id) == (
        election.id, voter.id, 0, a.id,
    )
    assert store.votes.count_documents({"election_id": election.id}) == 1
    assert ledger.has_voted(election.id, voter.id)


def test_second_vote_same_election_is_rejected(ledger, store, open_election, make_voter):
    election, a, b, c = open_election
    voter = make_voter()
    ledger.cast_vote(election.id, voter.id, 0, a.id)

    with pytest.raises(AlreadyVoted):
        ledger.cast_vote(election.id, voter.id, 0, b.id)
    # one vote per election, not per position
    with pytest.raises(AlreadyVoted):
        ledger.cast_vote(election.id, voter.id, 1, c.id)
    assert store.votes.count_documents({}) == 1


def test_vote_in_draft_or_closed_election_is_rejected(ledger, registry, store, make_voter):
    voter = make_voter()
    election = registry.create_election("General", ["President"])
    candidate = registry.add_candidate(election.id, 0, "A", "Red")

    with pytest.raises(ElectionNotOpen):
        ledger.cast_vote(election.id, voter.id, 0, candidate.id)

    registry.open(election.id)
    registry.close(election.id)
    with pytest.raises(ElectionNotOpen):
        ledger.cast_vote(election.id, voter.id, 0, candidate.id)

    assert store.votes.count_documents({}) == 0


def test_vote_in_unknown_election_is_not_open(ledger, make_voter):
    voter = make_voter()
    with pytest.raises(ElectionNotOpen):
        ledger.cast_vote(999, voter.id, 0, 1)


def test_candidate_from_other_election_is_a_mismatch(ledger, registry, open_election, make_voter):
    election, _, _, _ = open_election
    other = registry.create_election("Other", ["President"])
    stranger = registry.add_candidate(other.id, 0, "Z", "Grey")
    voter = make_voter()

    with pytest.raises(CandidateMismatch):
        ledger.cast_vote(election.id, voter.id, 0, stranger.id)


def test_candidate_under_wrong_position_is_a_mismatch(ledger, open_election, make_voter):
    election, a, _, _ = open_election
    voter = make_voter()
    with pytest.raises(CandidateMismatch):
        ledger.cast_vote(election.id, voter.id, 1, a.id)
    with pytest.raises(CandidateMismatch):
        ledger.cast_vote(election.id, voter.id, 0, 4242)
    assert not ledger.has_voted(election.id, voter.id)


def test_unregistered_voter_is_not_found(ledger, open_election):
    election, a, _, _ = open_election
    with pytest.raises(NotFound):
        ledger.cast_vote(election.id, 777, 0, a.id)


def test_race_past_the_precheck_is_caught_at_commit(ledger, store, open_election, make_voter, monkeypatch):
    election, a, b, _ = open_election
    voter = make_voter()
    # Both callers observe "not voted yet", as if they ran the check simultaneously.
    monkeypatch.setattr(ledger, "has_voted", lambda election_id, voter_id: False)

    ledger.cast_vote(election.id, voter.id, 0, a.id)
    with pytest.raises(AlreadyVoted):
        ledger.cast_vote(election.id, voter.id, 0, b.id)
    assert store.votes.count_documents({"voter_id": voter.id}) == 1


def test_concurrent_votes_from_one_voter_exactly_one_wins(ledger, store, open_election, make_voter):
    election, a, b, _ = open_election
    voter = make_voter()
    workers = 8
    barrier = threading.Barrier(workers)

    def attempt(i):
        barrier.wait()
        try:
            ledger.cast_vote(election.id, voter.id, 0, a.id if i % 2 else b.id)
            return "ok"
        except AlreadyVoted:
            return "already_voted"

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(attempt, range(workers)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("already_voted") == workers - 1
    assert store.votes.count_documents({"voter_id": voter.id}) == 1


def test_concurrent_votes_from_different_voters_all_succeed(ledger, store, open_election, make_voter):
    election, a, _, _ = open_election
    voters = [make_voter(fullname=f"Voter {i}") for i in range(4)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(lambda v: ledger.cast_vote(election.id, v.id, 0, a.id), voters))

    assert store.votes.count_documents({"election_id": election.id}) == 4


def test_storage_outage_is_reported_as_storage_failure(ledger, store, open_election, make_voter, monkeypatch):
    election, a, _, _ = open_election
    voter = make_voter()

    def unreachable(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(store.votes, "insert_one", unreachable)
    with pytest.raises(StorageFailure):
        ledger.cast_vote(election.id, voter.id, 0, a.id)

    monkeypatch.undo()
    # nothing was committed, so retrying is safe
    ledger.cast_vote(election.id, voter.id, 0, a.id)
    assert store.votes.count_documents({"voter_id": voter.id}) == 1
