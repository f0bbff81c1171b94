from fastapi import APIRouter, Depends

from evoting.dependencies import get_ledger
from evoting.ledger import VoteLedger
from evoting.models.vote_model import VoteCast
from evoting.schemas import VoteReceipt, VoteStatus
from evoting.security import current_voter_id

vote_router = APIRouter(prefix="/vote", tags=["Vote"])


@vote_router.post("/cast", response_model=VoteReceipt, status_code=201)
def cast_vote(
    vote: VoteCast,
    ledger: VoteLedger = Depends(get_ledger),
    voter_id: int = Depends(current_voter_id),
):
    """
    Casts the authenticated voter's single vote in an election.
    Rejections come back as 4xx with an ``error`` code the client can act on.
    """
    ledger.cast_vote(vote.election_id, voter_id, vote.position_idx, vote.candidate_id)
    return VoteReceipt(
        message="Vote cast successfully!",
        election_id=vote.election_id,
        position_idx=vote.position_idx,
        candidate_id=vote.candidate_id,
    )


@vote_router.get("/check/{election_id}", response_model=VoteStatus)
def check_vote(
    election_id: int,
    ledger: VoteLedger = Depends(get_ledger),
    voter_id: int = Depends(current_voter_id),
):
    status = "already_voted" if ledger.has_voted(election_id, voter_id) else "not_voted"
    return VoteStatus(election_id=election_id, status=status)
