# evoting/ledger.py
import logging
from datetime import datetime, timezone

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from evoting.crud import get_voter
from evoting.database.connection import Store
from evoting.errors import (
    AlreadyVoted,
    CandidateMismatch,
    ElectionNotOpen,
    storage_errors,
)
from evoting.models.vote_model import Vote
from evoting.registry import ElectionRegistry

logger = logging.getLogger(__name__)


class VoteLedger:
    """The only writer of votes.

    Votes are inserted once and never updated or deleted. The unique index on
    ``votes(election_id, voter_id)`` (see ``Store.ensure_indexes``) is what
    makes check-then-insert atomic: when two callers race past the
    ``has_voted`` check, the second insert fails at commit time and is
    reported as ``AlreadyVoted``.
    """

    def __init__(self, store: Store):
        self.store = store
        self.registry = ElectionRegistry(store)

    def cast_vote(self, election_id: int, voter_id: int, position_idx: int, candidate_id: int) -> Vote:
        with storage_errors("record the vote"):
            if not self.registry.is_open(election_id):
                logger.warning(f"Vote rejected: election {election_id} is not open")
                raise ElectionNotOpen(f"Election {election_id} is not open for voting.")

            candidate = self.store.candidates.find_one({"_id": candidate_id})
            if (
                candidate is None
                or candidate["election_id"] != election_id
                or candidate["position_idx"] != position_idx
            ):
                logger.warning(
                    f"Vote rejected: candidate {candidate_id} is not running for "
                    f"position {position_idx} of election {election_id}"
                )
                raise CandidateMismatch(
                    f"Candidate {candidate_id} is not running for position {position_idx} "
                    f"in election {election_id}."
                )

            # NotFound for voters who were never registered
            get_voter(self.store, voter_id)

            if self.has_voted(election_id, voter_id):
                logger.warning(f"Vote rejected: voter {voter_id} already voted in election {election_id}")
                raise AlreadyVoted(f"Voter {voter_id} has already voted in election {election_id}.")

            vote = {
                "_id": ObjectId(),
                "election_id": election_id,
                "voter_id": voter_id,
                "position_idx": position_idx,
                "candidate_id": candidate_id,
                "cast_at": datetime.now(timezone.utc),
            }
            try:
                self.store.votes.insert_one(vote)
            except DuplicateKeyError:
                logger.warning(
                    f"Vote rejected at commit: voter {voter_id} already voted in election {election_id}"
                )
                raise AlreadyVoted(f"Voter {voter_id} has already voted in election {election_id}.")

        logger.info(f"Vote recorded in election {election_id} for position {position_idx}")
        return Vote(id=str(vote["_id"]), **vote)

    def has_voted(self, election_id: int, voter_id: int) -> bool:
        with storage_errors("check the voter's ballot"):
            doc = self.store.votes.find_one(
                {"election_id": election_id, "voter_id": voter_id}, {"_id": 1}
            )
        return doc is not None
