# evoting/tally.py
import logging
from typing import Dict

from evoting.database.connection import Store
from evoting.errors import NotFound, storage_errors
from evoting.models.tally_model import CandidateTally, ElectionTally, PositionTally

logger = logging.getLogger(__name__)


class TallyEngine:
    """Read-only projection of the vote ledger into ranked counts."""

    def __init__(self, store: Store):
        self.store = store

    def tally(self, election_id: int) -> ElectionTally:
        """Count the votes of an election, per position and candidate.

        Every position with at least one registered candidate is reported,
        even when nobody voted for it. Within a position candidates are ranked
        by count descending, then by candidate id ascending, so the output is
        stable across calls on the same ledger.

        The counts come from a single aggregation over the votes collection.
        Votes are immutable single-document inserts, so the aggregation never
        observes a half-written vote.
        """
        with storage_errors("tally the election"):
            election = self.store.elections.find_one({"_id": election_id})
            if election is None:
                raise NotFound(f"Election {election_id} not found.")
            # Votes first: a counted vote's candidate was inserted before the vote,
            # so reading candidates afterwards always finds it.
            counts = self._count_votes(election_id)
            candidates = list(self.store.candidates.find({"election_id": election_id}))

        titles = {position["index"]: position["title"] for position in election["positions"]}
        by_position: Dict[int, list] = {}
        for candidate in candidates:
            by_position.setdefault(candidate["position_idx"], []).append(
                CandidateTally(
                    candidate_id=candidate["_id"],
                    name=candidate["name"],
                    party=candidate["party"],
                    count=counts.get(candidate["_id"], 0),
                )
            )

        positions = []
        for index in sorted(by_position):
            results = sorted(by_position[index], key=lambda row: (-row.count, row.candidate_id))
            positions.append(PositionTally(index=index, title=titles.get(index, ""), results=results))

        total = sum(row.count for position in positions for row in position.results)
        logger.info(f"Tallied election {election_id}: {total} vote(s) across {len(positions)} position(s)")
        return ElectionTally(
            election_id=election_id,
            name=election["name"],
            status=election["status"],
            total_votes=total,
            positions=positions,
        )

    def _count_votes(self, election_id: int) -> Dict[int, int]:
        pipeline = [
            {"$match": {"election_id": election_id}},
            {"$group": {"_id": "$candidate_id", "count": {"$sum": 1}}},
        ]
        return {row["_id"]: row["count"] for row in self.store.votes.aggregate(pipeline)}
