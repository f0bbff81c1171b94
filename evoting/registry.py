# evoting/registry.py
import logging
from datetime import datetime, timezone
from typing import List, Sequence

from pymongo import ASCENDING, ReturnDocument

from evoting.database.connection import Store
from evoting.errors import InvalidTransition, NotFound, ValidationError, storage_errors
from evoting.models.election_model import Candidate, Election, ElectionStatus

logger = logging.getLogger(__name__)


def to_election(doc: dict) -> Election:
    return Election(id=doc["_id"], **doc)


def to_candidate(doc: dict) -> Candidate:
    return Candidate(id=doc["_id"], **doc)


class ElectionRegistry:
    """Owns elections, their positions and candidates, and the lifecycle.

    Every transition is a single conditional update filtered on the source
    state, so concurrent callers can never both win a transition or lose an
    update between reading and writing the status.
    """

    def __init__(self, store: Store):
        self.store = store

    def create_election(self, name: str, positions: Sequence[str]) -> Election:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Election name must not be empty.")
        titles = [(title or "").strip() for title in positions or []]
        if not titles:
            raise ValidationError("An election needs at least one position.")
        if not all(titles):
            raise ValidationError("Position titles must not be empty.")

        doc = {
            "_id": self.store.next_id("elections"),
            "name": name,
            "status": ElectionStatus.draft.value,
            "created_at": datetime.now(timezone.utc),
            "positions": [{"index": i, "title": title} for i, title in enumerate(titles)],
        }
        with storage_errors("create the election"):
            self.store.elections.insert_one(doc)
        logger.info(f"Election {doc['_id']} '{name}' created with {len(titles)} position(s)")
        return to_election(doc)

    def get_election(self, election_id: int) -> Election:
        return to_election(self._find(election_id))

    def list_elections(self) -> List[Election]:
        with storage_errors("list elections"):
            docs = list(self.store.elections.find().sort("_id", ASCENDING))
        return [to_election(doc) for doc in docs]

    def open(self, election_id: int) -> Election:
        # Re-opening an open election matches the filter too and changes nothing.
        before = self._transition(
            election_id, [ElectionStatus.draft, ElectionStatus.open], ElectionStatus.open
        )
        if before is not None:
            if before["status"] == ElectionStatus.draft.value:
                logger.info(f"Election {election_id} opened")
            before["status"] = ElectionStatus.open.value
            return to_election(before)

        current = self._find(election_id)
        raise InvalidTransition(
            f"Election {election_id} is {current['status']} and cannot be opened."
        )

    def close(self, election_id: int) -> Election:
        before = self._transition(election_id, [ElectionStatus.open], ElectionStatus.closed)
        if before is not None:
            logger.info(f"Election {election_id} closed")
            before["status"] = ElectionStatus.closed.value
            return to_election(before)

        current = self._find(election_id)
        raise InvalidTransition(
            f"Election {election_id} is {current['status']} and cannot be closed."
        )

    def is_open(self, election_id: int) -> bool:
        with storage_errors("read the election status"):
            doc = self.store.elections.find_one(
                {"_id": election_id, "status": ElectionStatus.open.value}, {"_id": 1}
            )
        return doc is not None

    def add_candidate(self, election_id: int, position_idx: int, name: str, party: str = "") -> Candidate:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Candidate name must not be empty.")

        election = self._find(election_id)
        if election["status"] == ElectionStatus.closed.value:
            raise InvalidTransition(f"Election {election_id} is closed; its ballot is final.")
        indices = {position["index"] for position in election["positions"]}
        if position_idx not in indices:
            raise NotFound(f"Election {election_id} has no position {position_idx}.")

        doc = {
            "_id": self.store.next_id("candidates"),
            "election_id": election_id,
            "position_idx": position_idx,
            "name": name,
            "party": (party or "").strip(),
        }
        with storage_errors("add the candidate"):
            self.store.candidates.insert_one(doc)
        logger.info(f"Candidate '{name}' added to election {election_id} position {position_idx}")
        return to_candidate(doc)

    def list_candidates(self, election_id: int) -> List[Candidate]:
        self._find(election_id)
        with storage_errors("list candidates"):
            docs = list(
                self.store.candidates.find({"election_id": election_id}).sort(
                    [("position_idx", ASCENDING), ("_id", ASCENDING)]
                )
            )
        return [to_candidate(doc) for doc in docs]

    def _find(self, election_id: int) -> dict:
        with storage_errors("read the election"):
            doc = self.store.elections.find_one({"_id": election_id})
        if doc is None:
            raise NotFound(f"Election {election_id} not found.")
        return doc

    def _transition(self, election_id: int, sources: List[ElectionStatus], target: ElectionStatus):
        """Atomically move to ``target`` from any of ``sources``.

        Returns the document as it was before the update, or None when the
        election is missing or in some other state.
        """
        with storage_errors(f"move the election to {target.value}"):
            return self.store.elections.find_one_and_update(
                {"_id": election_id, "status": {"$in": [source.value for source in sources]}},
                {"$set": {"status": target.value}},
                return_document=ReturnDocument.BEFORE,
            )
