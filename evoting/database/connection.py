# evoting/database/connection.py
import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient, ReturnDocument

from evoting import config
from evoting.errors import storage_errors

logger = logging.getLogger(__name__)

ELECTIONS_COLLECTION_NAME = "elections"
CANDIDATES_COLLECTION_NAME = "candidates"
VOTERS_COLLECTION_NAME = "voters"
VOTES_COLLECTION_NAME = "votes"
ADMINS_COLLECTION_NAME = "admins"
COUNTERS_COLLECTION_NAME = "counters"


class Store:
    """Handle on the MongoDB database shared by every component.

    One Store is created by the hosting process and passed explicitly to the
    registry, ledger, tally engine and CRUD helpers. The database is the only
    shared mutable state; nothing is cached here.
    """

    def __init__(self, client: MongoClient, db_name: str = config.MONGO_DB):
        self.client = client
        self.db = client[db_name]
        self.elections = self.db[ELECTIONS_COLLECTION_NAME]
        self.candidates = self.db[CANDIDATES_COLLECTION_NAME]
        self.voters = self.db[VOTERS_COLLECTION_NAME]
        self.votes = self.db[VOTES_COLLECTION_NAME]
        self.admins = self.db[ADMINS_COLLECTION_NAME]
        self.counters = self.db[COUNTERS_COLLECTION_NAME]

    def ensure_indexes(self) -> None:
        with storage_errors("create indexes"):
            # One vote per voter per election, enforced at commit time.
            self.votes.create_index(
                [("election_id", ASCENDING), ("voter_id", ASCENDING)],
                unique=True,
                name="uniq_vote_election_voter",
            )
            self.candidates.create_index(
                [("election_id", ASCENDING), ("position_idx", ASCENDING)]
            )
            self.voters.create_index("fullname")
            self.admins.create_index("username", unique=True)

    def next_id(self, sequence: str) -> int:
        """Allocate the next integer id for ``sequence`` atomically."""
        with storage_errors(f"allocate an id for {sequence}"):
            counter = self.counters.find_one_and_update(
                {"_id": sequence},
                {"$inc": {"seq": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        return counter["seq"]

    def ping(self) -> bool:
        with storage_errors("reach the database"):
            self.client.admin.command("ping")
        return True

    def close(self) -> None:
        self.client.close()


def connect(uri: Optional[str] = None, db_name: Optional[str] = None) -> Store:
    """Open a Store against a real MongoDB server and prepare its indexes."""
    uri = uri or config.MONGO_URI
    db_name = db_name or config.MONGO_DB
    store = Store(MongoClient(uri), db_name)
    store.ensure_indexes()
    logger.info(f"Connected to MongoDB: {db_name}")
    return store
