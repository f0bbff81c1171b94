import mongomock
import pytest
from fastapi.testclient import TestClient

from evoting import crud
from evoting.database.connection import Store
from evoting.ledger import VoteLedger
from evoting.main import create_app
from evoting.models.voter_model import VoterCreate
from evoting.registry import ElectionRegistry
from evoting.tally import TallyEngine


@pytest.fixture
def store():
    store = Store(mongomock.MongoClient(), "evoting_test")
    store.ensure_indexes()
    return store


@pytest.fixture
def registry(store):
    return ElectionRegistry(store)


@pytest.fixture
def ledger(store):
    return VoteLedger(store)


@pytest.fixture
def engine(store):
    return TallyEngine(store)


@pytest.fixture
def make_voter(store):
    def _make(fullname="Jane Doe", dob="1990-01-01", pin="1234"):
        return crud.register_voter(store, VoterCreate(fullname=fullname, dob=dob, pin=pin))

    return _make


@pytest.fixture
def open_election(registry):
    """An open election with President (A, B) and Secretary (C)."""
    election = registry.create_election("General", ["President", "Secretary"])
    a = registry.add_candidate(election.id, 0, "A", "Red")
    b = registry.add_candidate(election.id, 0, "B", "Blue")
    c = registry.add_candidate(election.id, 1, "C", "Green")
    registry.open(election.id)
    return election, a, b, c


@pytest.fixture
def client(store):
    return TestClient(create_app(store))
