from fastapi import Depends, Request

from evoting.database.connection import Store
from evoting.ledger import VoteLedger
from evoting.registry import ElectionRegistry
from evoting.tally import TallyEngine


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_registry(store: Store = Depends(get_store)) -> ElectionRegistry:
    return ElectionRegistry(store)


def get_ledger(store: Store = Depends(get_store)) -> VoteLedger:
    return VoteLedger(store)


def get_tally_engine(store: Store = Depends(get_store)) -> TallyEngine:
    return TallyEngine(store)
