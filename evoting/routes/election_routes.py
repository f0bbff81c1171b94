from typing import List

from fastapi import APIRouter, Depends

from evoting.dependencies import get_registry, get_tally_engine
from evoting.models.election_model import Candidate, CandidateCreate, Election, ElectionCreate
from evoting.models.tally_model import ElectionTally
from evoting.registry import ElectionRegistry
from evoting.security import current_admin_id
from evoting.tally import TallyEngine

router = APIRouter(prefix="/election", tags=["Election"])


@router.post("/create", response_model=Election, status_code=201)
def create_election(
    election: ElectionCreate,
    registry: ElectionRegistry = Depends(get_registry),
    admin_id: int = Depends(current_admin_id),
):
    return registry.create_election(election.name, election.positions)


@router.get("/all", response_model=List[Election])
def get_all_elections(registry: ElectionRegistry = Depends(get_registry)):
    return registry.list_elections()


@router.get("/{election_id}", response_model=Election)
def get_election(election_id: int, registry: ElectionRegistry = Depends(get_registry)):
    return registry.get_election(election_id)


@router.post("/{election_id}/open", response_model=Election)
def open_election(
    election_id: int,
    registry: ElectionRegistry = Depends(get_registry),
    admin_id: int = Depends(current_admin_id),
):
    return registry.open(election_id)


@router.post("/{election_id}/close", response_model=Election)
def close_election(
    election_id: int,
    registry: ElectionRegistry = Depends(get_registry),
    admin_id: int = Depends(current_admin_id),
):
    return registry.close(election_id)


@router.post("/{election_id}/candidates", response_model=Candidate, status_code=201)
def add_candidate(
    election_id: int,
    candidate: CandidateCreate,
    registry: ElectionRegistry = Depends(get_registry),
    admin_id: int = Depends(current_admin_id),
):
    return registry.add_candidate(election_id, candidate.position_idx, candidate.name, candidate.party)


@router.get("/{election_id}/candidates", response_model=List[Candidate])
def list_candidates(election_id: int, registry: ElectionRegistry = Depends(get_registry)):
    return registry.list_candidates(election_id)


@router.get("/{election_id}/results", response_model=ElectionTally)
def get_results(
    election_id: int,
    engine: TallyEngine = Depends(get_tally_engine),
    admin_id: int = Depends(current_admin_id),
):
    return engine.tally(election_id)
