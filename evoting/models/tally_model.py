from typing import List

from pydantic import BaseModel

from evoting.models.election_model import ElectionStatus


class CandidateTally(BaseModel):
    candidate_id: int
    name: str
    party: str
    count: int


class PositionTally(BaseModel):
    index: int
    title: str
    results: List[CandidateTally]


class ElectionTally(BaseModel):
    election_id: int
    name: str
    status: ElectionStatus
    total_votes: int
    positions: List[PositionTally]
