from datetime import datetime

from pydantic import BaseModel


class VoteCast(BaseModel):
    election_id: int
    position_idx: int
    candidate_id: int


class Vote(BaseModel):
    id: str
    election_id: int
    voter_id: int
    position_idx: int
    candidate_id: int
    cast_at: datetime
