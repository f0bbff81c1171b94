from datetime import datetime

from pydantic import BaseModel, Field


class AdminCreate(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class AdminOut(BaseModel):
    id: int
    username: str
    created_at: datetime


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class VoteReceipt(BaseModel):
    message: str
    election_id: int
    position_idx: int
    candidate_id: int


class VoteStatus(BaseModel):
    election_id: int
    status: str
