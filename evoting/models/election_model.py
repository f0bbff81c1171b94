from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ElectionStatus(str, Enum):
    draft = "draft"
    open = "open"
    closed = "closed"


class Position(BaseModel):
    index: int
    title: str


class Election(BaseModel):
    id: int
    name: str
    status: ElectionStatus
    created_at: datetime
    positions: List[Position]


class ElectionCreate(BaseModel):
    name: str = Field(..., examples=["General Election 2026"])
    positions: List[str] = Field(..., examples=[["President", "Secretary"]])


class Candidate(BaseModel):
    id: int
    election_id: int
    position_idx: int
    name: str
    party: str


class CandidateCreate(BaseModel):
    position_idx: int = Field(..., ge=0)
    name: str = Field(..., examples=["Ada Lovelace"])
    party: str = Field("", examples=["Independent"])
