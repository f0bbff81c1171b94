from datetime import date

from pydantic import BaseModel, Field


class VoterCreate(BaseModel):
    fullname: str = Field(..., min_length=1)
    dob: date
    pin: str = Field(..., min_length=4)


class Voter(BaseModel):
    id: int
    fullname: str
    dob: date
