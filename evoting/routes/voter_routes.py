from typing import List

from fastapi import APIRouter, Depends, Form, HTTPException

from evoting import crud
from evoting.database.connection import Store
from evoting.dependencies import get_store
from evoting.models.voter_model import Voter, VoterCreate
from evoting.schemas import Token
from evoting.security import VOTER_ROLE, create_access_token, current_admin_id

voter_router = APIRouter(prefix="/voters", tags=["Voter"])


@voter_router.post("/register", response_model=Voter, status_code=201)
def register_voter(
    voter: VoterCreate,
    store: Store = Depends(get_store),
    admin_id: int = Depends(current_admin_id),
):
    return crud.register_voter(store, voter)


@voter_router.get("", response_model=List[Voter])
def list_voters(
    store: Store = Depends(get_store),
    admin_id: int = Depends(current_admin_id),
):
    return crud.list_voters(store)


@voter_router.get("/{voter_id}", response_model=Voter)
def get_voter(
    voter_id: int,
    store: Store = Depends(get_store),
    admin_id: int = Depends(current_admin_id),
):
    return crud.get_voter(store, voter_id)


@voter_router.post("/login", response_model=Token)
def voter_login(
    fullname: str = Form(...),
    pin: str = Form(...),
    store: Store = Depends(get_store),
):
    voter = crud.authenticate_voter(store, fullname, pin)
    if voter is None:
        raise HTTPException(status_code=401, detail="Invalid name or PIN.")
    token = create_access_token({"sub": str(voter.id), "role": VOTER_ROLE})
    return Token(access_token=token)
