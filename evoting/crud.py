# evoting/crud.py
# Administrator accounts and the voter roll
import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from evoting.database.connection import Store
from evoting.errors import (
    AuthenticationFailed,
    InvalidTransition,
    NotFound,
    ValidationError,
    storage_errors,
)
from evoting.models.voter_model import Voter, VoterCreate
from evoting.schemas import AdminCreate, AdminOut
from evoting.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def _to_voter(doc: dict) -> Voter:
    return Voter(id=doc["_id"], fullname=doc["fullname"], dob=date.fromisoformat(doc["dob"]))


def _to_admin(doc: dict) -> AdminOut:
    return AdminOut(id=doc["_id"], **doc)


# The first admin always takes this id, so the insert itself decides which of
# several concurrent bootstrap calls wins.
BOOTSTRAP_ADMIN_ID = 1


# --- Admin accounts ---

# Create the first admin; refused once any admin exists
def init_admin(store: Store, data: AdminCreate) -> AdminOut:
    with storage_errors("check existing admins"):
        exists = store.admins.find_one({}, {"_id": 1}) is not None
    if exists:
        raise InvalidTransition("An admin already exists. Only one admin can be initialized this way.")

    admin = {
        "_id": BOOTSTRAP_ADMIN_ID,
        "username": data.username.strip(),
        "password_hash": hash_password(data.password),
        "created_at": datetime.now(timezone.utc),
    }
    with storage_errors("create the admin"):
        try:
            store.admins.insert_one(admin)
        except DuplicateKeyError:
            logger.warning(f"Admin bootstrap for '{admin['username']}' lost to a concurrent init")
            raise InvalidTransition("An admin already exists. Only one admin can be initialized this way.")
    logger.info(f"Admin '{admin['username']}' created")
    return _to_admin(admin)


# Login admin
def login_admin(store: Store, username: str, password: str) -> AdminOut:
    with storage_errors("look up the admin"):
        admin = store.admins.find_one({"username": username})
    if not admin or not verify_password(password, admin["password_hash"]):
        logger.warning(f"Failed admin login for '{username}'")
        raise AuthenticationFailed("Invalid username or password.")
    return _to_admin(admin)


# --- Voter roll ---

def register_voter(store: Store, data: VoterCreate) -> Voter:
    fullname = data.fullname.strip()
    if not fullname:
        raise ValidationError("Voter name must not be empty.")
    voter = {
        "_id": store.next_id("voters"),
        "fullname": fullname,
        "dob": data.dob.isoformat(),
        "pin_hash": hash_password(data.pin),
    }
    with storage_errors("register the voter"):
        store.voters.insert_one(voter)
    logger.info(f"Voter {voter['_id']} registered")
    return _to_voter(voter)


def get_voter(store: Store, voter_id: int) -> Voter:
    with storage_errors("read the voter"):
        doc = store.voters.find_one({"_id": voter_id})
    if doc is None:
        raise NotFound(f"Voter {voter_id} not found.")
    return _to_voter(doc)


def list_voters(store: Store) -> List[Voter]:
    with storage_errors("list voters"):
        docs = list(store.voters.find().sort("_id", ASCENDING))
    return [_to_voter(doc) for doc in docs]


def authenticate_voter(store: Store, fullname: str, pin: str) -> Optional[Voter]:
    """Return the voter whose name and PIN match, oldest registration first.

    Names are not unique, so every voter sharing the name is tried in id
    order; the PIN decides which one is logging in.
    """
    with storage_errors("look up the voter"):
        docs = list(store.voters.find({"fullname": fullname.strip()}).sort("_id", ASCENDING))
    for doc in docs:
        if verify_password(pin, doc["pin_hash"]):
            return _to_voter(doc)
    logger.warning("Failed voter login")
    return None
