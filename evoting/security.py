# evoting/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from evoting.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_ROLE = "admin"
VOTER_ROLE = "voter"

admin_scheme = OAuth2PasswordBearer(tokenUrl="/admin/login", scheme_name="AdminToken")
voter_scheme = OAuth2PasswordBearer(tokenUrl="/voters/login", scheme_name="VoterToken")


# Hash a password or PIN
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Verify a plain password against a hash
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Create JWT access token
def create_access_token(data: dict, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str, role: str) -> Optional[int]:
    """Return the subject id of a valid token issued for ``role``, else None."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("role") != role:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def current_admin_id(token: str = Depends(admin_scheme)) -> int:
    admin_id = decode_access_token(token, ADMIN_ROLE)
    if admin_id is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired admin token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin_id


def current_voter_id(token: str = Depends(voter_scheme)) -> int:
    voter_id = decode_access_token(token, VOTER_ROLE)
    if voter_id is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired voter token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return voter_id
