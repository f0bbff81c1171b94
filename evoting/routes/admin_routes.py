from fastapi import APIRouter, Depends, Form

from evoting import crud
from evoting.database.connection import Store
from evoting.dependencies import get_store
from evoting.schemas import AdminCreate, AdminOut, Token
from evoting.security import ADMIN_ROLE, create_access_token

admin_router = APIRouter(prefix="/admin", tags=["Admin"])


@admin_router.post("/init", response_model=AdminOut, status_code=201)
def init_admin(admin: AdminCreate, store: Store = Depends(get_store)):
    return crud.init_admin(store, admin)


@admin_router.post("/login", response_model=Token)
def admin_login(
    username: str = Form(...),
    password: str = Form(...),
    store: Store = Depends(get_store),
):
    admin = crud.login_admin(store, username, password)
    token = create_access_token({"sub": str(admin.id), "role": ADMIN_ROLE})
    return Token(access_token=token)
