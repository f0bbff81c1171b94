# evoting/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from evoting import config
from evoting.database.connection import Store, connect
from evoting.errors import (
    AlreadyVoted,
    AuthenticationFailed,
    CandidateMismatch,
    ElectionNotOpen,
    EvotingError,
    InvalidTransition,
    NotFound,
    StorageFailure,
    ValidationError,
)
from evoting.routes.admin_routes import admin_router
from evoting.routes.election_routes import router as election_router
from evoting.routes.vote_routes import vote_router
from evoting.routes.voter_routes import voter_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 422,
    NotFound: 404,
    InvalidTransition: 409,
    ElectionNotOpen: 409,
    CandidateMismatch: 400,
    AlreadyVoted: 409,
    StorageFailure: 503,
    AuthenticationFailed: 401,
}


async def evoting_error_handler(request: Request, exc: EvotingError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 400)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": exc.code})


def create_app(store: Optional[Store] = None) -> FastAPI:
    """Build the API. Without a store, one is connected from config at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "store", None) is None
        if owned:
            app.state.store = connect()
        yield
        if owned:
            app.state.store.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(title="evoting - Election and Vote Ledger API", lifespan=lifespan)
    if store is not None:
        app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(EvotingError, evoting_error_handler)

    app.include_router(admin_router)
    app.include_router(election_router)
    app.include_router(voter_router)
    app.include_router(vote_router)

    @app.get("/health", tags=["Root"])
    def health_check(request: Request):
        request.app.state.store.ping()
        return {"status": "healthy", "database": "MongoDB"}

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": "Welcome to the evoting API"}

    return app


app = create_app()
