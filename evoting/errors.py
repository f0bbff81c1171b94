# evoting/errors.py
from contextlib import contextmanager
import logging

from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class EvotingError(Exception):
    """Base class for every outcome the core reports to its callers."""

    code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(EvotingError):
    code = "validation_error"


class NotFound(EvotingError):
    code = "not_found"


class InvalidTransition(EvotingError):
    code = "invalid_transition"


class ElectionNotOpen(EvotingError):
    code = "election_not_open"


class CandidateMismatch(EvotingError):
    code = "candidate_mismatch"


class AlreadyVoted(EvotingError):
    code = "already_voted"


class StorageFailure(EvotingError):
    """The store could not complete the operation. Safe to retry."""

    code = "storage_failure"


class AuthenticationFailed(EvotingError):
    code = "authentication_failed"


@contextmanager
def storage_errors(action: str):
    """Re-raise any pymongo error raised inside the block as StorageFailure."""
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Storage failure while trying to {action}: {e}")
        raise StorageFailure(f"Could not {action}.") from e
