# backend/core/database_utils.py

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[Session]:
    """
    Run a block of writes as one transaction.

    Commits when the block finishes. Any exception rolls the session back
    before it propagates, so no partial state is ever visible. Integrity
    errors are re-raised untouched so callers can translate them (order
    number collisions, table occupancy); other database errors become
    PersistenceError with the driver message kept in the log only.
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during {operation}: {e}")
        raise PersistenceError(f"Failed to {operation}") from e
    except BaseException:
        db.rollback()
        raise
