from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.errors import PersistenceError


@contextmanager
def atomic(db: Session, action: str):
    """Commit everything done in the block, or roll all of it back"""
    try:
        yield
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"{action} failed, rolled back")
        raise PersistenceError(f"Could not {action}: {e}") from e
    except Exception:
        db.rollback()
        raise
