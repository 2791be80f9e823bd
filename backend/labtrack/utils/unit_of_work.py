from __future__ import annotations
"""Commit boundary for write operations.

A mutation and the asset status correction it implies are staged in one
session and committed together; on failure both are rolled back.
"""
import logging
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from labtrack.errors import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(session, label: str = 'unit of work'):
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error('%s failed to commit: %s', label, e)
        raise StorageError(description=f'{label} could not be saved; nothing was changed') from e
    except Exception:
        session.rollback()
        raise
