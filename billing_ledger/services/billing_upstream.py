# billing_ledger/services/billing_upstream.py
from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billing_ledger.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def upstream_guard(db: Session, what: str, *, write: bool = False):
    """
    Turns any SQLAlchemy/driver failure inside the block into UpstreamUnavailable.
    Writes roll the session back first so it stays usable.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("billing store failed: %s", what)
        if write:
            db.rollback()
        raise UpstreamUnavailable(f"Patient store unavailable ({what})") from e
