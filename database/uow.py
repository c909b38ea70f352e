import contextlib
import logging

from database.database import SessionLocal
from database.repository import SwapRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def swap_uow(session_factory=None):
    """Per-unit-of-work transaction scope.

    Yields a SwapRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with swap_uow() as repo:
            listing = repo.listings.get_by_id(listing_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = (session_factory or SessionLocal)()
    try:
        repo = SwapRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
