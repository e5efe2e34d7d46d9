"""Commit-or-rollback runner with a bounded retry for stock mutations."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from stock_ledger.exceptions import BusinessLogicException, StorageUnavailableException

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_transaction(
    db: Session,
    operation: Callable[[], T],
    *,
    description: str,
    max_attempts: int,
    backoff_seconds: float,
    on_retry: Callable[[BusinessLogicException], None] | None = None,
) -> T:
    """Run ``operation`` and commit, retrying retryable failures from scratch.

    Every attempt either commits in full or is rolled back in full. The
    operation must re-read everything it depends on, since a rollback
    expires all loaded state. Non-retryable errors are raised after the
    rollback of the first attempt that hits them.
    """
    attempt = 1
    while True:
        try:
            result = operation()
            db.commit()
            return result
        except BusinessLogicException as e:
            db.rollback()
            error = e
        except (OperationalError, DBAPIError) as e:
            db.rollback()
            if isinstance(e, OperationalError) or e.connection_invalidated:
                error = StorageUnavailableException(str(e.orig) if e.orig is not None else str(e))
                error.__cause__ = e
            else:
                raise
        except Exception:
            db.rollback()
            raise

        if not error.retryable:
            raise error
        if attempt >= max_attempts:
            logger.error(f"{description} failed after {attempt} attempts: {error.message}")
            raise error

        if on_retry is not None:
            on_retry(error)
        logger.warning(f"{description} attempt {attempt} failed, retrying: {error.message}")
        time.sleep(backoff_seconds * 2 ** (attempt - 1))
        attempt += 1
