# app/utils/retry.py
import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from app.domain.errors import ConcurrencyConflict, TransientConflict
from app.utils.settings import TXN_MAX_ATTEMPTS, TXN_RETRY_MIN_WAIT, TXN_RETRY_MAX_WAIT
from app.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# postgres: serialization_failure, deadlock_detected, lock_not_available
_TRANSIENT_PGCODES = {"40001", "40P01", "55P03"}
_TRANSIENT_MESSAGES = ("database is locked", "could not serialize", "deadlock detected", "lock timeout")


def is_transient(exc: BaseException) -> bool:
    """Store-level errors that mean "another writer got there first" (or a lock wait timed out)."""
    if isinstance(exc, TransientConflict):
        return True
    if isinstance(exc, DBAPIError) and not isinstance(exc, IntegrityError):
        if getattr(exc.orig, "pgcode", None) in _TRANSIENT_PGCODES:
            return True
        text = str(exc.orig).lower()
        return any(m in text for m in _TRANSIENT_MESSAGES)
    return False


def txn_retry(attempts: int):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=TXN_RETRY_MIN_WAIT, min=TXN_RETRY_MIN_WAIT, max=TXN_RETRY_MAX_WAIT),
        retry=retry_if_exception_type(TransientConflict),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def run_in_transaction(
    session_factory: sessionmaker,
    work: Callable[[Session], T],
    attempts: int = TXN_MAX_ATTEMPTS,
) -> T:
    """
    Wykonuje `work(session)` w jednej transakcji.

    - commit gdy work zwroci wynik
    - rollback + ponowienie (ten sam input, nowa sesja) przy konflikcie zapisu
    - bledy walidacji/biznesowe wychodza od razu, bez ponawiania
    - po wyczerpaniu prob -> ConcurrencyConflict
    """

    @txn_retry(attempts)
    def _attempt() -> T:
        with session_factory() as session:
            try:
                with session.begin():
                    return work(session)
            except TransientConflict:
                raise
            except DBAPIError as e:
                if is_transient(e):
                    raise TransientConflict(str(e.orig)) from e
                raise

    try:
        return _attempt()
    except TransientConflict as e:
        logger.error(f"Transaction gave up after {attempts} attempts: {e}")
        raise ConcurrencyConflict(
            "Write conflict, retries exhausted; please retry the request",
            attempts=attempts,
        ) from e
