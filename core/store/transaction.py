"""Transaction primitive with timeout and bounded retries.

``run_in_transaction`` runs a closure inside ``transaction.atomic``. Reads
inside the closure see its own writes and the first exception rolls the
whole unit back. Transient driver failures retry the whole closure; unique
key violations surface as ``ConflictError``.
"""

import time
from collections.abc import Callable
from typing import TypeVar

from django.conf import settings
from django.db import IntegrityError, OperationalError, connection, transaction

import structlog

from core.exceptions import ConflictError, TransactionAbortedError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRY_PAUSE_SECONDS = 0.05


def run_in_transaction(
    fn: Callable[[], T],
    timeout: float | None = None,
    max_retries: int | None = None,
) -> T:
    """Run ``fn`` atomically.

    Args:
        fn: Closure performing the reads and writes of the unit of work.
        timeout: Statement timeout in seconds (PostgreSQL only).
        max_retries: Extra attempts after a transient failure.

    Returns:
        Whatever ``fn`` returns.

    Raises:
        ConflictError: A unique key was violated.
        TransactionAbortedError: Transient failures outlasted the retries.
    """
    if timeout is None:
        timeout = settings.DB_TRANSACTION_TIMEOUT_SECONDS
    if max_retries is None:
        max_retries = settings.DB_TRANSACTION_MAX_RETRIES

    # Nested calls join the outer transaction and leave retrying to it
    if connection.in_atomic_block:
        with transaction.atomic():
            return _call(fn)

    attempt = 0
    while True:
        attempt += 1
        try:
            with transaction.atomic():
                _apply_timeout(timeout)
                return _call(fn)
        except OperationalError as e:
            if attempt > max_retries:
                logger.error(
                    "transaction_aborted",
                    attempts=attempt,
                    error=str(e),
                )
                raise TransactionAbortedError() from e
            logger.warning(
                "transaction_retry",
                attempt=attempt,
                error=str(e),
            )
            time.sleep(RETRY_PAUSE_SECONDS * attempt)


def _call(fn: Callable[[], T]) -> T:
    try:
        return fn()
    except IntegrityError as e:
        raise ConflictError("Unique constraint violated", detail=str(e)) from e


def _apply_timeout(timeout: float) -> None:
    if connection.vendor != "postgresql":
        return
    with connection.cursor() as cursor:
        cursor.execute("SET LOCAL statement_timeout = %s", [int(timeout * 1000)])
