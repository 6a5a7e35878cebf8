import logging
import time
from contextlib import contextmanager
from functools import partial
from typing import Generator

from sqlalchemy.exc import OperationalError
from sqlmodel import Session
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

import settings
from services.errors import FriendshipError, Unavailable
from utils import humanize_milliseconds

logger = logging.getLogger("habitpals.db")


@contextmanager
def unit_of_work(
    session: Session,
    operation: str,
    *,
    actor_id=None,
    target=None,
    read_only: bool = False,
) -> Generator[Session, None, None]:
    """Run one friendship operation as a single transaction.

    Everything written inside the block is committed together on success and
    rolled back on any exception. Store timeouts and lock errors are raised
    as `Unavailable`; friendship errors get the operation context attached.
    """
    start = time.perf_counter()
    try:
        yield session
        if read_only:
            session.rollback()
        else:
            session.commit()
    except FriendshipError as e:
        session.rollback()
        e.bind(operation, actor_id, target)
        logger.info(f"{operation} refused: {e.message} ({e.context()})")
        raise
    except OperationalError as e:
        session.rollback()
        logger.warning(
            f"{operation} unavailable: actor={actor_id} target={target} - {e}"
        )
        raise Unavailable().bind(operation, actor_id, target) from e
    except Exception as e:
        session.rollback()
        logger.error(
            f"{operation} rolled back: actor={actor_id} target={target} - {e!r}"
        )
        raise
    finally:
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"{operation} took {humanize_milliseconds(elapsed)}")


# Read-only listings are safe to run twice, mutations are never retried
listing_retry = partial(
    retry,
    retry=retry_if_exception_type(Unavailable),
    wait=wait_random(0, 0 if settings.TESTING_MODE else 0.2),
    stop=stop_after_attempt(2),
    reraise=True,
    before_sleep=before_sleep_log(logger, logging.INFO),
)
