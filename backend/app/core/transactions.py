import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import settings
from ..models.group import Group

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrentModificationError(Exception):
    """Another transaction changed the data this one read."""


def bump_membership_version(session: Session, group_id, expected_version: int) -> int:
    """
    Compare-and-set the group's membership version.

    Raises ConcurrentModificationError when another writer got there first.
    """
    result = session.exec(
        update(Group)
        .where(Group.id == group_id, Group.membership_version == expected_version)
        .values(membership_version=expected_version + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConcurrentModificationError(
            f"Group {group_id} membership changed (expected version {expected_version})"
        )
    return expected_version + 1


def _log_retry(retry_state) -> None:
    logger.warning(
        f"Transaction conflict on attempt {retry_state.attempt_number}, retrying: "
        f"{retry_state.outcome.exception()}"
    )


def run_in_transaction(
    engine: Engine,
    unit_of_work: Callable[[Session], T],
    max_attempts: Optional[int] = None,
) -> T:
    """
    Run ``unit_of_work`` in its own session and commit it, retrying on conflict.

    Every attempt gets a fresh session, so preconditions are always re-read
    from the database. Any other exception aborts immediately and nothing
    from the failed attempt is committed.
    """
    attempts = max_attempts or settings.JOIN_MAX_ATTEMPTS

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(
            multiplier=settings.JOIN_RETRY_MIN_WAIT,
            min=settings.JOIN_RETRY_MIN_WAIT,
            max=settings.JOIN_RETRY_MAX_WAIT,
        ),
        retry=retry_if_exception_type(ConcurrentModificationError),
        before_sleep=_log_retry,
        reraise=True,
    )

    for attempt in retrying:
        with attempt:
            with Session(engine) as session:
                try:
                    result = unit_of_work(session)
                    session.commit()
                except (IntegrityError, StaleDataError) as e:
                    session.rollback()
                    raise ConcurrentModificationError(str(e)) from e
                except Exception:
                    session.rollback()
                    raise
            return result
