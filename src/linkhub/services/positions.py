from __future__ import annotations
import logging
from typing import Any, Mapping, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkhub.core import link_rules
from linkhub.db.models import LINK_POSITION_CONSTRAINT, Link, Profile

logger = logging.getLogger(__name__)

# SQLite reports the columns, Postgres the constraint name
_CONFLICT_MARKERS = (LINK_POSITION_CONSTRAINT, "links.user_id, links.position")


def current_max_position(db: Session, owner_id: str) -> Optional[int]:
    """
    Highest position ever handed out to the owner: the larger of the live
    links' max and the profile's high-water mark, so deleted tail positions
    are never handed out again.
    """
    live_max = db.scalar(select(func.max(Link.position)).where(Link.user_id == owner_id))
    high_water = db.scalar(select(Profile.last_link_position).where(Profile.user_id == owner_id))
    candidates = [p for p in (live_max, high_water) if p]
    return max(candidates) if candidates else None


def next_position(db: Session, owner_id: str) -> int:
    return link_rules.next_position(current_max_position(db, owner_id))


def advance_high_water(db: Session, owner_id: str, position: int) -> None:
    """Raise the owner's mark to position; never lowers it. Joins the caller's transaction."""
    db.execute(
        update(Profile)
        .where(Profile.user_id == owner_id, Profile.last_link_position < position)
        .values(last_link_position=position)
        .execution_options(synchronize_session=False)
    )


def is_position_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return any(marker in message for marker in _CONFLICT_MARKERS)


def insert_with_position(
    db: Session,
    owner_id: str,
    values: Mapping[str, Any],
    attempts: int = 2,
) -> Link:
    """
    Insert a link at the end of the owner's ordering.

    Compare-and-swap: read the max, insert against the unique
    (user_id, position) constraint, and on a conflict with that constraint
    re-read and try again. Two concurrent creates can read the same max;
    the loser retries once. Anything else, or a second conflict, propagates.
    The owner's high-water mark moves in the same transaction as the insert.
    """
    for attempt in range(1, attempts + 1):
        position = next_position(db, owner_id)
        advance_high_water(db, owner_id, position)
        link = Link(user_id=owner_id, position=position, **values)
        db.add(link)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if attempt >= attempts or not is_position_conflict(exc):
                raise
            logger.warning(
                "Position %d already taken, retrying",
                position,
                extra={"user_id": owner_id, "attempt": attempt},
            )
            continue

        db.refresh(link)
        return link

    raise RuntimeError("attempts must be at least 1")
