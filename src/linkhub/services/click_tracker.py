from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session

from linkhub.core.errors import NotFound
from linkhub.db.models import Link
from linkhub.db.session import store_errors


def track_click(db: Session, link_id: str) -> Link:
    """Increment click_count of an active link in a single UPDATE."""
    with store_errors(db):
        result = db.execute(
            update(Link)
            .where(Link.id == link_id, Link.is_active.is_(True))
            .values(click_count=Link.click_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()

    if result.rowcount == 0:
        # hidden links are not clickable from the public page
        raise NotFound("Link not found")

    with store_errors(db):
        link = db.get(Link, link_id, populate_existing=True)
    if link is None:
        raise NotFound("Link not found")
    return link
