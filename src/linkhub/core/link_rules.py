from __future__ import annotations
from typing import Optional

from linkhub.core.errors import NotFound
from linkhub.db.models import Link


def is_owned_by(link: Optional[Link], owner_id: str) -> bool:
    return link is not None and link.user_id == owner_id


def ensure_owned(link: Optional[Link], owner_id: str) -> Link:
    # absent and foreign links look the same to the caller
    if not is_owned_by(link, owner_id):
        raise NotFound("Link not found")
    return link


def next_position(current_max: Optional[int]) -> int:
    # None means the owner has no links yet
    if current_max is None:
        return 1
    return current_max + 1


def is_publicly_visible(link: Link) -> bool:
    return bool(link.is_active)
