from __future__ import annotations
import logging
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkhub.core.errors import ValidationFailed
from linkhub.core.link_rules import ensure_owned
from linkhub.core.validation import FieldError, sanitize_string, validate_link_data
from linkhub.db.models import Link
from linkhub.db.session import store_errors
from linkhub.services.positions import advance_high_water, current_max_position, insert_with_position

logger = logging.getLogger(__name__)

EDITABLE_TEXT_FIELDS = ("title", "url", "description", "icon")


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return sanitize_string(value) or None


class LinkMutationService:
    """
    Validated, owner-fenced mutations on a user's links.

    Every operation validates and confirms ownership before it writes,
    so a rejected request never leaves a partial write behind.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_owned(self, owner_id: str, link_id: str) -> Link:
        with store_errors(self.db):
            link = self.db.get(Link, link_id)
        return ensure_owned(link, owner_id)

    def list_links(self, owner_id: str) -> list[Link]:
        with store_errors(self.db):
            return list(
                self.db.scalars(
                    select(Link).where(Link.user_id == owner_id).order_by(Link.position.asc())
                )
            )

    def create(self, owner_id: str, data: Mapping[str, Any]) -> Link:
        # title and url are required on create, so they are always checked
        candidate = {"title": data.get("title"), "url": data.get("url")}
        for optional in ("description", "icon"):
            if optional in data:
                candidate[optional] = data[optional]

        errors = validate_link_data(candidate)
        if errors:
            raise ValidationFailed(errors)

        values = {
            "title": sanitize_string(candidate["title"]),
            "url": candidate["url"].strip(),
            "description": _clean_optional(candidate.get("description")),
            "icon": _clean_optional(candidate.get("icon")),
        }

        with store_errors(self.db):
            link = insert_with_position(self.db, owner_id, values)

        logger.info(
            "Created link at position %d", link.position,
            extra={"user_id": owner_id, "link_id": link.id},
        )
        return link

    def update(self, owner_id: str, link_id: str, data: Mapping[str, Any]) -> Link:
        """Write only the supplied fields; position is never touched here."""
        supplied = {k: data[k] for k in EDITABLE_TEXT_FIELDS if k in data}
        errors = validate_link_data(supplied)
        if errors:
            raise ValidationFailed(errors)

        link = self._get_owned(owner_id, link_id)

        changes: dict[str, Any] = {}
        if "title" in supplied:
            changes["title"] = sanitize_string(supplied["title"])
        if "url" in supplied:
            changes["url"] = supplied["url"].strip()
        if "description" in supplied:
            changes["description"] = _clean_optional(supplied["description"])
        if "icon" in supplied:
            changes["icon"] = _clean_optional(supplied["icon"])
        if data.get("is_active") is not None:
            changes["is_active"] = bool(data["is_active"])

        if not changes:
            return link

        with store_errors(self.db):
            for field, value in changes.items():
                setattr(link, field, value)
            self.db.commit()
            self.db.refresh(link)

        logger.info(
            "Updated link fields %s", sorted(changes),
            extra={"user_id": owner_id, "link_id": link_id},
        )
        return link

    def toggle_active(self, owner_id: str, link_id: str) -> Link:
        link = self._get_owned(owner_id, link_id)
        return self.update(owner_id, link_id, {"is_active": not link.is_active})

    def delete(self, owner_id: str, link_id: str) -> None:
        # siblings keep their positions; gaps are fine
        link = self._get_owned(owner_id, link_id)
        with store_errors(self.db):
            self.db.delete(link)
            self.db.commit()
        logger.info("Deleted link", extra={"user_id": owner_id, "link_id": link_id})

    def reorder(self, owner_id: str, link_ids: Sequence[str]) -> list[Link]:
        """
        Rewrite positions so links display in the given order.

        link_ids must name each of the owner's links exactly once. New
        positions start above the current max, so no value is reused and
        the (user_id, position) constraint holds at every step.
        """
        links = {link.id: link for link in self.list_links(owner_id)}
        ids = list(link_ids)

        if len(set(ids)) != len(ids) or set(ids) != set(links):
            raise ValidationFailed(
                [FieldError("link_ids", "Must list each of your links exactly once")]
            )
        if not ids:
            return []

        with store_errors(self.db):
            start = (current_max_position(self.db, owner_id) or 0) + 1
            for offset, link_id in enumerate(ids):
                links[link_id].position = start + offset
            advance_high_water(self.db, owner_id, start + len(ids) - 1)
            self.db.commit()

        logger.info("Reordered %d links", len(ids), extra={"user_id": owner_id})
        return [links[link_id] for link_id in ids]
