from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkhub.core.errors import Conflict, NotFound, ValidationFailed
from linkhub.core.validation import (
    normalize_username,
    sanitize_string,
    validate_profile_data,
    validate_social_link_data,
)
from linkhub.db.models import Link, Profile, SocialLink
from linkhub.db.session import store_errors

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("username", "display_name", "bio", "avatar_url", "theme")


@dataclass(frozen=True)
class PublicPage:
    profile: Profile
    links: list[Link]
    social_links: list[SocialLink]


def get_public_page(db: Session, username: str) -> PublicPage:
    """Profile plus its active links in display order."""
    with store_errors(db):
        profile = db.scalar(select(Profile).where(Profile.username == normalize_username(username)))
        if profile is None:
            raise NotFound("Profile not found")

        links = list(
            db.scalars(
                select(Link)
                .where(Link.user_id == profile.user_id, Link.is_active.is_(True))
                .order_by(Link.position.asc())
            )
        )
        social = list(
            db.scalars(
                select(SocialLink)
                .where(SocialLink.user_id == profile.user_id)
                .order_by(SocialLink.created_at.asc())
            )
        )
    return PublicPage(profile=profile, links=links, social_links=social)


def get_profile(db: Session, owner_id: str) -> Profile:
    with store_errors(db):
        profile = db.scalar(select(Profile).where(Profile.user_id == owner_id))
    if profile is None:
        raise NotFound("Profile not found")
    return profile


def update_profile(db: Session, owner_id: str, data: Mapping[str, Any]) -> Profile:
    supplied = {k: data[k] for k in PROFILE_FIELDS if k in data}
    if "username" in supplied:
        supplied["username"] = normalize_username(supplied["username"])

    errors = validate_profile_data(supplied)
    if errors:
        raise ValidationFailed(errors)

    profile = get_profile(db, owner_id)

    changes: dict[str, Any] = {}
    if "username" in supplied and supplied["username"] != profile.username:
        with store_errors(db):
            taken = db.scalar(select(Profile.id).where(Profile.username == supplied["username"]))
        if taken is not None:
            raise Conflict("Username already taken")
        changes["username"] = supplied["username"]
    for field in ("display_name", "bio"):
        if field in supplied:
            value = supplied[field]
            changes[field] = (sanitize_string(value) or None) if value else None
    if "avatar_url" in supplied:
        changes["avatar_url"] = supplied["avatar_url"].strip() if supplied["avatar_url"] else None
    if "theme" in supplied:
        changes["theme"] = supplied["theme"]

    if not changes:
        return profile

    with store_errors(db):
        for field, value in changes.items():
            setattr(profile, field, value)
        db.commit()
        db.refresh(profile)

    logger.info("Updated profile fields %s", sorted(changes), extra={"user_id": owner_id})
    return profile


def list_social_links(db: Session, owner_id: str) -> list[SocialLink]:
    with store_errors(db):
        return list(
            db.scalars(
                select(SocialLink)
                .where(SocialLink.user_id == owner_id)
                .order_by(SocialLink.created_at.asc())
            )
        )


def add_social_link(db: Session, owner_id: str, data: Mapping[str, Any]) -> SocialLink:
    errors = validate_social_link_data(data)
    if errors:
        raise ValidationFailed(errors)

    social = SocialLink(
        user_id=owner_id,
        platform=sanitize_string(data["platform"]),
        url=data["url"].strip(),
    )
    with store_errors(db):
        db.add(social)
        db.commit()
        db.refresh(social)
    return social


def delete_social_link(db: Session, owner_id: str, social_link_id: str) -> None:
    with store_errors(db):
        social = db.get(SocialLink, social_link_id)
    if social is None or social.user_id != owner_id:
        raise NotFound("Social link not found")

    with store_errors(db):
        db.delete(social)
        db.commit()
