"""
Field validation and sanitizing for links, profiles and accounts.

Validation is presence-driven: only keys present in the mapping are checked,
so the same functions serve full creates and partial updates. Every check of
a pass runs; callers get the complete list of FieldErrors, never just the
first one.
"""
from __future__ import annotations
from dataclasses import dataclass
import re
from typing import Any, Mapping

from pydantic import HttpUrl, TypeAdapter, ValidationError

TITLE_MAX = 100
DESCRIPTION_MAX = 500
DISPLAY_NAME_MAX = 50
BIO_MAX = 500
PLATFORM_MAX = 50
ICON_MAX = 50
PASSWORD_MIN = 6
THEMES = ("light", "dark")

_USERNAME_RE = re.compile(r"[a-z0-9_-]{3,30}")
_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_HTTP_URL = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def is_valid_url(url: Any) -> bool:
    """Absolute URL with scheme exactly http or https."""
    if not isinstance(url, str):
        return False
    try:
        parsed = _HTTP_URL.validate_python(url)
    except ValidationError:
        return False
    return parsed.scheme in ("http", "https")


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and _EMAIL_RE.fullmatch(email) is not None


def is_valid_username(username: Any) -> bool:
    # case-sensitive: callers normalize before validating
    return isinstance(username, str) and _USERNAME_RE.fullmatch(username) is not None


def normalize_username(raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    return raw.strip().lower()


def sanitize_string(value: str) -> str:
    """
    Trim, then drop every literal '<' and '>'.

    This only stops tag injection. It does not neutralize attribute-based or
    entity/percent-encoded payloads, so output still has to be escaped when
    rendered.
    """
    return value.strip().replace("<", "").replace(">", "")


def _is_blank(value: Any) -> bool:
    return not value or not isinstance(value, str) or not value.strip()


def _blank_after_sanitize(value: Any) -> bool:
    # "<>" is non-blank as typed but empty once sanitized
    return _is_blank(value) or not sanitize_string(value)


def _too_long(value: Any, limit: int) -> bool:
    return isinstance(value, str) and len(value) > limit


def validate_link_data(data: Mapping[str, Any]) -> list[FieldError]:
    errors: list[FieldError] = []

    if "title" in data:
        title = data["title"]
        if _blank_after_sanitize(title):
            errors.append(FieldError("title", "Title is required"))
        elif len(title) > TITLE_MAX:
            errors.append(FieldError("title", f"Title must be {TITLE_MAX} characters or less"))

    if "url" in data:
        url = data["url"]
        if _is_blank(url):
            errors.append(FieldError("url", "URL is required"))
        elif not is_valid_url(url):
            errors.append(FieldError("url", "Invalid URL format"))

    # absent or empty description bypasses the length check
    description = data.get("description")
    if description:
        if not isinstance(description, str):
            errors.append(FieldError("description", "Description must be text"))
        elif len(description) > DESCRIPTION_MAX:
            errors.append(
                FieldError("description", f"Description must be {DESCRIPTION_MAX} characters or less")
            )

    icon = data.get("icon")
    if icon:
        if not isinstance(icon, str):
            errors.append(FieldError("icon", "Icon must be text"))
        elif len(icon) > ICON_MAX:
            errors.append(FieldError("icon", f"Icon must be {ICON_MAX} characters or less"))

    return errors


def validate_profile_data(data: Mapping[str, Any]) -> list[FieldError]:
    errors: list[FieldError] = []

    if "username" in data:
        username = data["username"]
        if _is_blank(username):
            errors.append(FieldError("username", "Username is required"))
        elif not is_valid_username(username):
            errors.append(
                FieldError(
                    "username",
                    "Username must be 3-30 characters and contain only lowercase letters, "
                    "numbers, hyphens, and underscores",
                )
            )

    if data.get("display_name") and _too_long(data["display_name"], DISPLAY_NAME_MAX):
        errors.append(
            FieldError("display_name", f"Display name must be {DISPLAY_NAME_MAX} characters or less")
        )

    if data.get("bio") and _too_long(data["bio"], BIO_MAX):
        errors.append(FieldError("bio", f"Bio must be {BIO_MAX} characters or less"))

    if data.get("avatar_url") and not is_valid_url(data["avatar_url"]):
        errors.append(FieldError("avatar_url", "Invalid avatar URL"))

    if "theme" in data and data["theme"] not in THEMES:
        errors.append(FieldError("theme", "Theme must be one of: " + ", ".join(THEMES)))

    return errors


def validate_social_link_data(data: Mapping[str, Any]) -> list[FieldError]:
    errors: list[FieldError] = []

    platform = data.get("platform")
    if _blank_after_sanitize(platform):
        errors.append(FieldError("platform", "Platform is required"))
    elif len(platform) > PLATFORM_MAX:
        errors.append(FieldError("platform", f"Platform must be {PLATFORM_MAX} characters or less"))

    url = data.get("url")
    if _is_blank(url):
        errors.append(FieldError("url", "URL is required"))
    elif not is_valid_url(url):
        errors.append(FieldError("url", "Invalid URL format"))

    return errors


def validate_registration_data(data: Mapping[str, Any]) -> list[FieldError]:
    """Expects an already-normalized username."""
    errors: list[FieldError] = []

    if not is_valid_email(data.get("email")):
        errors.append(FieldError("email", "Invalid email address"))

    password = data.get("password")
    if not isinstance(password, str) or len(password) < PASSWORD_MIN:
        errors.append(FieldError("password", f"Password must be at least {PASSWORD_MIN} characters"))

    errors.extend(
        validate_profile_data(
            {"username": data.get("username"), "display_name": data.get("display_name")}
        )
    )
    return errors
