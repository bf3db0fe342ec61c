import pytest

from linkhub.core.errors import NotFound
from linkhub.core.link_rules import ensure_owned, is_owned_by, is_publicly_visible, next_position
from linkhub.db.models import Link


def _link(owner: str = "owner-1", active: bool = True) -> Link:
    return Link(id="link-1", user_id=owner, title="t", url="https://a.com", position=1, is_active=active)


def test_next_position_starts_at_one():
    assert next_position(None) == 1


def test_next_position_is_max_plus_one():
    assert next_position(1) == 2
    assert next_position(41) == 42


def test_is_owned_by():
    link = _link("owner-1")
    assert is_owned_by(link, "owner-1") is True
    assert is_owned_by(link, "owner-2") is False
    assert is_owned_by(None, "owner-1") is False


def test_ensure_owned_returns_link_for_owner():
    link = _link("owner-1")
    assert ensure_owned(link, "owner-1") is link


@pytest.mark.parametrize("link", [None, _link("someone-else")])
def test_ensure_owned_hides_absent_and_foreign_links(link):
    with pytest.raises(NotFound) as exc_info:
        ensure_owned(link, "owner-1")
    assert exc_info.value.message == "Link not found"


def test_is_publicly_visible_only_for_active_links():
    assert is_publicly_visible(_link(active=True)) is True
    assert is_publicly_visible(_link(active=False)) is False
