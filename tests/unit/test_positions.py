import pytest
from sqlalchemy.exc import IntegrityError

from linkhub.services import positions
from linkhub.services.positions import current_max_position, insert_with_position, next_position


def _values(title: str = "t") -> dict:
    return {"title": title, "url": "https://example.com"}


def test_next_position_for_owner_without_links(db, user_a):
    user, _ = user_a
    assert current_max_position(db, user.id) is None
    assert next_position(db, user.id) == 1


def test_positions_are_per_owner(db, user_a, user_b):
    a, _ = user_a
    b, _ = user_b
    insert_with_position(db, a.id, _values())
    insert_with_position(db, a.id, _values())

    assert next_position(db, a.id) == 3
    assert next_position(db, b.id) == 1


def test_insert_retries_once_after_position_conflict(db, user_a, monkeypatch):
    user, _ = user_a
    insert_with_position(db, user.id, _values("first"))

    real = positions.current_max_position
    calls = []

    def stale_then_real(session, owner_id):
        calls.append(owner_id)
        # first read is stale, as if a concurrent create slipped in
        return None if len(calls) == 1 else real(session, owner_id)

    monkeypatch.setattr(positions, "current_max_position", stale_then_real)

    link = insert_with_position(db, user.id, _values("second"))

    assert len(calls) == 2
    assert link.position == 2
    assert link.title == "second"


def test_insert_gives_up_after_second_conflict(db, user_a, monkeypatch):
    user, _ = user_a
    insert_with_position(db, user.id, _values())
    monkeypatch.setattr(positions, "current_max_position", lambda session, owner_id: None)

    with pytest.raises(IntegrityError):
        insert_with_position(db, user.id, _values())

    # the failed attempts left nothing behind
    assert real_count(db, user.id) == 1


def real_count(db, owner_id: str) -> int:
    from sqlalchemy import func, select
    from linkhub.db.models import Link

    return db.scalar(select(func.count()).select_from(Link).where(Link.user_id == owner_id))


def test_high_water_mark_survives_deleting_the_tail(db, user_a):
    from linkhub.db.models import Link

    user, _ = user_a
    insert_with_position(db, user.id, _values("a"))
    tail = insert_with_position(db, user.id, _values("b"))

    db.delete(db.get(Link, tail.id))
    db.commit()

    assert current_max_position(db, user.id) == 2
    assert next_position(db, user.id) == 3


def test_advance_high_water_never_lowers_the_mark(db, user_a):
    user, _ = user_a
    positions.advance_high_water(db, user.id, 7)
    positions.advance_high_water(db, user.id, 3)
    db.commit()

    assert current_max_position(db, user.id) == 7
