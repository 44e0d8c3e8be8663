"""Tests for murmur creation, the reply tree and soft deletion."""

from datetime import timedelta

import pytest

from murmur.core.errors import NotFoundError, ValidationError
from murmur.db.time import utcnow
from murmur.models import Like, Notification
from murmur.services import LikeService, MurmurService
from murmur.services.content import escape_like


def test_create_root_counts_toward_author(db_session, alice) -> None:
    murmur = MurmurService(db_session).create(alice.id, "  hello there  ")
    db_session.commit()

    assert murmur.content == "hello there"
    assert murmur.reply_to_id is None
    db_session.refresh(alice)
    assert alice.murmurs_count == 1


@pytest.mark.parametrize("content", ["", "   ", "x" * 281])
def test_create_rejects_bad_lengths(db_session, alice, content) -> None:
    with pytest.raises(ValidationError):
        MurmurService(db_session).create(alice.id, content)


def test_create_accepts_exact_limit(db_session, alice) -> None:
    murmur = MurmurService(db_session).create(alice.id, "x" * 280)
    assert len(murmur.content) == 280


def test_reply_bumps_parent_and_notifies(db_session, alice, bob, make_murmur) -> None:
    parent = make_murmur(alice, "root")
    reply = MurmurService(db_session).create(bob.id, "a reply", reply_to_id=parent.id)
    db_session.commit()

    db_session.refresh(parent)
    db_session.refresh(bob)
    assert reply.reply_to_id == parent.id
    assert parent.replies_count == 1
    # Replies never count toward the author's murmurs_count.
    assert bob.murmurs_count == 0

    notice = db_session.query(Notification).one()
    assert (notice.type, notice.user_id, notice.actor_id, notice.murmur_id) == (
        "reply",
        alice.id,
        bob.id,
        reply.id,
    )


def test_reply_to_missing_or_deleted_parent(db_session, alice, bob, make_murmur) -> None:
    service = MurmurService(db_session)
    with pytest.raises(NotFoundError):
        service.create(bob.id, "into the void", reply_to_id=4242)

    parent = make_murmur(alice)
    service.soft_delete(parent.id)
    db_session.commit()
    with pytest.raises(NotFoundError):
        service.create(bob.id, "too late", reply_to_id=parent.id)


def test_soft_delete_root_unwinds_counters_and_likes(db_session, alice, bob, make_murmur) -> None:
    murmur = make_murmur(alice)
    LikeService(db_session).like(bob.id, murmur.id)
    db_session.commit()

    service = MurmurService(db_session)
    assert service.soft_delete(murmur.id) is True
    db_session.commit()

    db_session.refresh(alice)
    assert alice.murmurs_count == 0
    assert service.find_by_id(murmur.id) is None
    assert service.get_any(murmur.id).is_deleted is True
    assert db_session.query(Like).count() == 0
    assert service.soft_delete(murmur.id) is False


def test_soft_delete_reply_decrements_parent(db_session, alice, bob, make_murmur) -> None:
    parent = make_murmur(alice)
    reply = make_murmur(bob, "reply", reply_to=parent)

    MurmurService(db_session).soft_delete(reply.id)
    db_session.commit()

    db_session.refresh(parent)
    db_session.refresh(alice)
    assert parent.replies_count == 0
    assert alice.murmurs_count == 1


def test_listings_hide_deleted_and_replies(db_session, alice, bob, make_murmur) -> None:
    first = make_murmur(alice, "first")
    make_murmur(alice, "second")
    make_murmur(bob, "reply to first", reply_to=first)
    gone = make_murmur(bob, "gone")
    service = MurmurService(db_session)
    service.soft_delete(gone.id)
    db_session.commit()

    items, total = service.get_public_murmurs()
    assert total == 2
    assert [m.content for m in items] == ["second", "first"]

    items, total = service.get_public_murmurs(exclude_user_id=alice.id)
    assert total == 0

    items, total = service.get_user_murmurs(bob.id)
    assert [m.content for m in items] == ["reply to first"]
    items, total = service.get_user_murmurs(bob.id, include_replies=False)
    assert total == 0


def test_replies_in_conversation_order(db_session, alice, bob, carol, make_murmur) -> None:
    parent = make_murmur(alice)
    make_murmur(bob, "one", reply_to=parent)
    make_murmur(carol, "two", reply_to=parent)

    items, total = MurmurService(db_session).get_replies(parent.id)
    assert total == 2
    assert [m.content for m in items] == ["one", "two"]

    with pytest.raises(NotFoundError):
        MurmurService(db_session).get_replies(999)


def test_search_matches_literal_substring(db_session, alice, make_murmur) -> None:
    make_murmur(alice, "100% Python")
    make_murmur(alice, "python_rocks")
    make_murmur(alice, "nothing here")
    service = MurmurService(db_session)

    _, total = service.search("PYTHON")
    assert total == 2
    items, total = service.search("%")
    assert [m.content for m in items] == ["100% Python"]
    items, _ = service.search("_rocks")
    assert [m.content for m in items] == ["python_rocks"]


def test_escape_like() -> None:
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


def test_trending_ranks_by_likes_within_window(db_session, alice, bob, carol, make_murmur) -> None:
    quiet = make_murmur(alice, "quiet")
    popular = make_murmur(alice, "popular")
    stale = make_murmur(alice, "stale")
    likes = LikeService(db_session)
    likes.like(bob.id, popular.id)
    likes.like(carol.id, popular.id)
    likes.like(bob.id, stale.id)
    likes.like(carol.id, stale.id)
    stale.created_at = utcnow() - timedelta(hours=48)
    db_session.commit()

    items, total = MurmurService(db_session).get_trending()
    assert total == 2
    assert [m.id for m in items] == [popular.id, quiet.id]
