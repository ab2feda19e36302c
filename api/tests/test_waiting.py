import pytest

from matcher import repo
from matcher.errors import DuplicateError, UnknownPersonError
from matcher.services import waiting


def test_duplicate_signup_is_a_no_op(store):
    store.add_people(1)
    with store.session_factory() as db:
        first = waiting.signup(db, 1)
        second = waiting.signup(db, 1)
        db.commit()

    assert first["created"] is True
    assert second["created"] is False
    assert second["signup_time"] == first["signup_time"]
    assert store.waiting_ids() == [1]


def test_duplicate_signup_can_be_reported_as_conflict(store):
    store.add_people(1)
    with store.session_factory() as db:
        waiting.signup(db, 1)
        with pytest.raises(DuplicateError):
            waiting.signup(db, 1, idempotent=False)
        db.commit()
    assert store.waiting_ids() == [1]


def test_signup_for_unknown_person_is_rejected(store):
    with store.session_factory() as db:
        with pytest.raises(UnknownPersonError):
            waiting.signup(db, 404)
    assert store.waiting_ids() == []


def test_withdraw_removes_only_that_person(store):
    store.add_people(1, 2)
    store.sign_up(1, 2)
    with store.session_factory() as db:
        assert waiting.withdraw(db, 1) is True
        assert waiting.withdraw(db, 1) is False
        db.commit()
    assert store.waiting_ids() == [2]


def test_people_listing_reports_waiting_flag(store):
    store.add_people(1, 2)
    store.sign_up(2)
    with store.session_factory() as db:
        people = repo.list_people(db)
    assert [(p["id"], p["waiting"]) for p in people] == [(1, False), (2, True)]
