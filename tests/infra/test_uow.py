"""Tests for the CLI and API transaction boundaries."""

import pytest

from vidpod.domain.entities import Rundown
from vidpod.infra.uow import get_db, session


def _rundown(title: str) -> Rundown:
    return Rundown(title=title, created_by="t-1")


def test_session_commits_on_success(db):
    with session() as work:
        work.add(_rundown("Kept"))

    assert [r.title for r in db.query(Rundown)] == ["Kept"]


def test_session_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with session() as work:
            work.add(_rundown("Dropped"))
            work.flush()
            raise RuntimeError("boom")

    assert db.query(Rundown).count() == 0


def test_get_db_rolls_back_when_the_request_fails(db):
    dependency = get_db()
    work = next(dependency)
    work.add(_rundown("Dropped"))
    work.flush()

    with pytest.raises(RuntimeError):
        dependency.throw(RuntimeError("boom"))

    assert db.query(Rundown).count() == 0
