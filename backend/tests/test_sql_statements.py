"""Run the real repository/service SQL against a session that only records statements.

Each statement is compiled with the PostgreSQL dialect so the locking,
conflict and offset clauses are checked without a database.
"""
import re
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql

from academy.db.repositories import video_repo
from academy.errors import NotFound
from academy.services import membership_service, streaming_service, video_service, watch_service
from academy.services.membership_service import WATCHED_VIDEOS

from .conftest import FakeSession


class FakeResult:
    def __init__(self, first=None, scalar=None, rowcount=0):
        self._first = first
        self._scalar = scalar
        self.rowcount = rowcount

    def first(self):
        return self._first

    def scalar_one_or_none(self):
        return self._scalar


class RecordingSession(FakeSession):
    """Hands out queued results in order and keeps every executed statement."""

    def __init__(self, *results):
        super().__init__()
        self.statements = []
        self.results = list(results)

    async def execute(self, statement, params=None):
        self.statements.append(statement.compile(dialect=postgresql.dialect()))
        return self.results.pop(0) if self.results else FakeResult()

    def sql(self):
        return [str(c) for c in self.statements]


async def test_ensure_member_locks_owner_then_inserts_ignoring_duplicates():
    session = RecordingSession(FakeResult(first=(3, [1])))
    members = await membership_service.ensure_member(session, WATCHED_VIDEOS, 3, 7)

    assert members == [1, 7]
    select_sql, update_sql, insert_sql = session.sql()
    assert select_sql.startswith("SELECT users.id, users.watched_videos")
    assert select_sql.endswith("FOR UPDATE")
    assert update_sql.startswith("UPDATE users SET watched_videos=")
    assert session.statements[1].params["watched_videos"] == [1, 7]
    assert insert_sql.startswith("INSERT INTO user_video_views")
    assert insert_sql.endswith("ON CONFLICT (user_id, video_id) DO NOTHING")


async def test_ensure_member_skips_update_when_already_present():
    session = RecordingSession(FakeResult(first=(3, [7])))
    members = await membership_service.ensure_member(session, WATCHED_VIDEOS, 3, 7)

    assert members == [7]
    sql = session.sql()
    assert len(sql) == 2
    assert not any(s.startswith("UPDATE") for s in sql)
    assert sql[1].endswith("ON CONFLICT (user_id, video_id) DO NOTHING")


async def test_ensure_member_missing_owner_writes_nothing():
    session = RecordingSession(FakeResult(first=None))
    with pytest.raises(NotFound):
        await membership_service.ensure_member(session, WATCHED_VIDEOS, 99, 7)
    assert len(session.sql()) == 1


async def test_record_watch_rolls_back_when_owner_missing():
    session = RecordingSession(FakeResult(scalar=7), FakeResult(first=None))
    with pytest.raises(NotFound):
        await watch_service.record_watch(session, 99, 7)
    assert session.rollbacks == 1
    assert session.commits == 0


async def test_ranged_read_uses_one_based_substring():
    session = RecordingSession(
        FakeResult(first=SimpleNamespace(mime_type="video/mp4", total=100)),
        FakeResult(scalar=bytes(10)),
    )
    res = await streaming_service.stream_video(session, 4, "bytes=10-19")

    assert res.status_code == 206
    assert len(session.statements) == 2
    assert "octet_length(videos.content)" in session.sql()[0]
    window = session.statements[1]
    match = re.search(r"substring\(videos\.content, %\((\w+)\)s, %\((\w+)\)s\)", str(window))
    assert match, str(window)
    assert window.params[match.group(1)] == 11
    assert window.params[match.group(2)] == 10
    assert ", videos.content" not in session.sql()[0]


async def test_read_window_selects_only_the_slice():
    session = RecordingSession(FakeResult(scalar=b"abc"))
    assert await video_repo.read_window(session, 4, 1, 3) == b"abc"
    sql = session.sql()[0]
    assert sql.startswith("SELECT substring(videos.content")
    assert "WHERE videos.id =" in sql


async def test_delete_video_clears_watched_arrays_before_delete():
    session = RecordingSession(FakeResult(rowcount=2), FakeResult(scalar=7))
    await video_service.delete_video(session, 7)

    update_sql, delete_sql = session.sql()
    assert update_sql.startswith("UPDATE users SET watched_videos=array_remove(users.watched_videos, ")
    assert "= ANY (users.watched_videos)" in update_sql
    assert 7 in session.statements[0].params.values()
    assert delete_sql.startswith("DELETE FROM videos WHERE videos.id =")
    assert session.commits == 1


async def test_delete_unknown_video_rolls_back_array_update():
    session = RecordingSession(FakeResult(rowcount=0), FakeResult(scalar=None))
    with pytest.raises(NotFound):
        await video_service.delete_video(session, 7)
    assert session.rollbacks == 1
    assert session.commits == 0
