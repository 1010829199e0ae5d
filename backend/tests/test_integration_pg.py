"""End-to-end checks against a real PostgreSQL.

Set ``TEST_DATABASE_URL`` (``postgresql+asyncpg://...``) to a throwaway
database; every table is dropped and recreated per test.
"""
import asyncio
import os

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import academy.models  # noqa: F401
from academy.db.base import Base
from academy.db.repositories import exam_repo
from academy.errors import Conflict, RangeNotSatisfiable
from academy.models import Exam, Question, User, UserVideoView, Video
from academy.services import exam_service, streaming_service, video_service, watch_service
from academy.services.exam_service import ExamFields, QuestionInput

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set")

FIELDS = ExamFields(exam_title="Safety", author="Trainer", tag="Onboarding", department="Plant 2")
PAYLOAD = bytes(range(256)) * 40


@pytest.fixture
async def sessions():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def add_video(sessions, tags=None) -> int:
    upload = video_service.VideoUpload(
        title="Intro", content=PAYLOAD, filename="intro.mp4", mime_type="video/mp4",
        uploader="admin", tags=tags or ["Plant 2 > Safety"],
    )
    async with sessions() as session:
        video = await video_service.store_video(session, upload, "http://test")
        await session.commit()
        return video.id


async def add_user(sessions) -> int:
    async with sessions() as session:
        user = User(full_name="Ayse Yilmaz", role="operator", username="ayse", email="ayse@example.com")
        session.add(user)
        await session.commit()
        return user.id


async def test_stream_round_trip(sessions):
    video_id = await add_video(sessions)

    async with sessions() as session:
        res = await streaming_service.stream_video(session, video_id, "bytes=1000-1999")
    assert res.status_code == 206
    assert res.body == PAYLOAD[1000:2000]
    assert res.headers["content-range"] == f"bytes 1000-1999/{len(PAYLOAD)}"

    async with sessions() as session:
        res = await streaming_service.stream_video(session, video_id, f"bytes={len(PAYLOAD) - 10}-")
    assert res.body == PAYLOAD[-10:]

    async with sessions() as session:
        res = await streaming_service.stream_video(session, video_id, None)
    assert res.status_code == 200
    assert res.body == PAYLOAD

    async with sessions() as session:
        with pytest.raises(RangeNotSatisfiable):
            await streaming_service.stream_video(session, video_id, f"bytes={len(PAYLOAD)}-")


async def test_stored_url_points_at_stream_route(sessions):
    video_id = await add_video(sessions)
    async with sessions() as session:
        video = await session.get(Video, video_id)
    assert video.url == f"http://test/api/videos/{video_id}/stream"


async def test_exam_creation_tags_video_and_keeps_order(sessions):
    video_id = await add_video(sessions)
    questions = [QuestionInput(question_text=f"Q{i}", answer_text=f"A{i}") for i in range(3)]

    async with sessions() as session:
        await exam_service.create_exam(session, video_id, FIELDS, questions)

    async with sessions() as session:
        exam = await exam_repo.get_exam_with_questions(session, video_id)
        video = await session.get(Video, video_id)
    assert [q.question_text for q in exam.questions] == ["Q0", "Q1", "Q2"]
    assert video.tags == ["Plant 2 > Safety", "SINAVLI"]


async def test_second_exam_for_same_video_conflicts(sessions):
    video_id = await add_video(sessions)
    questions = [QuestionInput(question_text="Q")]
    async with sessions() as session:
        await exam_service.create_exam(session, video_id, FIELDS, questions)
    async with sessions() as session:
        with pytest.raises(Conflict):
            await exam_service.create_exam(session, video_id, FIELDS, questions)

    async with sessions() as session:
        assert await session.scalar(select(func.count()).select_from(Exam)) == 1


async def test_failed_question_rolls_back_everything(sessions, monkeypatch):
    video_id = await add_video(sessions)
    real_create_question = exam_repo.create_question
    calls = {"n": 0}

    async def flaky_create_question(session, **values):
        calls["n"] += 1
        if calls["n"] == 3:
            raise RuntimeError("disk full")
        return await real_create_question(session, **values)

    monkeypatch.setattr(exam_repo, "create_question", flaky_create_question)
    questions = [QuestionInput(question_text=f"Q{i}") for i in range(4)]
    async with sessions() as session:
        with pytest.raises(RuntimeError):
            await exam_service.create_exam(session, video_id, FIELDS, questions)

    async with sessions() as session:
        assert await session.scalar(select(func.count()).select_from(Exam)) == 0
        assert await session.scalar(select(func.count()).select_from(Question)) == 0
        video = await session.get(Video, video_id)
    assert video.tags == ["Plant 2 > Safety"]


async def test_video_with_exam_failure_leaves_no_video(sessions, monkeypatch):
    async def broken_create_question(session, **values):
        raise RuntimeError("boom")

    monkeypatch.setattr(exam_repo, "create_question", broken_create_question)
    upload = video_service.VideoUpload(title="Intro", content=b"abc", uploader="admin")
    async with sessions() as session:
        with pytest.raises(RuntimeError):
            await exam_service.create_video_with_exam(
                session, upload, FIELDS, [QuestionInput(question_text="Q")], "http://test"
            )

    async with sessions() as session:
        assert await session.scalar(select(func.count()).select_from(Video)) == 0


async def test_repeated_watch_is_recorded_once(sessions):
    video_id = await add_video(sessions)
    user_id = await add_user(sessions)

    for _ in range(3):
        async with sessions() as session:
            watched = await watch_service.record_watch(session, user_id, video_id)
    assert watched == [video_id]

    async with sessions() as session:
        assert await session.scalar(select(func.count()).select_from(UserVideoView)) == 1


async def test_concurrent_watches_converge(sessions):
    video_id = await add_video(sessions)
    user_id = await add_user(sessions)

    async def watch():
        async with sessions() as session:
            return await watch_service.record_watch(session, user_id, video_id)

    results = await asyncio.gather(*[watch() for _ in range(8)])
    assert all(r == [video_id] for r in results)

    async with sessions() as session:
        user = await session.get(User, user_id)
        views = await session.scalar(select(func.count()).select_from(UserVideoView))
    assert user.watched_videos == [video_id]
    assert views == 1


async def test_deleting_watched_video_clears_array_and_log(sessions):
    video_id = await add_video(sessions)
    other_id = await add_video(sessions)
    user_id = await add_user(sessions)
    for vid in (video_id, other_id):
        async with sessions() as session:
            await watch_service.record_watch(session, user_id, vid)

    async with sessions() as session:
        await video_service.delete_video(session, video_id)

    async with sessions() as session:
        user = await session.get(User, user_id)
        logged = (await session.execute(select(UserVideoView.video_id))).scalars().all()
    assert user.watched_videos == [other_id]
    assert logged == [other_id]
