import io

import pytest
from fastapi import UploadFile

from academy.config import settings
from academy.db.repositories import exam_result_repo, video_repo
from academy.errors import PayloadTooLarge
from academy.services import video_service


@pytest.fixture
def no_writes(monkeypatch):
    calls = []

    async def create_video(session, **values):
        calls.append(values)
        raise AssertionError("nothing should be stored")

    monkeypatch.setattr(video_repo, "create_video", create_video)
    return calls


@pytest.fixture
def small_limit(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 4)


async def test_read_upload_stops_past_the_limit(small_limit):
    upload = UploadFile(file=io.BytesIO(b"0123456789"), filename="big.mp4")
    with pytest.raises(PayloadTooLarge):
        await video_service.read_upload(upload)
    assert upload.file.tell() == 5


async def test_read_upload_refuses_on_declared_size(small_limit):
    upload = UploadFile(file=io.BytesIO(b""), filename="big.mp4", size=1_000)
    with pytest.raises(PayloadTooLarge):
        await video_service.read_upload(upload)
    assert upload.file.tell() == 0


async def test_read_upload_within_limit(small_limit):
    upload = UploadFile(file=io.BytesIO(b"abcd"), filename="ok.mp4")
    assert await video_service.read_upload(upload) == b"abcd"


async def test_oversized_video_upload_is_413(client, small_limit, no_writes):
    res = await client.post(
        "/api/videos",
        data={"title": "Intro", "uploader": "admin"},
        files={"file": ("big.mp4", b"0123456789", "video/mp4")},
    )
    assert res.status_code == 413
    assert res.json()["error"] == "payload_too_large"
    assert no_writes == []


async def test_oversized_video_exam_upload_is_413(client, small_limit, no_writes):
    res = await client.post(
        "/api/video-exams",
        data={"title": "Intro", "uploader": "admin", "examTitle": "Quiz", "questions": "[]"},
        files={"file": ("big.mp4", b"0123456789", "video/mp4")},
    )
    assert res.status_code == 413
    assert no_writes == []


@pytest.fixture
def results(monkeypatch):
    stored = []

    async def video_exists(session, video_id):
        return video_id == 7

    async def create_result(session, user_label, video_id, exam_title, score):
        stored.append((user_label, video_id, exam_title, score))
        raise AssertionError("not expected in these tests")

    monkeypatch.setattr(video_repo, "video_exists", video_exists)
    monkeypatch.setattr(exam_result_repo, "create_result", create_result)
    return stored


async def test_exam_result_for_unknown_video_is_404(client, results):
    res = await client.post(
        "/api/exam-results",
        json={"videoId": 99, "score": 80, "examTitle": "Quiz", "userName": "ayse"},
    )
    assert res.status_code == 404
    assert res.json()["error"] == "not_found"
    assert results == []


async def test_exam_result_with_bad_score_is_400(client, results):
    res = await client.post(
        "/api/exam-results",
        json={"videoId": 7, "score": "lots", "examTitle": "Quiz", "userName": "ayse"},
    )
    assert res.status_code == 400
    assert results == []
