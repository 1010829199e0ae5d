import pytest

from academy.db.repositories import video_repo
from academy.db.repositories.video_repo import ContentInfo, StoredContent

CONTENT = bytes(range(256)) * 4  # 1024 bytes, every offset distinguishable


@pytest.fixture
def store(monkeypatch):
    """In-memory video store; records every read issued."""
    videos = {7: ("video/mp4", CONTENT), 8: ("video/webm", b"")}
    calls = []

    async def read_all(session, video_id):
        calls.append(("all", video_id))
        if video_id not in videos:
            return None
        mime, data = videos[video_id]
        return StoredContent(mime_type=mime, total=len(data), content=data)

    async def read_length(session, video_id):
        calls.append(("length", video_id))
        if video_id not in videos:
            return None
        mime, data = videos[video_id]
        return ContentInfo(mime_type=mime, total=len(data))

    async def read_window(session, video_id, offset, length):
        calls.append(("window", video_id, offset, length))
        data = videos[video_id][1]
        return data[offset - 1: offset - 1 + length] or None

    monkeypatch.setattr(video_repo, "read_all", read_all)
    monkeypatch.setattr(video_repo, "read_length", read_length)
    monkeypatch.setattr(video_repo, "read_window", read_window)
    return {"videos": videos, "calls": calls}


async def test_ranged_request_returns_exact_window(client, store):
    res = await client.get("/api/videos/7/stream", headers={"Range": "bytes=200-299"})
    assert res.status_code == 206
    assert res.headers["content-range"] == "bytes 200-299/1024"
    assert res.headers["content-length"] == "100"
    assert res.headers["accept-ranges"] == "bytes"
    assert res.headers["content-type"] == "video/mp4"
    assert res.content == CONTENT[200:300]


async def test_ranged_request_issues_one_windowed_read(client, store):
    await client.get("/api/videos/7/stream", headers={"Range": "bytes=10-"})
    kinds = [c[0] for c in store["calls"]]
    assert kinds == ["length", "window"]
    assert store["calls"][1] == ("window", 7, 11, 1014)


async def test_no_range_streams_whole_object(client, store):
    res = await client.get("/api/videos/7/stream")
    assert res.status_code == 200
    assert res.headers["content-length"] == "1024"
    assert res.headers["content-range"] == "bytes 0-1023/1024"
    assert res.content == CONTENT


async def test_end_past_length_is_clamped(client, store):
    res = await client.get("/api/videos/7/stream", headers={"Range": "bytes=1000-99999"})
    assert res.status_code == 206
    assert res.headers["content-range"] == "bytes 1000-1023/1024"
    assert res.content == CONTENT[1000:]


async def test_malformed_range_is_416_without_body(client, store):
    res = await client.get("/api/videos/7/stream", headers={"Range": "bytes=abc"})
    assert res.status_code == 416
    assert res.content == b""
    assert store["calls"] == []


async def test_start_past_end_is_416(client, store):
    res = await client.get("/api/videos/7/stream", headers={"Range": "bytes=1024-"})
    assert res.status_code == 416
    assert res.headers["content-range"] == "bytes */1024"
    assert res.content == b""


async def test_unknown_video_is_404(client, store):
    res = await client.get("/api/videos/99/stream", headers={"Range": "bytes=0-1"})
    assert res.status_code == 404
    assert res.json()["error"] == "not_found"

    res = await client.get("/api/videos/99/stream")
    assert res.status_code == 404


async def test_empty_content_whole_object(client, store):
    res = await client.get("/api/videos/8/stream")
    assert res.status_code == 200
    assert res.headers["content-length"] == "0"
    assert "content-range" not in res.headers


async def test_legacy_unprefixed_route(client, store):
    res = await client.get("/videos/7/stream", headers={"Range": "bytes=0-9"})
    assert res.status_code == 206
    assert res.content == CONTENT[:10]
