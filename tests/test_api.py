"""Route-level tests through FastAPI's TestClient."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from huluhulu_ai.api.app import create_app
from huluhulu_ai.container import build_container
from huluhulu_ai.core.config import Config
from tests.conftest import FakeCompletionClient, StaticHotSearchSource, selection_json

MEME_STREAM = (
    b'data: {"id": "meme-1", "status": "running", "progress": 50}\n\n'
    b'data: {"id": "meme-1", "status": "succeeded", "progress": 100, "results": [{"url": "https://img.test/m.png"}]}\n\n'
    b"data: [DONE]\n\n"
)


def upstream_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if request.url.host == "img.test":
        return httpx.Response(200, content=b"PNG")
    if path == "/v1/draw/result":
        task_id = json.loads(request.content)["id"]
        return httpx.Response(200, json={"code": 0, "data": {"id": task_id, "status": "running", "progress": 30}})
    payload = json.loads(request.content)
    if payload["stream"]:
        return httpx.Response(200, content=MEME_STREAM, headers={"content-type": "text/event-stream"})
    return httpx.Response(200, json={"data": {"base64Image": "QUJD"}})


def _config(tmp_path, api_key="secret") -> Config:
    return Config(
        image_gen={"api_key": api_key, "base_url": "https://upstream.test"},
        storage={"database_url": f"sqlite:///{tmp_path / 'api.db'}"},
        backup={"directory": str(tmp_path / "backup")},
        log={"json_format": False},
    )


@pytest.fixture
def llm():
    return FakeCompletionClient(selection=selection_json("复古港风", "赛博朋克"))


@pytest.fixture
def make_client(tmp_path, llm):
    def _make(api_key="secret", handler=upstream_handler, client=None):
        container = build_container(
            _config(tmp_path, api_key),
            llm_client=client or llm,
            sources=[StaticHotSearchSource("douyin", ["港风穿搭", "赛博朋克夜景"])],
            transport=httpx.MockTransport(handler),
        )
        return TestClient(create_app(container=container)), container

    return _make


def test_health(make_client):
    client, _ = make_client()
    with client:
        assert client.get("/ping").json() == "pong"
        assert client.get("/").json() == "pong"


def test_photography_styles_seed_then_fill(make_client, tmp_path):
    client, container = make_client()
    with client:
        body = client.get("/api/image/photography-styles").json()

        assert body["code"] == 0
        assert [item["title"] for item in body["data"]] == ["复古港风", "赛博朋克"]

    # shutdown drains the background fill
    batch = container.store.latest_batch("photography")
    assert [s.prompt for s in batch.items] == ["复古港风 提示词", "赛博朋克 提示词"]


def test_catalogue_read_never_fails(make_client):
    client, _ = make_client(client=FakeCompletionClient(selection_error=RuntimeError("llm down")))
    with client:
        response = client.get("/api/compliment-styles")

    assert response.status_code == 200
    assert response.json() == {"code": 0, "message": "No styles available yet", "data": []}


def test_photography_cat_json(make_client):
    client, _ = make_client()
    with client:
        response = client.post("/api/image/photography-cat", json={"image": "IMG", "style": "一键美化"})

    assert response.status_code == 200
    assert response.json() == {"code": 0, "message": "Success", "data": {"base64Image": "QUJD"}}


def test_compliment_cat_stream(make_client):
    client, _ = make_client()
    with client:
        response = client.post("/api/compliment-cat", json={"image": "IMG", "prompt": "换个发型", "stream": True})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.content == MEME_STREAM


def test_dispatch_validation_error(make_client):
    client, _ = make_client()
    with client:
        response = client.post("/api/image/photography-cat", json={"style": "国风"})

    assert response.status_code == 400
    assert response.json()["code"] == 400


def test_missing_image_key_is_a_configuration_error(make_client):
    client, _ = make_client(api_key="")
    with client:
        response = client.post("/api/image/photography-cat", json={"image": "IMG", "prompt": "p"})

    assert response.status_code == 500
    assert response.json()["code"] == 500


def test_upstream_error_envelope(make_client):
    client, _ = make_client(handler=lambda request: httpx.Response(429, text="rate limited"))
    with client:
        response = client.post("/api/image/photography-cat", json={"image": "IMG", "prompt": "p"})

    assert response.status_code == 502
    body = response.json()
    assert body["code"] == 502
    assert "rate limited" in body["message"]


def test_meme_generate_streams_and_backs_up(make_client, tmp_path):
    client, _ = make_client()
    with client:
        response = client.post("/api/image/meme-generate", json={"image": "IMG", "type": 1, "style": "cartoon"})
        assert response.content == MEME_STREAM

    assert (tmp_path / "backup" / "meme" / "meme-1.png").read_bytes() == b"PNG"


def test_meme_generate_rejects_unknown_type(make_client):
    client, _ = make_client()
    with client:
        response = client.post("/api/image/meme-generate", json={"image": "IMG", "type": 7})

    assert response.status_code == 400


def test_result_polling(make_client):
    client, _ = make_client()
    with client:
        missing = client.get("/api/image/photography-result")
        photography = client.get("/api/image/photography-result", params={"id": "t1"})
        meme = client.get("/api/meme-result", params={"id": "t2"})

    assert missing.status_code == 400
    assert photography.json() == {"code": 0, "message": "success", "data": {"id": "t1", "status": "running", "progress": 30}}
    assert meme.json()["data"]["id"] == "t2"


def test_cron_refresh_and_task_stats(make_client):
    client, _ = make_client()
    with client:
        unknown = client.post("/api/cron/refresh-styles", params={"catalogue": "unknown"})
        refreshed = client.get("/api/cron/refresh-styles", params={"catalogue": "photography"})
        stats = client.get("/api/tasks").json()

    assert unknown.status_code == 400
    assert refreshed.json()["data"] == {"photography": 2}
    assert stats["code"] == 0
    assert "pending" in stats["data"]


def test_cron_refresh_failure(make_client):
    client, _ = make_client(client=FakeCompletionClient(selection_error=RuntimeError("llm down")))
    with client:
        response = client.post("/api/cron/refresh-styles", params={"catalogue": "compliment"})

    assert response.status_code == 500
    assert "llm down" in response.json()["message"]
