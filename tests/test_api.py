"""HTTP surface tests using FastAPI TestClient."""

import asyncio
import threading
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import MB
from virtual_tryon.core.errors import ErrorKind, GenerationError
from virtual_tryon.core.prompts import RESULT_FILENAME, SAMPLE_CLOTHING, SAMPLE_PEOPLE, SHARE_TITLE
from virtual_tryon.main import create_app
from virtual_tryon.services.session import TryOnSession


@pytest.fixture
def client(settings, session):
    with TestClient(create_app(settings=settings, session=session)) as c:
        yield c


def _upload(client, slot, data, mime, name="photo"):
    return client.post(f"/uploads/{slot}", files={"file": (name, data, mime)})


def _fill(client, jpeg, png):
    assert _upload(client, "person", jpeg, "image/jpeg", "person.jpg").status_code == 200
    assert _upload(client, "clothing", png, "image/png", "shirt.png").status_code == 200


class TestState:
    def test_initial_state(self, client):
        resp = client.get("/state")

        assert resp.status_code == 200
        data = resp.json()
        assert data["screen"] == "upload"
        assert data["person"] is None and data["clothing"] is None
        assert data["can_generate"] is False
        assert data["is_generating"] is False

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestUploads:
    def test_upload_and_preview(self, client):
        resp = _upload(client, "person", b"\xff\xd8hello", "image/jpeg", "me.jpg")

        assert resp.status_code == 200
        person = resp.json()["person"]
        assert person["filename"] == "me.jpg"
        assert person["mime_type"] == "image/jpeg"
        assert person["size"] == 7

        preview = client.get(person["preview_url"])
        assert preview.status_code == 200
        assert preview.content == b"\xff\xd8hello"
        assert preview.headers["content-type"] == "image/jpeg"

    def test_too_large(self, client):
        resp = _upload(client, "person", b"\x00" * (6 * MB), "image/jpeg")

        assert resp.status_code == 400
        assert "5MB" in resp.json()["detail"]
        state = client.get("/state").json()
        assert "5MB" in state["upload_error"]
        assert state["person"] is None

    def test_unsupported_type(self, client):
        resp = _upload(client, "clothing", b"%PDF-1.4", "application/pdf")
        assert resp.status_code == 400
        assert client.get("/state").json()["clothing"] is None

    def test_unknown_slot(self, client):
        assert _upload(client, "shoes", b"\xff\xd8", "image/jpeg").status_code == 422

    def test_missing_file(self, client):
        assert client.post("/uploads/person").status_code == 422


class TestTryOn:
    def test_full_cycle(self, client, jpeg_2mb, png_2mb):
        _fill(client, jpeg_2mb, png_2mb)
        assert client.get("/state").json()["can_generate"] is True

        resp = client.post("/tryon", params={"wait": True})

        assert resp.status_code == 200
        data = resp.json()
        assert data["screen"] == "result"
        assert data["result_url"] == "data:image/jpeg;base64,AAAA"
        assert data["generation_error"] is None
        assert data["is_generating"] is False

    def test_background_attempt_returns_202(self, client, fake_client, jpeg_2mb, png_2mb):
        gate = threading.Event()

        async def slow(person, clothing):
            while not gate.is_set():
                await asyncio.sleep(0.01)
            return "AAAA"

        fake_client.generate.side_effect = slow
        _fill(client, jpeg_2mb, png_2mb)

        resp = client.post("/tryon")

        assert resp.status_code == 202
        assert resp.json()["is_generating"] is True
        assert client.post("/reset").status_code == 409
        assert client.get("/state").json()["is_generating"] is True

        gate.set()
        for _ in range(200):
            data = client.get("/state").json()
            if not data["is_generating"]:
                break
            time.sleep(0.01)

        assert data["result_url"] == "data:image/jpeg;base64,AAAA"
        assert fake_client.generate.await_count == 1

    def test_requires_both_images(self, client, jpeg_2mb):
        _upload(client, "person", jpeg_2mb, "image/jpeg")

        resp = client.post("/tryon")

        assert resp.status_code == 400
        assert "both" in resp.json()["detail"]
        assert client.get("/state").json()["screen"] == "upload"

    def test_rate_limited(self, client, fake_client, jpeg_2mb, png_2mb):
        fake_client.generate.side_effect = GenerationError.of(ErrorKind.RATE_LIMITED)
        _fill(client, jpeg_2mb, png_2mb)

        data = client.post("/tryon", params={"wait": True}).json()

        assert data["screen"] == "result"
        assert "too many requests" in data["generation_error"]
        assert data["result_url"] is None

    def test_second_tryon_on_result_screen_conflicts(self, client, jpeg_2mb, png_2mb):
        _fill(client, jpeg_2mb, png_2mb)
        client.post("/tryon", params={"wait": True})

        assert client.post("/tryon").status_code == 409
        assert _upload(client, "person", jpeg_2mb, "image/jpeg").status_code == 409

    def test_reset(self, client, jpeg_2mb, png_2mb):
        _fill(client, jpeg_2mb, png_2mb)
        preview_url = client.get("/state").json()["person"]["preview_url"]
        client.post("/tryon", params={"wait": True})

        data = client.post("/reset").json()

        assert data["screen"] == "upload"
        assert data["person"] is None and data["clothing"] is None
        assert data["result_url"] is None
        assert client.get(preview_url).status_code == 404


class TestResultActions:
    def test_nothing_to_download_yet(self, client):
        assert client.get("/result/download").status_code == 404
        assert client.get("/result/share").status_code == 404

    def test_download_is_jpeg_attachment(self, client, fake_client, real_png_base64, jpeg_2mb, png_2mb):
        fake_client.generate.return_value = real_png_base64
        _fill(client, jpeg_2mb, png_2mb)
        client.post("/tryon", params={"wait": True})

        resp = client.get("/result/download")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/jpeg"
        assert RESULT_FILENAME in resp.headers["content-disposition"]
        assert resp.content[:2] == b"\xff\xd8"

    def test_share_descriptor(self, client, jpeg_2mb, png_2mb):
        _fill(client, jpeg_2mb, png_2mb)
        client.post("/tryon", params={"wait": True})

        data = client.get("/result/share").json()

        assert data["title"] == SHARE_TITLE
        assert data["filename"] == RESULT_FILENAME
        assert data["mime_type"] == "image/jpeg"
        assert data["data_url"] == "data:image/jpeg;base64,AAAA"


class TestSamples:
    def test_list(self, client):
        data = client.get("/samples").json()
        assert data == {"person": SAMPLE_PEOPLE, "clothing": SAMPLE_CLOTHING}

    def test_use_sample(self, settings, fake_client):
        transport = httpx.MockTransport(
            lambda r: httpx.Response(200, content=b"\xff\xd8sample", headers={"content-type": "image/jpeg"})
        )
        session = TryOnSession(settings, fake_client, sample_transport=transport)

        with TestClient(create_app(settings=settings, session=session)) as client:
            resp = client.post("/samples/person/0")
            assert resp.status_code == 200
            assert resp.json()["person"]["mime_type"] == "image/jpeg"

            assert client.post("/samples/clothing/99").status_code == 404
