"""
Integration tests for the conversion endpoints.

Requests go through the full FastAPI stack (middleware, exception handlers,
routing); only the browser is replaced by FakeBrowserSession.
"""

import base64

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from eml_snapshot.api.app import app
from eml_snapshot.api.routes.convert import get_pipeline
from eml_snapshot.config import settings
from eml_snapshot.models.render import RenderConfig
from eml_snapshot.pipeline import EmailRenderPipeline
from tests.fixtures.browser import FAKE_JPEG, FakeBrowserSession, FakePage, timeout_error
from tests.fixtures.emails import SAMPLE_EMAILS


def use_session(session: FakeBrowserSession, max_capture_height: int = 5000) -> None:
    config = RenderConfig(max_capture_height=max_capture_height)
    app.dependency_overrides[get_pipeline] = lambda: EmailRenderPipeline(session, config)


def multipart(eml_bytes: bytes, filename: str = "message.eml"):
    return {"eml_file": (filename, eml_bytes, "message/rfc822")}


class TestConvertMultipart:
    """Tests for POST /convert."""

    pytestmark = pytest.mark.asyncio

    @pytest.mark.integration
    async def test_convert_success(self, async_client, sample_eml_bytes, fake_session):
        """A valid upload returns a JPEG with sanitized metadata headers."""
        response = await async_client.post("/convert", files=multipart(sample_eml_bytes))

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content == FAKE_JPEG
        assert response.headers["x-email-subject"] == "Test Email"
        assert response.headers["x-email-from"] == "sender@example.com"
        assert response.headers["x-message-id"] == "<test123@example.com>"
        assert response.headers["x-height-truncated"] == "false"
        assert "x-actual-height" not in response.headers
        assert "x-captured-height" not in response.headers
        assert fake_session.acquired == fake_session.released == 1

    @pytest.mark.integration
    async def test_convert_truncated(self, async_client, sample_eml_bytes):
        """Content taller than the limit is cropped and flagged."""
        session = FakeBrowserSession(lambda: FakePage(content_height=2000))
        use_session(session, max_capture_height=500)

        response = await async_client.post("/convert", files=multipart(sample_eml_bytes))

        assert response.status_code == 200
        assert response.headers["x-height-truncated"] == "true"
        assert response.headers["x-actual-height"] == "2000"
        assert response.headers["x-captured-height"] == "500"

    @pytest.mark.integration
    async def test_hostile_headers_are_sanitized(self, async_client):
        """CRLF and control characters never reach response headers."""
        response = await async_client.post("/convert", files=multipart(SAMPLE_EMAILS["hostile_headers"]))

        assert response.status_code == 200
        for name in ("x-email-subject", "x-email-from", "x-message-id"):
            value = response.headers[name]
            assert all(0x20 <= ord(ch) <= 0x7E for ch in value)
            assert len(value) <= 258

    @pytest.mark.integration
    async def test_missing_headers_use_defaults(self, async_client):
        """Absent headers are reported with their placeholders."""
        response = await async_client.post("/convert", files=multipart(SAMPLE_EMAILS["missing_headers"]))

        assert response.status_code == 200
        assert response.headers["x-message-id"] == "Unknown"

    @pytest.mark.integration
    async def test_missing_file(self, async_client, fake_session):
        """A request without an eml file field is rejected."""
        response = await async_client.post("/convert", data={"other": "value"})

        assert response.status_code == 400
        body = response.json()
        assert body == {"success": False, "error": "missing_file", "detail": body["detail"]}
        assert fake_session.acquired == 0

    @pytest.mark.integration
    async def test_malformed_email(self, async_client, malformed_eml, fake_session):
        """Bytes that are not a mail message give 400."""
        response = await async_client.post("/convert", files=multipart(malformed_eml))

        assert response.status_code == 400
        assert response.json()["error"] == "malformed_email"
        assert response.json()["success"] is False
        assert fake_session.acquired == 0

    @pytest.mark.integration
    async def test_empty_upload(self, async_client):
        """An empty upload is rejected."""
        response = await async_client.post("/convert", files=multipart(b""))

        assert response.status_code == 400
        assert response.json()["error"] == "malformed_email"

    @pytest.mark.integration
    async def test_empty_content(self, async_client, fake_session):
        """A message with no renderable body gives an error."""
        response = await async_client.post("/convert", files=multipart(SAMPLE_EMAILS["empty_body"]))

        assert response.status_code == 400
        assert response.json()["error"] == "empty_content"
        assert fake_session.acquired == 0

    @pytest.mark.integration
    async def test_payload_too_large(self, async_client, monkeypatch, fake_session):
        """Uploads above the size limit give 413."""
        monkeypatch.setattr(settings, "max_upload_size_mb", 1)
        oversized = SAMPLE_EMAILS["simple_plain_text"] + b"x" * (1024 * 1024)

        response = await async_client.post("/convert", files=multipart(oversized))

        assert response.status_code == 413
        assert response.json()["error"] == "payload_too_large"
        assert fake_session.acquired == 0

    @pytest.mark.integration
    async def test_render_timeout(self, async_client, sample_eml_bytes):
        """A page load timeout maps to its error response."""
        session = FakeBrowserSession(lambda: FakePage(load_error=timeout_error()))
        use_session(session)

        response = await async_client.post("/convert", files=multipart(sample_eml_bytes))

        assert response.status_code == 504
        assert response.json()["error"] == "render_timeout"
        assert session.acquired == session.released == 1


class TestConvertBase64:
    """Tests for POST /convert/base64."""

    pytestmark = pytest.mark.asyncio

    @pytest.mark.integration
    async def test_base64_matches_multipart(self, async_client, multipart_html_eml):
        """The base64 endpoint renders the same message."""
        encoded = base64.b64encode(multipart_html_eml).decode("ascii")

        via_json = await async_client.post("/convert/base64", json={"eml_base64": encoded})
        via_upload = await async_client.post("/convert", files=multipart(multipart_html_eml))

        assert via_json.status_code == 200
        assert via_json.content == via_upload.content
        for name in ("x-email-subject", "x-email-from", "x-message-id", "x-height-truncated"):
            assert via_json.headers[name] == via_upload.headers[name]

    @pytest.mark.integration
    async def test_base64_with_line_breaks(self, async_client, sample_eml_bytes):
        """MIME-style wrapped base64 is accepted."""
        encoded = base64.encodebytes(sample_eml_bytes).decode("ascii")

        response = await async_client.post("/convert/base64", json={"eml_base64": encoded})

        assert response.status_code == 200
        assert response.headers["x-email-subject"] == "Test Email"

    @pytest.mark.integration
    async def test_invalid_base64(self, async_client, fake_session):
        """Characters outside the base64 alphabet are rejected."""
        response = await async_client.post("/convert/base64", json={"eml_base64": "not*base64!"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"
        assert fake_session.acquired == 0

    @pytest.mark.integration
    async def test_empty_base64(self, async_client):
        """Whitespace-only base64 is rejected."""
        response = await async_client.post("/convert/base64", json={"eml_base64": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"

    @pytest.mark.integration
    async def test_missing_field_is_validation_error(self, async_client):
        """A body without eml_base64 fails request validation."""
        response = await async_client.post("/convert/base64", json={})

        assert response.status_code == 422

    @pytest.mark.integration
    async def test_decoded_payload_too_large(self, async_client, monkeypatch):
        """The size limit applies to the decoded bytes."""
        monkeypatch.setattr(settings, "max_upload_size_mb", 1)
        encoded = base64.b64encode(b"x" * (1024 * 1024 + 10)).decode("ascii")

        response = await async_client.post("/convert/base64", json={"eml_base64": encoded})

        assert response.status_code == 413
        assert response.json()["error"] == "payload_too_large"


class TestSessionUnavailable:

    pytestmark = pytest.mark.asyncio

    @pytest_asyncio.fixture
    async def bare_client(self):
        """Client without the pipeline override or a started browser."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    @pytest.mark.integration
    async def test_convert_without_session(self, bare_client, sample_eml_bytes):
        """Without a running browser the service answers 503."""
        response = await bare_client.post("/convert", files=multipart(sample_eml_bytes))

        assert response.status_code == 503
        assert response.json()["error"] == "session_unavailable"
