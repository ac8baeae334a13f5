"""
Shared fixtures for the eml-snapshot test suite.

The API fixtures never run the app lifespan: the pipeline dependency is
overridden with one backed by FakeBrowserSession, so no Chromium is needed.
"""

import os
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from eml_snapshot.api.app import app
from eml_snapshot.api.routes.convert import get_pipeline
from eml_snapshot.config import Settings
from eml_snapshot.models.render import RenderConfig
from eml_snapshot.pipeline import EmailRenderPipeline
from tests.fixtures.browser import FakeBrowserSession
from tests.fixtures.emails import SAMPLE_EMAILS


@pytest.fixture
def render_config() -> RenderConfig:
    return RenderConfig(max_capture_height=5000, offline_mode=False)


@pytest.fixture
def fake_session() -> FakeBrowserSession:
    return FakeBrowserSession()


@pytest.fixture
def pipeline(fake_session, render_config) -> EmailRenderPipeline:
    return EmailRenderPipeline(fake_session, render_config)


@pytest.fixture
def override_pipeline(fake_session, render_config) -> Generator[None, None, None]:
    """Serve API requests from fake_session instead of app.state."""
    app.dependency_overrides[get_pipeline] = lambda: EmailRenderPipeline(fake_session, render_config)
    yield
    app.dependency_overrides.pop(get_pipeline, None)


@pytest_asyncio.fixture
async def async_client(override_pipeline) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_settings() -> Settings:
    return Settings(
        max_upload_size_mb=20,
        max_capture_height=5000,
        offline_mode=False,
        log_level="INFO",
        log_json=False,
    )


@pytest.fixture
def sample_eml_bytes() -> bytes:
    return SAMPLE_EMAILS["simple_plain_text"]


@pytest.fixture
def multipart_html_eml() -> bytes:
    return SAMPLE_EMAILS["multipart_html"]


@pytest.fixture
def html_only_eml() -> bytes:
    return SAMPLE_EMAILS["html_only"]


@pytest.fixture
def malformed_eml() -> bytes:
    return SAMPLE_EMAILS["malformed"]


@pytest.fixture
def tmp_eml_file(tmp_path) -> str:
    """Path to a plain-text .eml written to a temp directory."""
    eml_path = tmp_path / "test_email.eml"
    eml_path.write_bytes(SAMPLE_EMAILS["simple_plain_text"])
    return str(eml_path)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """Undo environment changes made by a test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (API, end-to-end)")
    config.addinivalue_line("markers", "slow: Tests that launch a real Chromium")
