import asyncio
import logging

import pytest
from fastapi.testclient import TestClient

from streamline.core.config import Settings
from streamline.main import create_app
from streamline.services import dispatch_service


class FakeMailer:
    """Records messages instead of sending them."""

    def __init__(self, fail_with=None, verify_error=None, delay=0.0):
        self.sent = []
        self.attempts = 0
        self.fail_with = fail_with
        self.verify_error = verify_error
        self.delay = delay
        self.verified = False

    async def send(self, message):
        self.attempts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        return "250 2.0.0 OK fake"

    async def verify(self):
        self.verified = True
        if self.verify_error is not None:
            raise self.verify_error


@pytest.fixture
def public_dir(tmp_path):
    root = tmp_path / "Public"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<html><body>Streamline home</body></html>", encoding="utf-8")
    (root / "css" / "site.css").write_text("body { margin: 0; }", encoding="utf-8")
    return root


@pytest.fixture
def settings(public_dir):
    return Settings(
        _env_file=None,
        SMTP_USER="site@example.com",
        SMTP_PASS="app-password",
        TO_EMAIL="owner@example.com",
        PUBLIC_DIR=str(public_dir),
        MAIL_SEND_TIMEOUT=2.0,
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(settings, mailer):
    with TestClient(create_app(settings=settings, mailer=mailer)) as test_client:
        yield test_client


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def dispatch_logs():
    """Capture records from the dispatcher logger, which does not propagate."""
    logger = logging.getLogger(dispatch_service.__name__)
    handler = RecordingHandler()
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
