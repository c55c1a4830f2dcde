"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from email_sender.domain.emails.repository import EmailRepository
from email_sender.domain.emails.router import get_email_repository
from email_sender.main import app


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "emails.json"


@pytest.fixture
def repo(db_path: Path) -> EmailRepository:
    return EmailRepository(db_path)


@pytest.fixture
def sample_email() -> dict:
    """Fields of a sent email as the service records them."""
    return {
        "to": "alice@example.com",
        "subject": "Quarterly report",
        "message": "Hi Alice,\nThe report is attached.",
        "attachments": ["report.pdf"],
        "messageId": "<abc123@localhost>",
        "status": "sent",
    }


@pytest.fixture
def mock_send():
    """Replace SMTP dispatch with a stub that always succeeds."""
    with patch(
        "email_sender.domain.emails.service.send_email",
        new=AsyncMock(return_value={"messageId": "<abc123@localhost>", "success": True}),
    ) as mocked:
        yield mocked


@pytest.fixture
def client(repo: EmailRepository):
    # Lifespan (SMTP check) is skipped because the client is not used as a context manager
    app.dependency_overrides[get_email_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()
