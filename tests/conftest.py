"""Pytest configuration and fixtures for the Recap tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from unittest.mock import AsyncMock, Mock

import pytest

from recap.core.config_manager import ConfigManager
from recap.core.orchestrator import RecapOrchestrator
from recap.integrations.linear_client import Issue

LINEAR_KEY = "lin_api_test1234567890"
GEMINI_KEY = "AIzaTestKey1234567890"


@pytest.fixture
def sample_environ():
    """Environment with both keys configured."""
    return {
        "LINEAR_API_KEY": LINEAR_KEY,
        "GEMINI_API_KEY": GEMINI_KEY,
    }


@pytest.fixture
def config_manager(sample_environ):
    return ConfigManager(environ=sample_environ)


@pytest.fixture
def sample_linear_nodes():
    """``assignedIssues.nodes`` as returned by the Linear API."""
    return [
        {
            "id": "issue-1",
            "identifier": "ENG-1",
            "title": "Ship onboarding flow",
            "description": "New user onboarding",
            "completedAt": "2024-01-05T15:30:00.000Z",
            "url": "https://linear.app/acme/issue/ENG-1",
            "state": {"name": "Done"},
            "project": {"name": "Growth"},
            "team": {"key": "ENG"},
            "labels": {"nodes": [{"name": "Feature"}]},
        },
        {
            "id": "issue-2",
            "identifier": "ENG-2",
            "title": "Fix login crash",
            "description": None,
            "completedAt": "2024-01-10T09:00:00.000Z",
            "url": "https://linear.app/acme/issue/ENG-2",
            "state": {"name": "Done"},
            "project": None,
            "team": {"key": "ENG"},
            "labels": {"nodes": []},
        },
    ]


@pytest.fixture
def sample_issues(sample_linear_nodes):
    return [Issue.from_node(node) for node in sample_linear_nodes]


@pytest.fixture
def markdown_files(tmp_path):
    """Two markdown notes and one file that should be ignored."""
    wins = tmp_path / "wins.md"
    wins.write_text("# Wins\n- Led the Q1 launch", encoding="utf-8")

    feedback = tmp_path / "feedback.md"
    feedback.write_text("Peers liked the design reviews.", encoding="utf-8")

    ignored = tmp_path / "notes.txt"
    ignored.write_text("not markdown", encoding="utf-8")

    return [wins, feedback, ignored]


@pytest.fixture
def mock_linear_client(sample_issues):
    client = Mock()
    client.fetch_completed_issues = AsyncMock(return_value=sample_issues)
    return client


@pytest.fixture
def mock_gemini_client():
    client = Mock()
    client.generate_summary = AsyncMock(
        return_value={
            "content": "## Feature Development\n- **Onboarding** shipped",
            "model": "gemini-3-flash-preview",
            "usage": {"total_token_count": 42},
            "generated_at": 1704067200.0,
        }
    )
    return client


@pytest.fixture
def mock_service_factory(mock_linear_client, mock_gemini_client):
    factory = Mock()
    factory.create_linear_client = AsyncMock(return_value=mock_linear_client)
    factory.create_gemini_client = AsyncMock(return_value=mock_gemini_client)
    factory.close_all = AsyncMock()
    factory.test_connections = AsyncMock(return_value={"linear": True, "gemini": True})
    return factory


@pytest.fixture
def orchestrator(config_manager, mock_service_factory):
    """Orchestrator wired to mocked clients."""
    return RecapOrchestrator(config_manager, service_factory=mock_service_factory)
