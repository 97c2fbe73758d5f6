"""Tests for the command line entry point."""

import sys
from unittest.mock import patch

import pytest

from recap.main import main, parse_arguments, run_headless
from recap.utils.exceptions import GeminiIntegrationError, LinearIntegrationError


class TestParseArguments:
    """Test suite for argument parsing."""

    def test_headless_options(self):
        args = parse_arguments(
            [
                "--no-gui",
                "--start",
                "2024-01-01",
                "--end",
                "2024-01-31",
                "--doc",
                "a.md",
                "--doc",
                "b.md",
                "--output",
                "summary.pdf",
                "--format",
                "pdf",
            ]
        )

        assert args.no_gui is True
        assert args.start == "2024-01-01"
        assert args.end == "2024-01-31"
        assert args.doc == ["a.md", "b.md"]
        assert args.output == "summary.pdf"
        assert args.format == "pdf"

    def test_defaults(self):
        args = parse_arguments([])

        assert args.no_gui is False
        assert args.doc == []
        assert args.log_level is None

    def test_rejects_unknown_format(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--format", "docx"])


class TestRunHeadless:
    """Test suite for the headless run."""

    @pytest.mark.asyncio
    async def test_prints_summary(self, config_manager, orchestrator, capsys):
        ok = await run_headless(
            config_manager, "2024-01-01", "2024-01-31", orchestrator=orchestrator
        )

        assert ok is True
        captured = capsys.readouterr()
        assert "## Feature Development" in captured.out
        assert "Fetched 2 issues" in captured.err

    @pytest.mark.asyncio
    async def test_default_period(
        self, config_manager, orchestrator, mock_linear_client
    ):
        await run_headless(config_manager, None, None, orchestrator=orchestrator)

        start, end = mock_linear_client.fetch_completed_issues.call_args.args
        assert (end - start).days == 30

    @pytest.mark.asyncio
    async def test_writes_output(
        self, config_manager, orchestrator, markdown_files, tmp_path, capsys
    ):
        target = tmp_path / "summary.md"

        ok = await run_headless(
            config_manager,
            "2024-01-01",
            "2024-01-31",
            documents=markdown_files,
            output=str(target),
            orchestrator=orchestrator,
        )

        assert ok is True
        assert "## Feature Development" in target.read_text(encoding="utf-8")
        assert capsys.readouterr().out == ""

    @pytest.mark.asyncio
    async def test_fetch_failure(
        self, config_manager, orchestrator, mock_linear_client, capsys
    ):
        mock_linear_client.fetch_completed_issues.side_effect = LinearIntegrationError(
            "Authentication required"
        )

        ok = await run_headless(
            config_manager, "2024-01-01", "2024-01-31", orchestrator=orchestrator
        )

        assert ok is False
        assert "Error: Authentication required" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_generation_failure(
        self, config_manager, orchestrator, mock_gemini_client, capsys
    ):
        mock_gemini_client.generate_summary.side_effect = GeminiIntegrationError(
            "Empty response from Gemini"
        )

        ok = await run_headless(
            config_manager, "2024-01-01", "2024-01-31", orchestrator=orchestrator
        )

        assert ok is False
        assert "Empty response from Gemini" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_half_open_period(self, config_manager, orchestrator, capsys):
        ok = await run_headless(
            config_manager, "2024-01-01", None, orchestrator=orchestrator
        )

        assert ok is False
        assert "Please select a period" in capsys.readouterr().err


def test_main_headless_exit_code(tmp_path):
    with patch("recap.main.setup_application_paths", return_value=tmp_path), patch(
        "recap.main.setup_logging"
    ), patch("recap.main.run_headless", return_value=None) as run, patch(
        "recap.main.asyncio.run", return_value=False
    ), patch.object(sys, "excepthook"):
        exit_code = main(["--no-gui", "--start", "2024-01-01", "--end", "2024-01-02"])

    assert exit_code == 1
    run.assert_called_once()
