"""
Unit Tests for CLI Commands

Tests the CLI entry points without starting servers or calling OpenAI.
Uses mocks to verify dispatch, exit codes and output.

STAFF ENGINEER PATTERNS:
------------------------
1. Mock the expensive collaborators
2. Test CLI argument parsing
3. Verify exit codes
"""

from unittest.mock import MagicMock, patch

import pytest

from blog_rag.cli import commands
from blog_rag.core import reset_config
from blog_rag.pipeline import PipelineResponse


@pytest.fixture(autouse=True)
def offline_env(monkeypatch):
    monkeypatch.setenv("USE_MOCK_EMBEDDINGS", "true")
    monkeypatch.setenv("USE_MOCK_COMPLETION", "true")
    monkeypatch.setenv("BLOG_RAG_USE_POSTGRES", "false")
    monkeypatch.setenv("PHOENIX_ENABLED", "false")
    reset_config()
    yield
    reset_config()


# ---------------------------------------------------------------------------
# MAIN CLI DISPATCH TESTS
# ---------------------------------------------------------------------------


class TestMainCliDispatch:
    """Test main CLI dispatches to correct handlers."""

    @pytest.mark.parametrize("command,handler", [
        ("ask", "run_ask_cli"),
        ("serve", "run_serve_cli"),
        ("sync", "run_sync_cli"),
        ("embed", "run_embed_cli"),
        ("eval", "run_eval_cli"),
    ])
    def test_main_dispatches(self, command, handler):
        with patch.object(commands, handler, return_value=0) as mock_handler:
            with patch("sys.argv", ["blog-rag", command]):
                result = commands.main()

        mock_handler.assert_called_once()
        assert result == 0

    def test_remaining_args_reinjected(self):
        seen = {}

        def fake_eval():
            import sys
            seen["argv"] = list(sys.argv)
            return 0

        with patch.object(commands, "run_eval_cli", side_effect=fake_eval):
            with patch("sys.argv", ["blog-rag", "eval", "--quiet"]):
                commands.main()

        assert seen["argv"] == ["blog-rag", "--quiet"]

    def test_unknown_command_exits(self):
        with patch("sys.argv", ["blog-rag", "deploy"]):
            with pytest.raises(SystemExit):
                commands.main()

    def test_keyboard_interrupt_returns_130(self):
        with patch.object(commands, "run_ask_cli", side_effect=KeyboardInterrupt):
            with patch("sys.argv", ["blog-rag", "ask"]):
                assert commands.main() == 130


# ---------------------------------------------------------------------------
# SUBCOMMANDS
# ---------------------------------------------------------------------------


class TestAsk:

    def test_ask_prints_answer_and_sources(self, capsys):
        with patch("sys.argv", ["blog-rag", "git"]):
            code = commands.run_ask_cli()

        out = capsys.readouterr().out
        assert code == 0
        assert "Git Branching Strategies" in out
        assert "/git-branching-strategies/" in out

    def test_ask_flushes_tracing_and_closes_pipeline(self):
        pipeline = MagicMock()
        pipeline.answer.return_value = PipelineResponse(answer="ok", sources=[])

        with patch("blog_rag.pipeline.create_pipeline", return_value=pipeline):
            with patch("blog_rag.observability.shutdown_phoenix") as mock_shutdown:
                with patch("sys.argv", ["blog-rag", "anything"]):
                    commands.run_ask_cli()

        pipeline.close.assert_called_once()
        mock_shutdown.assert_called_once()

    def test_ask_failure_exit_code(self, capsys):
        pipeline = MagicMock()
        pipeline.answer.return_value = PipelineResponse.failure()

        with patch("blog_rag.pipeline.create_pipeline", return_value=pipeline):
            with patch("sys.argv", ["blog-rag", "anything"]):
                assert commands.run_ask_cli() == 1


class TestServe:

    def test_serve_runs_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            with patch("sys.argv", ["blog-rag", "--port", "9000"]):
                assert commands.run_serve_cli() == 0

        _, kwargs = mock_run.call_args
        assert kwargs["port"] == 9000
        assert kwargs["host"] == "127.0.0.1"

    def test_serve_flushes_tracing_when_server_stops(self):
        with patch("uvicorn.run", side_effect=KeyboardInterrupt):
            with patch("blog_rag.observability.shutdown_phoenix") as mock_shutdown:
                with patch("sys.argv", ["blog-rag"]):
                    with pytest.raises(KeyboardInterrupt):
                        commands.run_serve_cli()

        mock_shutdown.assert_called_once()


class TestSyncAndEmbed:

    def test_sync_with_embed(self, tmp_path, capsys):
        (tmp_path / "post.md").write_text(
            "---\ntitle: Git Tips\nstatus: published\n---\nUse branches.",
            encoding="utf-8",
        )

        with patch("sys.argv", ["blog-rag", str(tmp_path), "--embed"]):
            code = commands.run_sync_cli()

        out = capsys.readouterr().out
        assert code == 0
        assert "Synced 1 posts (1 published)" in out
        assert "Embedded: 1/1" in out

    def test_embed_on_empty_store(self, capsys):
        with patch("sys.argv", ["blog-rag"]):
            assert commands.run_embed_cli() == 0

        assert "Embedded: 0/0" in capsys.readouterr().out


class TestEval:

    def test_eval_gate_passes_on_sample_corpus(self, capsys):
        with patch("sys.argv", ["blog-rag"]):
            code = commands.run_eval_cli()

        out = capsys.readouterr().out
        assert code == 0
        assert "RETRIEVAL EVAL GATE: PASSED" in out

    def test_eval_gate_fails_with_impossible_threshold(self, capsys):
        with patch("sys.argv", ["blog-rag", "--threshold", "1.5", "--quiet"]):
            assert commands.run_eval_cli() == 1
