"""
Tests for GitHub token resolution.
"""

import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from pr_reviewer.credentials import CredentialResolver, CredentialSource
from pr_reviewer.exceptions import NoCredentialError


def gh_result(stdout):
    return subprocess.CompletedProcess(["gh", "auth", "token"], 0, stdout=stdout, stderr="")


def make_resolver(tmp_path, environ=None, runner=None):
    return CredentialResolver(
        environ={} if environ is None else environ,
        env_file=str(tmp_path / ".env"),
        runner=runner or MagicMock(side_effect=FileNotFoundError("gh")),
    )


def test_explicit_environment_token_wins(tmp_path):
    (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\n")
    runner = MagicMock(return_value=gh_result("from-gh\n"))
    resolver = make_resolver(tmp_path, {"GITHUB_TOKEN": "from-env"}, runner)

    credential = resolver.resolve()

    assert credential.token == "from-env"
    assert credential.source == CredentialSource.ENVIRONMENT
    runner.assert_not_called()


def test_dotenv_token_used_when_environment_empty(tmp_path):
    (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\nLLM_API_KEY=llm-key\n")
    environ = {}
    resolver = make_resolver(tmp_path, environ)

    credential = resolver.resolve()

    assert credential.token == "from-dotenv"
    assert credential.source == CredentialSource.DOTENV
    assert environ["LLM_API_KEY"] == "llm-key"


def test_dotenv_does_not_override_existing_values(tmp_path):
    (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\nLLM_MODEL=file-model\n")
    environ = {"LLM_MODEL": "env-model"}
    make_resolver(tmp_path, environ).resolve()

    assert environ["LLM_MODEL"] == "env-model"


def test_gh_cli_token_is_trimmed_and_cached(tmp_path):
    environ = {}
    runner = MagicMock(return_value=gh_result("  gho_abc123\n"))
    resolver = make_resolver(tmp_path, environ, runner)

    credential = resolver.resolve()

    assert credential.token == "gho_abc123"
    assert credential.source == CredentialSource.GH_CLI
    assert environ["GITHUB_TOKEN"] == "gho_abc123"
    assert runner.call_args[0][0] == ["gh", "auth", "token"]


def test_resolution_is_idempotent(tmp_path):
    runner = MagicMock(return_value=gh_result("gho_abc123\n"))
    resolver = make_resolver(tmp_path, {}, runner)

    first = resolver.resolve()
    second = resolver.resolve()

    assert first == second
    assert runner.call_count == 1


def test_missing_gh_cli_raises_no_credential(tmp_path, caplog):
    resolver = make_resolver(tmp_path, {})

    with caplog.at_level(logging.WARNING, logger="pr_reviewer"):
        with pytest.raises(NoCredentialError) as excinfo:
            resolver.resolve()

    assert "gh auth login" in str(excinfo.value)
    assert "command not found" in caplog.text


def test_failed_gh_cli_raises_no_credential(tmp_path):
    error = subprocess.CalledProcessError(1, ["gh", "auth", "token"], stderr="not logged in")
    resolver = make_resolver(tmp_path, {}, MagicMock(side_effect=error))

    with pytest.raises(NoCredentialError):
        resolver.resolve()


def test_empty_gh_output_raises_no_credential(tmp_path):
    resolver = make_resolver(tmp_path, {}, MagicMock(return_value=gh_result("\n")))

    with pytest.raises(NoCredentialError):
        resolver.resolve()


def test_unreadable_dotenv_is_logged_and_skipped(tmp_path, caplog):
    (tmp_path / ".env").write_text("GITHUB_TOKEN=unused\n")
    runner = MagicMock(return_value=gh_result("from-gh\n"))
    resolver = make_resolver(tmp_path, {}, runner)

    with patch("pr_reviewer.credentials.dotenv_values", side_effect=OSError("denied")):
        with caplog.at_level(logging.WARNING, logger="pr_reviewer"):
            credential = resolver.resolve()

    assert credential.source == CredentialSource.GH_CLI
    assert "Failed to load .env file" in caplog.text


def test_dotenv_loaded_once(tmp_path):
    (tmp_path / ".env").write_text("LLM_MODEL=file-model\n")
    resolver = make_resolver(tmp_path, {})

    assert resolver.load_dotenv() is True
    assert resolver.load_dotenv() is False


def test_marks_process_as_local_run(tmp_path):
    environ = {"GITHUB_TOKEN": "t"}
    make_resolver(tmp_path, environ).resolve()
    assert environ["GITHUB_ACTION"] == "local"

    environ = {"GITHUB_TOKEN": "t", "GITHUB_ACTION": "run-step"}
    make_resolver(tmp_path, environ).resolve()
    assert environ["GITHUB_ACTION"] == "run-step"


def test_module_level_resolve_token(tmp_path, monkeypatch):
    from pr_reviewer import credentials

    resolver = make_resolver(tmp_path, {"GITHUB_TOKEN": "module-token"})
    monkeypatch.setattr(credentials, "_default_resolver", resolver)

    assert credentials.resolve_token() == "module-token"
