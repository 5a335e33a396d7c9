"""Tests for the command runner and its error types."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from reclaimer.utils.command import (
    CommandError,
    CommandNotFoundError,
    CommandResult,
    CommandRunner,
    CommandTimeoutError,
    OutputParseError,
)


def completed(returncode=0, stdout="", stderr=""):
    process = MagicMock()
    process.returncode = returncode
    process.stdout = stdout
    process.stderr = stderr
    return process


class TestCommandRunner:
    """Tests for CommandRunner.run and succeeds."""

    @patch("reclaimer.utils.command.subprocess.run")
    def test_run_captures_output(self, mock_run):
        mock_run.return_value = completed(stdout="hello\n")
        result = CommandRunner().run(["echo", "hello"], timeout=5)

        assert result.ok
        assert result.stdout == "hello\n"
        mock_run.assert_called_once_with(
            ["echo", "hello"], capture_output=True, text=True, timeout=5, check=False
        )

    @patch("reclaimer.utils.command.subprocess.run")
    def test_default_timeout_used(self, mock_run):
        mock_run.return_value = completed()
        CommandRunner(default_timeout=30).run(["true"])
        assert mock_run.call_args.kwargs["timeout"] == 30

    @patch("reclaimer.utils.command.subprocess.run")
    def test_nonzero_exit_raises(self, mock_run):
        mock_run.return_value = completed(returncode=1, stderr="permission denied\n")
        with pytest.raises(CommandError) as exc_info:
            CommandRunner().run(["docker", "ps"])

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "permission denied"
        assert "docker ps" in str(exc_info.value)

    @patch("reclaimer.utils.command.subprocess.run")
    def test_nonzero_exit_without_check(self, mock_run):
        mock_run.return_value = completed(returncode=7, stdout="{}")
        result = CommandRunner().run(["minikube", "status"], check=False)
        assert result.returncode == 7
        assert not result.ok

    @patch("reclaimer.utils.command.subprocess.run")
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError("no such file")
        with pytest.raises(CommandNotFoundError, match="not found on PATH"):
            CommandRunner().run(["kubectl", "version"])

    @patch("reclaimer.utils.command.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["kubectl"], 75)
        with pytest.raises(CommandTimeoutError) as exc_info:
            CommandRunner().run(["kubectl", "delete", "namespace", "web"], timeout=75)
        assert exc_info.value.timeout == 75
        assert "timed out after 75s" in str(exc_info.value)

    @patch("reclaimer.utils.command.subprocess.run")
    def test_succeeds_swallows_errors(self, mock_run):
        mock_run.side_effect = FileNotFoundError()
        assert CommandRunner().succeeds(["docker", "info"]) is False

        mock_run.side_effect = None
        mock_run.return_value = completed(returncode=1)
        assert CommandRunner().succeeds(["docker", "info"]) is False

        mock_run.return_value = completed()
        assert CommandRunner().succeeds(["docker", "info"]) is True

    @patch("reclaimer.utils.command.shutil.which")
    def test_which(self, mock_which):
        mock_which.return_value = "/usr/bin/docker"
        assert CommandRunner().which("docker") == "/usr/bin/docker"


class TestCommandResult:
    """Tests for output parsing helpers."""

    def test_lines_strip_blank(self):
        result = CommandResult(["x"], 0, stdout="a\n\n  b  \n")
        assert result.lines() == ["a", "b"]

    def test_json(self):
        assert CommandResult(["x"], 0, stdout='{"items": []}').json() == {"items": []}

    def test_invalid_json(self):
        with pytest.raises(OutputParseError):
            CommandResult(["x"], 0, stdout="not json").json()

    def test_json_lines(self):
        result = CommandResult(["x"], 0, stdout='{"ID": "a"}\n{"ID": "b"}\n')
        assert [d["ID"] for d in result.json_lines()] == ["a", "b"]

    def test_invalid_json_line(self):
        with pytest.raises(OutputParseError):
            CommandResult(["x"], 0, stdout='{"ID": "a"}\n{broken\n').json_lines()

    def test_parse_error_is_command_error(self):
        assert issubclass(OutputParseError, CommandError)
