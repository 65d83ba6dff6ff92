"""Tests for applescript.py; every subprocess.run call is mocked."""

from __future__ import annotations

import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from mac_cli.applescript import (
    DEFAULT_TIMEOUT,
    AppleScriptError,
    escape,
    quote_list,
    run_script,
    sanitize_id,
)


def _ok_result(stdout: str) -> MagicMock:
    r = MagicMock()
    r.returncode = 0
    r.stdout = stdout
    r.stderr = ""
    return r


def _err_result(stderr: str = "boom") -> MagicMock:
    r = MagicMock()
    r.returncode = 1
    r.stdout = ""
    r.stderr = stderr
    return r


class TestRunScript:
    def test_returns_trimmed_stdout_on_success(self):
        with patch("subprocess.run", return_value=_ok_result("  hello\n")):
            assert run_script('return "hello"') == "hello"

    def test_passes_script_as_single_argument(self):
        with patch("subprocess.run", return_value=_ok_result("")) as mock_run:
            run_script('tell application "Mail" to return 1', timeout=5)
        args, kwargs = mock_run.call_args
        assert args[0] == ["osascript", "-e", 'tell application "Mail" to return 1']
        assert kwargs["timeout"] == 5
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True

    def test_default_timeout(self):
        with patch("subprocess.run", return_value=_ok_result("")) as mock_run:
            run_script("return 1")
        assert mock_run.call_args.kwargs["timeout"] == DEFAULT_TIMEOUT

    def test_empty_stdout_is_empty_string(self):
        with patch("subprocess.run", return_value=_ok_result("")):
            assert run_script("return") == ""

    def test_nonzero_exit_raises_with_stderr(self):
        with patch("subprocess.run", return_value=_err_result("execution error: Message not found (-2700)\n")):
            with pytest.raises(AppleScriptError) as excinfo:
                run_script("x")
        assert str(excinfo.value) == "AppleScript failed: execution error: Message not found (-2700)"
        assert excinfo.value.stderr == "execution error: Message not found (-2700)"

    def test_timeout_raises(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("osascript", 3)):
            with pytest.raises(AppleScriptError, match="timed out after 3s"):
                run_script("x", timeout=3)

    def test_missing_osascript_raises(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("osascript")):
            with pytest.raises(AppleScriptError, match="requires macOS"):
                run_script("x")

    def test_failures_log_at_debug_only(self, caplog):
        caplog.set_level(logging.DEBUG, logger="mac_cli.applescript")
        with patch("subprocess.run", return_value=_err_result("execution error: User canceled. (-128)")):
            with pytest.raises(AppleScriptError):
                run_script("x")
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("osascript", 3)):
            with pytest.raises(AppleScriptError):
                run_script("x", timeout=3)

        assert any("failed" in r.getMessage() for r in caplog.records)
        assert any("timed out" in r.getMessage() for r in caplog.records)
        assert all(r.levelno == logging.DEBUG for r in caplog.records)

    def test_error_is_a_runtime_error(self):
        with patch("subprocess.run", return_value=_err_result()):
            with pytest.raises(RuntimeError):
                run_script("x")


class TestEscape:
    def test_quotes_and_backslashes(self):
        assert escape('say "hi" \\ bye') == 'say \\"hi\\" \\\\ bye'

    def test_backslash_escaped_before_quote(self):
        assert escape('\\"') == '\\\\\\"'

    def test_control_characters(self):
        assert escape("a\nb\rc\td") == "a\\nb\\rc\\td"

    def test_plain_text_unchanged(self):
        assert escape("Team Meeting") == "Team Meeting"


class TestSanitizeId:
    def test_numeric_id_passes_through(self):
        assert sanitize_id("123456") == "123456"

    def test_injection_characters_replaced(self):
        assert sanitize_id('1 or id is 2"') == "1_or_id_is_2_"

    def test_dashes_and_underscores_kept(self):
        assert sanitize_id("ABC-def_9") == "ABC-def_9"


def test_quote_list_escapes_each_value():
    assert quote_list(["a@x.com", 'b"@y.com']) == '"a@x.com", "b\\"@y.com"'


def test_quote_list_empty():
    assert quote_list([]) == ""
