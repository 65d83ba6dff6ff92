"""Runs AppleScript through ``osascript`` and escapes values embedded in scripts.

Every service builds a script string, hands it to :func:`run_script`, and
decodes the text that comes back. Unlike a polling daemon, a one-shot CLI
wants failures to surface, so the runner raises :class:`AppleScriptError`
instead of returning an empty value.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Iterable

logger = logging.getLogger("mac_cli.applescript")

DEFAULT_TIMEOUT = 60.0
LONG_TIMEOUT = 120.0

_SAFE_ID_RE = re.compile(r"[^a-zA-Z0-9_-]")


class AppleScriptError(RuntimeError):
    """Raised when osascript fails, times out, or is unavailable."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


def run_script(script: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Run ``osascript -e script`` and return its trimmed stdout."""
    logger.debug("Running AppleScript (%s chars, timeout=%.0fs)", len(script), timeout)
    try:
        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        logger.debug("AppleScript timed out after %.1fs", timeout)
        raise AppleScriptError(f"AppleScript timed out after {timeout:.0f}s") from exc
    except FileNotFoundError as exc:
        logger.debug("osascript not found; mac-cli requires macOS")
        raise AppleScriptError("osascript not found: mac-cli requires macOS") from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.debug("AppleScript failed (rc=%s): %s", result.returncode, stderr)
        raise AppleScriptError(f"AppleScript failed: {stderr}", stderr=stderr)

    return (result.stdout or "").strip()


def escape(text: str) -> str:
    """Escape ``text`` for use inside an AppleScript string literal."""
    return (
        text
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def sanitize_id(value: str) -> str:
    """Numeric ids pass through; anything else is reduced to ``[A-Za-z0-9_-]``."""
    if value.isdigit() and value.isascii():
        return value
    return _SAFE_ID_RE.sub("_", value)


def quote_list(values: Iterable[str]) -> str:
    """Render ``values`` as the body of an AppleScript list literal."""
    return ", ".join(f'"{escape(value)}"' for value in values)
