"""Shared test fixtures for mac-cli tests."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def failed(stderr: str = "boom", returncode: int = 1) -> subprocess.CompletedProcess:
    """A CompletedProcess for an osascript run that errored."""
    return subprocess.CompletedProcess(["osascript"], returncode, stdout="", stderr=stderr)


@dataclass
class FakeOsascript:
    """Stands in for ``subprocess.run``; replays queued outputs and records scripts.

    Each queued entry is stdout text, a ready-made CompletedProcess (see
    :func:`failed`), or an exception to raise.
    """

    outputs: list[Any] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)
    timeouts: list[float | None] = field(default_factory=list)

    def queue(self, *outputs: Any) -> "FakeOsascript":
        self.outputs.extend(outputs)
        return self

    @property
    def last_script(self) -> str:
        return self.scripts[-1]

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        assert cmd[:2] == ["osascript", "-e"]
        self.scripts.append(cmd[2])
        self.timeouts.append(kwargs.get("timeout"))
        out = self.outputs.pop(0) if self.outputs else ""
        if isinstance(out, BaseException):
            raise out
        if isinstance(out, subprocess.CompletedProcess):
            return out
        return subprocess.CompletedProcess(cmd, 0, stdout=out, stderr="")


@pytest.fixture
def osascript(monkeypatch: pytest.MonkeyPatch) -> FakeOsascript:
    fake = FakeOsascript()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep MAC_CLI_* variables and any local .env out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("MAC_CLI_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
