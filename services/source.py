"""Runs the external ``sensors`` command and captures its output."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Protocol

from services.errors import SourceUnavailable
from settings import get_settings

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    def run_and_capture(self) -> str: ...


class SensorsCommandSource:
    """Invokes a command without arguments and returns its decoded stdout."""

    def __init__(self, command: str = "sensors", timeout: Optional[float] = 5.0) -> None:
        self.command = command
        self.timeout = timeout

    def run_and_capture(self) -> str:
        try:
            completed = subprocess.run(
                [self.command],
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            logger.warning("Sensors command timed out", extra={"command": self.command})
            raise SourceUnavailable(
                f"{self.command} command timed out after {self.timeout}s"
            ) from exc
        except OSError as exc:
            logger.warning("Sensors command could not be launched", extra={"command": self.command})
            raise SourceUnavailable(
                f"Failed to execute {self.command} command: {exc}"
            ) from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace")
            logger.warning(
                "Sensors command failed",
                extra={"command": self.command, "exit_code": completed.returncode},
            )
            raise SourceUnavailable(f"{self.command} command failed: {stderr.strip()}")

        return completed.stdout.decode("utf-8", errors="replace")


class StaticTextSource:
    """Replays previously captured output, e.g. a saved ``sensors`` dump."""

    def __init__(self, text: str) -> None:
        self.text = text

    def run_and_capture(self) -> str:
        return self.text


def build_default_source() -> SensorsCommandSource:
    settings = get_settings()
    return SensorsCommandSource(command=settings.sensors_command, timeout=settings.command_timeout)
