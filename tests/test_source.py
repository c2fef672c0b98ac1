from __future__ import annotations

import logging
import subprocess
from typing import Any, List

import pytest

from models.readings import ErrorKind
from services.errors import SourceUnavailable
from services.source import SensorsCommandSource, StaticTextSource, build_default_source
from settings import get_settings


def _install_run(monkeypatch, result: Any, calls: List[dict]) -> None:
    def fake_run(args, **kwargs):
        calls.append({"args": args, **kwargs})
        if isinstance(result, BaseException):
            raise result
        return result

    monkeypatch.setattr("services.source.subprocess.run", fake_run)


def test_run_and_capture_returns_decoded_stdout(monkeypatch) -> None:
    calls: List[dict] = []
    completed = subprocess.CompletedProcess(
        args=["sensors"], returncode=0, stdout="temp1: +20.0°C\n".encode("utf-8"), stderr=b""
    )
    _install_run(monkeypatch, completed, calls)

    output = SensorsCommandSource(command="sensors", timeout=2.5).run_and_capture()

    assert output == "temp1: +20.0°C\n"
    assert calls[0]["args"] == ["sensors"]
    assert calls[0]["timeout"] == 2.5
    assert calls[0]["capture_output"] is True


def test_invalid_utf8_is_replaced(monkeypatch) -> None:
    completed = subprocess.CompletedProcess(
        args=["sensors"], returncode=0, stdout=b"chip\xff\n", stderr=b""
    )
    _install_run(monkeypatch, completed, [])

    output = SensorsCommandSource().run_and_capture()

    assert output == "chip�\n"


def test_non_zero_exit_includes_stderr(monkeypatch, caplog) -> None:
    completed = subprocess.CompletedProcess(
        args=["sensors"], returncode=1, stdout=b"", stderr=b"No sensors found!\n"
    )
    _install_run(monkeypatch, completed, [])

    with caplog.at_level(logging.WARNING, logger="services.source"):
        with pytest.raises(SourceUnavailable) as exc_info:
            SensorsCommandSource().run_and_capture()

    assert exc_info.value.kind is ErrorKind.source_unavailable
    assert str(exc_info.value) == "sensors command failed: No sensors found!"
    records = [record for record in caplog.records if record.name == "services.source"]
    assert any(getattr(record, "exit_code", None) == 1 for record in records)


def test_timeout_is_reported_as_unavailable(monkeypatch) -> None:
    _install_run(monkeypatch, subprocess.TimeoutExpired(cmd=["sensors"], timeout=1.0), [])

    with pytest.raises(SourceUnavailable) as exc_info:
        SensorsCommandSource(timeout=1.0).run_and_capture()

    assert "timed out after 1.0s" in str(exc_info.value)


def test_missing_command_is_reported_as_unavailable() -> None:
    source = SensorsCommandSource(command="sensory-test-command-that-does-not-exist")

    with pytest.raises(SourceUnavailable) as exc_info:
        source.run_and_capture()

    assert str(exc_info.value).startswith(
        "Failed to execute sensory-test-command-that-does-not-exist command"
    )


def test_static_text_source_replays_text() -> None:
    source = StaticTextSource("chip-0\n")

    assert source.run_and_capture() == "chip-0\n"
    assert source.run_and_capture() == "chip-0\n"


def test_default_source_uses_settings(monkeypatch) -> None:
    monkeypatch.setenv("SENSORS_COMMAND", "/usr/local/bin/sensors")
    monkeypatch.setenv("SENSORS_TIMEOUT_SECONDS", "1.5")
    get_settings.cache_clear()

    try:
        source = build_default_source()
        assert source.command == "/usr/local/bin/sensors"
        assert source.timeout == 1.5
    finally:
        get_settings.cache_clear()
