import time
from typing import Dict, Iterable, Iterator, List, Union

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from services.errors import SourceUnavailable
from services.refresher import RefreshController

CORETEMP = (
    "coretemp-isa-0000\n"
    "Adapter: ISA adapter\n"
    "Core 0:       +45.0°C  (high = +80.0°C, crit = +100.0°C)\n"
    "Core 1:       +47.0°C  (high = +80.0°C, crit = +100.0°C)\n"
)
ACPI = "acpitz-acpi-0\nAdapter: ACPI interface\ntemp1: +27.8°C\n"


class ScriptedSource:
    def __init__(self, outcomes: Iterable[Union[str, BaseException]]) -> None:
        self.outcomes: List[Union[str, BaseException]] = list(outcomes)
        self.calls = 0

    def run_and_capture(self) -> str:
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _client_for(monkeypatch, source: ScriptedSource, interval: float = 60.0) -> TestClient:
    controllers: Dict[str, RefreshController] = {}

    def build_test_controller(interval_override: float | None = None) -> RefreshController:
        controller = controllers.get("default")
        if controller is None:
            controller = RefreshController(source=source, interval=interval_override or interval)
            controllers["default"] = controller
        return controller

    build_test_controller.cache_clear = controllers.clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_controller", build_test_controller)
    monkeypatch.setattr("app.api.build_default_controller", build_test_controller)
    monkeypatch.setattr("app.web.build_default_controller", build_test_controller)

    return TestClient(create_app())


@pytest.fixture
def api_client(monkeypatch) -> Iterator[TestClient]:
    source = ScriptedSource([CORETEMP, ACPI])
    with _client_for(monkeypatch, source) as client:
        yield client


@pytest.fixture
def failing_client(monkeypatch) -> Iterator[TestClient]:
    source = ScriptedSource([SourceUnavailable("sensors command failed: No sensors found!")])
    with _client_for(monkeypatch, source) as client:
        yield client


def test_get_readings_returns_sections(api_client: TestClient) -> None:
    response = api_client.get("/readings")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["tick"] == 0
    assert payload["error"] is None
    assert payload["taken_at"]
    assert len(payload["sections"]) == 1
    section = payload["sections"][0]
    assert section["name"] == "coretemp-isa-0000"
    assert section["adapter"] == "ISA adapter"
    assert section["entries"][0] == {
        "key": "Core 0",
        "value": "+45.0°C",
        "additional_info": "high = +80.0°C, crit = +100.0°C",
    }
    assert [entry["key"] for entry in section["entries"]] == ["Core 0", "Core 1"]


def test_get_readings_reports_error_snapshot(failing_client: TestClient) -> None:
    response = failing_client.get("/readings")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "error"
    assert payload["sections"] == []
    assert payload["error"] == {
        "kind": "source_unavailable",
        "message": "sensors command failed: No sensors found!",
    }


def test_refresh_replaces_whole_snapshot(api_client: TestClient) -> None:
    response = api_client.post("/readings/refresh")

    assert response.status_code == 200
    payload = response.json()
    assert payload["tick"] == 1
    assert [section["name"] for section in payload["sections"]] == ["acpitz-acpi-0"]

    current = api_client.get("/readings").json()
    assert current["tick"] == 1
    assert [section["name"] for section in current["sections"]] == ["acpitz-acpi-0"]


def test_get_section_by_name(api_client: TestClient) -> None:
    response = api_client.get("/readings/sections/coretemp-isa-0000")

    assert response.status_code == 200
    assert response.json()["adapter"] == "ISA adapter"


def test_get_missing_section_returns_not_found(api_client: TestClient) -> None:
    response = api_client.get("/readings/sections/nvme-pci-0100")

    assert response.status_code == 404
    assert "nvme-pci-0100" in response.json()["detail"]


def test_get_section_during_error_returns_unavailable(failing_client: TestClient) -> None:
    response = failing_client.get("/readings/sections/coretemp-isa-0000")

    assert response.status_code == 503
    assert response.json()["detail"] == "sensors command failed: No sensors found!"


def test_ui_renders_sections(api_client: TestClient) -> None:
    response = api_client.get("/ui")

    assert response.status_code == 200
    assert "coretemp-isa-0000" in response.text
    assert "Adapter: ISA adapter" in response.text
    assert "+45.0°C" in response.text
    assert "Error:" not in response.text


def test_ui_renders_error_only(failing_client: TestClient) -> None:
    response = failing_client.get("/ui")

    assert response.status_code == 200
    assert "Error: sensors command failed: No sensors found!" in response.text
    assert "Adapter:" not in response.text


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}


def test_background_loop_refreshes_snapshot(monkeypatch) -> None:
    source = ScriptedSource([CORETEMP, ACPI])

    with _client_for(monkeypatch, source, interval=0.01) as client:
        deadline = time.monotonic() + 5.0
        payload = client.get("/readings").json()
        while payload["tick"] < 1 and time.monotonic() < deadline:
            time.sleep(0.02)
            payload = client.get("/readings").json()

    assert payload["tick"] >= 1
    assert [section["name"] for section in payload["sections"]] == ["acpitz-acpi-0"]
