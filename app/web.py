from __future__ import annotations

import math
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.refresher import RefreshController, build_default_controller


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_controller() -> RefreshController:
    return build_default_controller()


def _reload_seconds(interval: float) -> int:
    # Meta refresh only accepts whole seconds.
    return max(1, math.ceil(interval))


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_readings", response_class=HTMLResponse)
async def ui_readings(
    request: Request,
    controller: RefreshController = Depends(get_controller),
) -> HTMLResponse:
    snapshot = controller.current
    return templates.TemplateResponse(
        request,
        "ui/readings.html",
        {
            "snapshot": snapshot,
            "reload_seconds": _reload_seconds(controller.interval),
        },
    )
