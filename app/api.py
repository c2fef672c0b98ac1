"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import SectionModel, SnapshotResponse
from services.refresher import RefreshController, build_default_controller

router = APIRouter()


def get_controller() -> RefreshController:
    return build_default_controller()


@router.get(
    "/readings",
    response_model=SnapshotResponse,
    summary="Fetch the current sensor snapshot.",
)
async def get_readings(
    controller: RefreshController = Depends(get_controller),
) -> SnapshotResponse:
    return SnapshotResponse.from_snapshot(controller.current)


@router.get(
    "/readings/sections/{name}",
    response_model=SectionModel,
    summary="Fetch a single section of the current snapshot by name.",
)
async def get_section(
    name: str,
    controller: RefreshController = Depends(get_controller),
) -> SectionModel:
    snapshot = controller.current
    if snapshot.error is not None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=snapshot.error.message,
        )
    for section in snapshot.sections:
        if section.name == name:
            return SectionModel.from_section(section)
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Section {name!r} not found.",
    )


@router.post(
    "/readings/refresh",
    response_model=SnapshotResponse,
    summary="Run one refresh tick immediately and return the new snapshot.",
)
async def refresh_readings(
    controller: RefreshController = Depends(get_controller),
) -> SnapshotResponse:
    snapshot = await controller.refresh_async()
    return SnapshotResponse.from_snapshot(snapshot)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /readings for the current sensor snapshot."}
