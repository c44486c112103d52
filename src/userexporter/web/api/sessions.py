"""REST API for the current session snapshot."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["sessions"])


def _not_ready() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"detail": "No snapshot collected yet"},
    )


@router.get("/sessions")
async def list_sessions(request: Request):
    snapshot = request.app.state.collector.snapshot
    if snapshot is None:
        return _not_ready()
    return snapshot.to_dict()["sessions"]


@router.get("/summary")
async def summary(request: Request):
    snapshot = request.app.state.collector.snapshot
    if snapshot is None:
        return _not_ready()
    data = snapshot.to_dict()
    data.pop("sessions")
    return data
