"""Map lifecycle failures onto HTTP responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.schemas import ErrorResponse, MaintenanceResponse, RentalResponse
from src.domain.entities import MaintenanceRecord, Rental
from src.domain.errors import (
    ConflictError,
    IllegalTransitionError,
    LifecycleError,
    MaintenanceOngoingError,
    NotFoundError,
    ValidationError,
)

_STATUS_CODES: list[tuple[type[LifecycleError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (MaintenanceOngoingError, 403),
    (ConflictError, 409),
    (IllegalTransitionError, 409),
]


def serialize_conflict(row: Any) -> dict[str, Any]:
    if isinstance(row, Rental):
        return {
            "kind": "rental",
            **RentalResponse.model_validate(row).model_dump(mode="json"),
        }
    if isinstance(row, MaintenanceRecord):
        return {
            "kind": "maintenance",
            **MaintenanceResponse.model_validate(row).model_dump(mode="json"),
        }
    return {"kind": type(row).__name__, "id": getattr(row, "id", None)}


async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 400
    )
    body = ErrorResponse(
        detail=str(exc),
        conflicts=[serialize_conflict(row) for row in getattr(exc, "conflicts", [])],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LifecycleError, lifecycle_error_handler)
