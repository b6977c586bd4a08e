"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from housing.repository.config_repository import HouseConfigRepository
from housing.services.matching_service import RoomAssignmentService
from housing.utils.config import get_settings


def get_assignment_service(request: Request) -> RoomAssignmentService:
    service = getattr(request.app.state, "assignment_service", None)
    if service is None:
        service = RoomAssignmentService(settings=get_settings())
        request.app.state.assignment_service = service
    return service


def get_config_repository(request: Request) -> HouseConfigRepository:
    repository = getattr(request.app.state, "config_repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Configuration repository is not initialized",
        )
    return repository
