"""FastAPI application bootstrap and service wiring."""

from __future__ import annotations

from fastapi import FastAPI

from housing.controllers.assignment_controller import router as assignment_router
from housing.repository.config_repository import HouseConfigRepository
from housing.services.matching_service import RoomAssignmentService
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with its services attached to ``app.state``."""
    settings = settings or get_settings()
    config_repository = HouseConfigRepository(settings=settings)
    assignment_service = RoomAssignmentService(settings=settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
    )
    app.include_router(assignment_router)

    app.state.settings = settings
    app.state.config_repository = config_repository
    app.state.assignment_service = assignment_service

    logger.info(
        "Application created | default_priority_mode=%s | tie_break_epsilon=%g",
        settings.default_priority_mode,
        settings.tie_break_epsilon,
    )
    return app


app = create_app()
