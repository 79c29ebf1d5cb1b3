"""FastAPI dependencies handing the process-scoped store to request handlers.

The DIContainer is created in the application lifespan and kept on
``app.state``; services are cheap per-request wrappers around its repositories.
"""

from fastapi import Depends, Request

from config_manager import ConfigManager
from database import DIContainer
from services import MeetingService, UserService


def get_container(request: Request) -> DIContainer:
    """Get the container opened at application startup."""
    return request.app.state.container


def get_app_config(request: Request) -> ConfigManager:
    return request.app.state.config


def get_user_service(container: DIContainer = Depends(get_container)) -> UserService:
    return UserService(container.get_user_repository())


def get_meeting_service(
    container: DIContainer = Depends(get_container),
    config: ConfigManager = Depends(get_app_config),
) -> MeetingService:
    return MeetingService(
        container.get_user_repository(),
        container.get_meeting_repository(),
        upcoming_limit=config.get_upcoming_limit(),
    )
