# services/__init__.py - Services package initialization

from .meeting_service import (
    MeetingService, ReferenceChecker, MeetingAssembler, DEFAULT_UPCOMING_LIMIT
)
from .user_service import UserService

__all__ = [
    'MeetingService', 'ReferenceChecker', 'MeetingAssembler',
    'UserService', 'DEFAULT_UPCOMING_LIMIT'
]
