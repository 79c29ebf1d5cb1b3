# database/__init__.py - Database package initialization

from .models import (
    User, Meeting,
    IUserRepository, IMeetingRepository,
    UserRepository, MeetingRepository,
    DIContainer
)
from .store import ASCENDING, DESCENDING, DatabaseManager, DocumentCollection

__all__ = [
    'User', 'Meeting',
    'IUserRepository', 'IMeetingRepository',
    'UserRepository', 'MeetingRepository',
    'DatabaseManager', 'DocumentCollection', 'DIContainer',
    'ASCENDING', 'DESCENDING'
]
