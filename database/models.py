# database/models.py - Domain Models, Repositories and DI Container

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Iterable
from dataclasses import dataclass, field
from datetime import datetime
import logging

from error_handler import ConflictError
from utils import format_timestamp, parse_timestamp
from .store import ASCENDING, DESCENDING, DatabaseManager, DocumentCollection

logger = logging.getLogger(__name__)

def _timestamp(value: Optional[str]) -> Optional[datetime]:
    return parse_timestamp(value) if value else None

def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return format_timestamp(value) if value else None

# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass
class User:
    """User domain model"""
    user_id: str
    name: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> 'User':
        return cls(
            user_id=document['id'],
            name=document['name'],
            email=document['email'],
            created_at=_timestamp(document.get('createdAt')),
            updated_at=_timestamp(document.get('updatedAt'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.user_id,
            'name': self.name,
            'email': self.email,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at)
        }

    def to_summary(self) -> Dict[str, Any]:
        """Fields embedded into meetings that reference this user"""
        return {
            'id': self.user_id,
            'name': self.name,
            'email': self.email
        }

@dataclass
class Meeting:
    """Meeting domain model; organizer and attendees are user ids"""
    meeting_id: str
    title: str
    start_date: datetime
    end_date: datetime
    organizer_id: str
    attendee_ids: List[str] = field(default_factory=list)
    description: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> 'Meeting':
        return cls(
            meeting_id=document['id'],
            title=document['title'],
            start_date=parse_timestamp(document['startDate']),
            end_date=parse_timestamp(document['endDate']),
            organizer_id=document['organizer'],
            attendee_ids=list(document.get('attendees') or []),
            description=document.get('description'),
            location=document.get('location'),
            created_at=_timestamp(document.get('createdAt')),
            updated_at=_timestamp(document.get('updatedAt'))
        )

    @property
    def referenced_user_ids(self) -> List[str]:
        return [self.organizer_id] + self.attendee_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.meeting_id,
            'title': self.title,
            'description': self.description,
            'startDate': _isoformat(self.start_date),
            'endDate': _isoformat(self.end_date),
            'location': self.location,
            'organizer': self.organizer_id,
            'attendees': list(self.attendee_ids),
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at)
        }

# =============================================================================
# REPOSITORY INTERFACES (Following Repository Pattern)
# =============================================================================

class BaseRepository(ABC):
    """Base repository interface"""

    @abstractmethod
    async def create(self, document: Dict[str, Any]) -> Any:
        """Create a new entity"""
        pass

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[Any]:
        """Get entity by ID"""
        pass

    @abstractmethod
    async def list_all(self) -> List[Any]:
        """Get every entity in the repository's default order"""
        pass

class IUserRepository(BaseRepository):
    """User repository interface"""

    @abstractmethod
    async def get_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        """Get the users that exist among the given ids"""
        pass

    @abstractmethod
    async def count_by_ids(self, user_ids: Iterable[str]) -> int:
        """Count the users that exist among the given ids"""
        pass

class IMeetingRepository(BaseRepository):
    """Meeting repository interface"""

    @abstractmethod
    async def update(self, meeting_id: str, changes: Dict[str, Any]) -> Optional[Meeting]:
        """Update a meeting, returning None when it does not exist"""
        pass

    @abstractmethod
    async def delete(self, meeting_id: str) -> bool:
        """Delete a meeting"""
        pass

    @abstractmethod
    async def list_upcoming(self, now: datetime, limit: int) -> List[Meeting]:
        """Get the next meetings starting at or after now"""
        pass

    @abstractmethod
    async def get_user_meetings(self, user_id: str) -> List[Meeting]:
        """Get all meetings a user organizes or attends"""
        pass

# =============================================================================
# CONCRETE REPOSITORY IMPLEMENTATIONS
# =============================================================================

class UserRepository(IUserRepository):
    """User repository backed by the users collection"""

    def __init__(self, collection: DocumentCollection):
        self.collection = collection

    async def create(self, document: Dict[str, Any]) -> User:
        """Create a new user; the store rejects duplicate emails"""
        try:
            created = await self.collection.insert(document)
        except ConflictError:
            raise ConflictError("Email already exists")
        return User.from_document(created)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        document = await self.collection.find_by_id(user_id)
        return User.from_document(document) if document else None

    async def list_all(self) -> List[User]:
        """Newest users first"""
        documents = await self.collection.find(sort=[('createdAt', DESCENDING)])
        return [User.from_document(document) for document in documents]

    async def get_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        documents = await self.collection.find({'id': {'$in': list(set(user_ids))}})
        return [User.from_document(document) for document in documents]

    async def count_by_ids(self, user_ids: Iterable[str]) -> int:
        return await self.collection.count({'id': {'$in': list(set(user_ids))}})

class MeetingRepository(IMeetingRepository):
    """Meeting repository backed by the meetings collection"""

    def __init__(self, collection: DocumentCollection):
        self.collection = collection

    async def create(self, document: Dict[str, Any]) -> Meeting:
        created = await self.collection.insert(document)
        return Meeting.from_document(created)

    async def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        document = await self.collection.find_by_id(meeting_id)
        return Meeting.from_document(document) if document else None

    async def list_all(self) -> List[Meeting]:
        """All meetings, earliest start first"""
        documents = await self.collection.find(sort=[('startDate', ASCENDING)])
        return [Meeting.from_document(document) for document in documents]

    async def update(self, meeting_id: str, changes: Dict[str, Any]) -> Optional[Meeting]:
        document = await self.collection.update_by_id(meeting_id, changes)
        return Meeting.from_document(document) if document else None

    async def delete(self, meeting_id: str) -> bool:
        return await self.collection.delete_by_id(meeting_id)

    async def list_upcoming(self, now: datetime, limit: int) -> List[Meeting]:
        documents = await self.collection.find(
            {'startDate': {'$gte': format_timestamp(now)}},
            sort=[('startDate', ASCENDING)],
            limit=limit
        )
        return [Meeting.from_document(document) for document in documents]

    async def get_user_meetings(self, user_id: str) -> List[Meeting]:
        documents = await self.collection.find(
            {'$or': [{'organizer': user_id}, {'attendees': user_id}]},
            sort=[('startDate', ASCENDING)]
        )
        return [Meeting.from_document(document) for document in documents]

# =============================================================================
# DEPENDENCY INJECTION CONTAINER
# =============================================================================

class DIContainer:
    """Process-scoped owner of the store connection and the repositories"""

    def __init__(self, db_path: str):
        self._db_manager = DatabaseManager(db_path)
        self._repositories = {}

    async def start(self) -> None:
        await self._db_manager.connect()

    async def close(self) -> None:
        await self._db_manager.close()

    def get_user_repository(self) -> IUserRepository:
        """Get user repository instance"""
        if 'user' not in self._repositories:
            self._repositories['user'] = UserRepository(DocumentCollection(self._db_manager, 'users'))
        return self._repositories['user']

    def get_meeting_repository(self) -> IMeetingRepository:
        """Get meeting repository instance"""
        if 'meeting' not in self._repositories:
            self._repositories['meeting'] = MeetingRepository(DocumentCollection(self._db_manager, 'meetings'))
        return self._repositories['meeting']

    def get_db_manager(self) -> DatabaseManager:
        """Get database manager instance"""
        return self._db_manager
