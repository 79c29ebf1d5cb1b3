# services/user_service.py - User registration and lookup

from typing import Any, Dict, List
import logging

from database.models import IUserRepository
from error_handler import NotFoundError, ValidationError
from utils import validate_object_id
from validators import validate_user_payload

logger = logging.getLogger(__name__)

class UserService:
    """Request-level user operations"""

    def __init__(self, user_repository: IUserRepository):
        self.users = user_repository

    async def list_users(self) -> List[Dict[str, Any]]:
        """All users, newest first"""
        users = await self.users.list_all()
        return [user.to_dict() for user in users]

    async def create_user(self, payload: Any) -> Dict[str, Any]:
        user_data, errors = validate_user_payload(payload)
        if errors:
            raise ValidationError(errors)

        # Duplicate emails surface from the store as ConflictError
        user = await self.users.create(user_data.to_document())
        logger.info(f"User created: {user.user_id}")
        return user.to_dict()

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        user = await self.users.get_by_id(user_id.lower()) if validate_object_id(user_id) else None
        if user is None:
            raise NotFoundError("User not found", resource="user")
        return user.to_dict()
