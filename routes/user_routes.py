# routes/user_routes.py - User Routes

from typing import Any
from fastapi import APIRouter, Body, Depends

from dependencies import get_meeting_service, get_user_service
from services import MeetingService, UserService

router = APIRouter()

@router.get("/users")
async def list_users(service: UserService = Depends(get_user_service)):
    """List users, newest first"""
    return await service.list_users()

@router.post("/users", status_code=201)
async def create_user(payload: Any = Body(None), service: UserService = Depends(get_user_service)):
    """Create a user; 400 when invalid or the email is taken"""
    return await service.create_user(payload)

@router.get("/users/{user_id}")
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.get_user(user_id)

@router.get("/users/{user_id}/meetings")
async def get_user_meetings(user_id: str, service: MeetingService = Depends(get_meeting_service)):
    """Meetings the user organizes or attends"""
    return await service.list_user_meetings(user_id)
