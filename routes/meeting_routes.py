# routes/meeting_routes.py - Meeting Management Routes

from typing import Any
from fastapi import APIRouter, Body, Depends

from dependencies import get_meeting_service
from services import MeetingService
from utils import utc_now

router = APIRouter()

# =============================================================================
# MEETING QUERIES
# =============================================================================

@router.get("/meetings")
async def list_meetings(service: MeetingService = Depends(get_meeting_service)):
    """All meetings, earliest start first"""
    return await service.list_meetings()

# Registered before /meetings/{meeting_id} so "upcoming" is not taken for an id
@router.get("/meetings/upcoming")
async def list_upcoming_meetings(service: MeetingService = Depends(get_meeting_service)):
    """Next meetings starting from now"""
    now = utc_now()
    return await service.list_upcoming(now)

@router.get("/meetings/{meeting_id}")
async def get_meeting(meeting_id: str, service: MeetingService = Depends(get_meeting_service)):
    return await service.get_meeting(meeting_id)

# =============================================================================
# MEETING MANAGEMENT
# =============================================================================

@router.post("/meetings", status_code=201)
async def create_meeting(payload: Any = Body(None), service: MeetingService = Depends(get_meeting_service)):
    """Create a meeting after validating it and its organizer/attendees"""
    return await service.create_meeting(payload)

@router.put("/meetings/{meeting_id}")
async def update_meeting(
    meeting_id: str,
    payload: Any = Body(None),
    service: MeetingService = Depends(get_meeting_service)
):
    return await service.update_meeting(meeting_id, payload)

@router.delete("/meetings/{meeting_id}")
async def delete_meeting(meeting_id: str, service: MeetingService = Depends(get_meeting_service)):
    await service.delete_meeting(meeting_id)
    return {"message": "Meeting deleted successfully"}
