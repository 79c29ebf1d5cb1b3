# services/meeting_service.py - Meeting orchestration, reference checks and response assembly

from typing import Any, Dict, Iterable, List, Optional
import logging
from datetime import datetime

from database.models import IMeetingRepository, IUserRepository, Meeting
from error_handler import (
    AttendeesNotFoundError, InvalidScheduleError, NotFoundError,
    OrganizerNotFoundError, ValidationError
)
from models import MeetingWrite
from utils import utc_now, validate_object_id
from validators import validate_meeting_payload

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_LIMIT = 10

# =============================================================================
# REFERENTIAL CHECKER
# =============================================================================

class ReferenceChecker:
    """Confirms that the users a meeting refers to exist before it is written.

    The check and the write that follows are separate store operations; a
    user removed in between is not detected.
    """

    def __init__(self, user_repository: IUserRepository):
        self.users = user_repository

    async def check_meeting_references(self, organizer_id: str, attendee_ids: Iterable[str]) -> None:
        """Raise OrganizerNotFoundError or AttendeesNotFoundError on a dangling reference"""
        organizer = await self.users.get_by_id(organizer_id)
        if organizer is None:
            raise OrganizerNotFoundError()

        requested = set(attendee_ids)
        if requested:
            # Only the count is compared; the missing ids are not reported
            found = await self.users.count_by_ids(requested)
            if found != len(requested):
                raise AttendeesNotFoundError()

# =============================================================================
# MEETING ASSEMBLER
# =============================================================================

class MeetingAssembler:
    """Replaces organizer/attendee ids with {id, name, email} summaries"""

    def __init__(self, user_repository: IUserRepository):
        self.users = user_repository

    async def assemble(self, meetings: List[Meeting]) -> List[Dict[str, Any]]:
        referenced = {user_id for meeting in meetings for user_id in meeting.referenced_user_ids}
        summaries = {}
        if referenced:
            users = await self.users.get_by_ids(referenced)
            summaries = {user.user_id: user.to_summary() for user in users}

        assembled = []
        for meeting in meetings:
            record = meeting.to_dict()
            # Users deleted out-of-band resolve to None instead of failing the response
            record['organizer'] = summaries.get(meeting.organizer_id)
            record['attendees'] = [summaries.get(user_id) for user_id in meeting.attendee_ids]
            assembled.append(record)
        return assembled

    async def assemble_one(self, meeting: Meeting) -> Dict[str, Any]:
        assembled = await self.assemble([meeting])
        return assembled[0]

# =============================================================================
# MEETING SERVICE
# =============================================================================

class MeetingService:
    """Request-level meeting operations"""

    def __init__(
        self,
        user_repository: IUserRepository,
        meeting_repository: IMeetingRepository,
        upcoming_limit: int = DEFAULT_UPCOMING_LIMIT
    ):
        self.users = user_repository
        self.meetings = meeting_repository
        self.upcoming_limit = upcoming_limit
        self.reference_checker = ReferenceChecker(user_repository)
        self.assembler = MeetingAssembler(user_repository)

    async def list_meetings(self) -> List[Dict[str, Any]]:
        meetings = await self.meetings.list_all()
        return await self.assembler.assemble(meetings)

    async def list_upcoming(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Meetings starting at or after now, earliest first, capped at upcoming_limit"""
        meetings = await self.meetings.list_upcoming(now or utc_now(), self.upcoming_limit)
        return await self.assembler.assemble(meetings)

    async def get_meeting(self, meeting_id: str) -> Dict[str, Any]:
        meeting = await self._find(meeting_id)
        if meeting is None:
            raise NotFoundError("Meeting not found", resource="meeting")
        return await self.assembler.assemble_one(meeting)

    async def create_meeting(self, payload: Any) -> Dict[str, Any]:
        meeting_data = await self._accept(payload)

        created = await self.meetings.create(meeting_data.to_document())
        logger.info(f"Meeting created: {created.title} ({created.meeting_id}) by {created.organizer_id}")

        # Read back what the store holds before shaping the response
        stored = await self.meetings.get_by_id(created.meeting_id)
        return await self.assembler.assemble_one(stored or created)

    async def update_meeting(self, meeting_id: str, payload: Any) -> Dict[str, Any]:
        meeting_data = await self._accept(payload)

        updated = None
        if validate_object_id(meeting_id):
            updated = await self.meetings.update(meeting_id.lower(), meeting_data.to_document(only_provided=True))
        if updated is None:
            raise NotFoundError("Meeting not found", resource="meeting")

        logger.info(f"Meeting updated: {updated.meeting_id}")
        return await self.assembler.assemble_one(updated)

    async def delete_meeting(self, meeting_id: str) -> None:
        deleted = validate_object_id(meeting_id) and await self.meetings.delete(meeting_id.lower())
        if not deleted:
            raise NotFoundError("Meeting not found", resource="meeting")
        logger.info(f"Meeting deleted: {meeting_id}")

    async def list_user_meetings(self, user_id: str) -> List[Dict[str, Any]]:
        """Meetings the user organizes or attends, earliest first"""
        user = await self.users.get_by_id(user_id.lower()) if validate_object_id(user_id) else None
        if user is None:
            raise NotFoundError("User not found", resource="user")

        meetings = await self.meetings.get_user_meetings(user.user_id)
        return await self.assembler.assemble(meetings)

    async def _find(self, meeting_id: str) -> Optional[Meeting]:
        if not validate_object_id(meeting_id):
            return None
        return await self.meetings.get_by_id(meeting_id.lower())

    async def _accept(self, payload: Any) -> MeetingWrite:
        """Validate structure, schedule and references of a write payload"""
        meeting_data, errors = validate_meeting_payload(payload)
        if errors:
            raise ValidationError(errors)

        if meeting_data.start_date >= meeting_data.end_date:
            raise InvalidScheduleError()

        await self.reference_checker.check_meeting_references(
            meeting_data.organizer, meeting_data.attendee_ids
        )
        return meeting_data
