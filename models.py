# models.py - Pydantic models for incoming write payloads

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, ValidationInfo
from typing import Annotated, Any, Dict, List, Optional
from datetime import datetime

from utils import format_timestamp, parse_timestamp, validate_email, validate_object_id

# =============================================================================
# SHARED FIELD TYPES
# =============================================================================

def _attendee_id(value: Any) -> str:
    if not validate_object_id(value):
        raise ValueError('Attendee must be a valid user ID')
    return value.lower()

AttendeeId = Annotated[Any, AfterValidator(_attendee_id)]

# =============================================================================
# USER MODELS
# =============================================================================

class UserCreate(BaseModel):
    """User creation payload"""
    name: str
    email: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        v = v.strip()
        if not validate_email(v):
            raise ValueError('Valid email is required')
        return v.lower()

    def to_document(self) -> Dict[str, Any]:
        return {'name': self.name, 'email': self.email}

# =============================================================================
# MEETING MODELS
# =============================================================================

class MeetingWrite(BaseModel):
    """Meeting payload accepted by both create and update"""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: Optional[str] = None
    start_date: datetime = Field(alias='startDate')
    end_date: datetime = Field(alias='endDate')
    location: Optional[str] = None
    organizer: str
    attendees: Optional[List[AttendeeId]] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Title is required')
        return v

    @field_validator('description', 'location')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if v is not None else None

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def validate_dates(cls, v, info: ValidationInfo):
        parsed = parse_timestamp(v) if isinstance(v, str) else None
        if parsed is None:
            label = 'Start date' if info.field_name == 'start_date' else 'End date'
            raise ValueError(f'{label} must be a valid date')
        return parsed

    @field_validator('organizer')
    @classmethod
    def validate_organizer(cls, v):
        if not validate_object_id(v):
            raise ValueError('Organizer must be a valid user ID')
        return v.lower()

    @property
    def attendee_ids(self) -> List[str]:
        return list(self.attendees or [])

    def to_document(self, only_provided: bool = False) -> Dict[str, Any]:
        """Shape the payload as a stored meeting document.

        With only_provided, fields absent from the original payload are left
        out so that an update keeps their stored values.
        """
        document = {
            'title': self.title,
            'description': self.description,
            'startDate': format_timestamp(self.start_date),
            'endDate': format_timestamp(self.end_date),
            'location': self.location,
            'organizer': self.organizer,
            'attendees': self.attendee_ids
        }

        if only_provided:
            fields = type(self).model_fields
            provided = {fields[name].alias or name for name in self.model_fields_set}
            return {key: value for key, value in document.items() if key in provided}

        return {key: value for key, value in document.items() if value is not None}
