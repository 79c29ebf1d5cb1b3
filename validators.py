"""
Entity Validators

Structural checks for incoming user and meeting payloads. Each validator
returns the normalized model together with the list of field failures; all
failures of a payload are reported at once, never just the first one.
"""

from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models import MeetingWrite, UserCreate

FieldError = Dict[str, str]
ModelT = TypeVar('ModelT', bound=BaseModel)

# Messages for failures raised by pydantic itself (missing field, wrong type)
FIELD_MESSAGES = {
    'name': 'Name is required',
    'email': 'Valid email is required',
    'title': 'Title is required',
    'description': 'Description must be a string',
    'startDate': 'Start date must be a valid date',
    'endDate': 'End date must be a valid date',
    'location': 'Location must be a string',
    'organizer': 'Organizer must be a valid user ID',
    'attendees': 'Attendees must be an array',
}
ATTENDEE_MESSAGE = 'Attendee must be a valid user ID'
BODY_ERROR = {'field': 'body', 'message': 'Request body must be a JSON object'}

def _format_location(location: Tuple[Any, ...]) -> str:
    """('attendees', 2) -> 'attendees[2]'"""
    field = str(location[0]) if location else 'body'
    for part in location[1:]:
        field += f'[{part}]' if isinstance(part, int) else f'.{part}'
    return field

def field_errors(exc: PydanticValidationError) -> List[FieldError]:
    """Flatten pydantic errors into ordered {field, message} pairs"""
    errors = []
    for error in exc.errors():
        location = tuple(error.get('loc', ()))
        if error.get('type') == 'value_error':
            message = str(error['ctx']['error'])
        elif len(location) > 1 and location[0] == 'attendees':
            message = ATTENDEE_MESSAGE
        else:
            message = FIELD_MESSAGES.get(str(location[0]) if location else '', error.get('msg', 'Invalid value'))
        errors.append({'field': _format_location(location), 'message': message})
    return errors

def _validate(model: Type[ModelT], payload: Any) -> Tuple[Optional[ModelT], List[FieldError]]:
    if not isinstance(payload, dict):
        return None, [dict(BODY_ERROR)]

    try:
        return model.model_validate(payload), []
    except PydanticValidationError as exc:
        return None, field_errors(exc)

def validate_user_payload(payload: Any) -> Tuple[Optional[UserCreate], List[FieldError]]:
    """Validate a user creation body"""
    return _validate(UserCreate, payload)

def validate_meeting_payload(payload: Any) -> Tuple[Optional[MeetingWrite], List[FieldError]]:
    """Validate a meeting create/update body"""
    return _validate(MeetingWrite, payload)
