"""Tests for the reference checker, the meeting assembler and the meeting service.

Uses an in-memory user repository test double so that store round-trips can
be counted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

import pytest

from database.models import IUserRepository, Meeting, User
from error_handler import (
    AttendeesNotFoundError,
    InvalidScheduleError,
    NotFoundError,
    OrganizerNotFoundError,
    ValidationError,
)
from services import MeetingAssembler, MeetingService, ReferenceChecker

ADA = "a" * 32
BOB = "b" * 32
CY = "c" * 32
GHOST = "f" * 32


# ── In-Memory Test Double ────────────────────────────────────────────────────


class InMemoryUserRepository(IUserRepository):
    """In-memory IUserRepository that records every lookup."""

    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users = {user.user_id: user for user in users}
        self.calls: list[tuple[str, Any]] = []

    async def create(self, document: dict[str, Any]) -> User:
        raise NotImplementedError

    async def get_by_id(self, user_id: str) -> User | None:
        self.calls.append(("get_by_id", user_id))
        return self._users.get(user_id)

    async def list_all(self) -> list[User]:
        return list(self._users.values())

    async def get_by_ids(self, user_ids: Iterable[str]) -> list[User]:
        ids = set(user_ids)
        self.calls.append(("get_by_ids", sorted(ids)))
        return [self._users[user_id] for user_id in ids if user_id in self._users]

    async def count_by_ids(self, user_ids: Iterable[str]) -> int:
        ids = set(user_ids)
        self.calls.append(("count_by_ids", sorted(ids)))
        return sum(1 for user_id in ids if user_id in self._users)


def user(user_id: str, name: str) -> User:
    return User(user_id=user_id, name=name, email=f"{name.lower()}@example.com")


def meeting(meeting_id: str, organizer: str, attendees: list[str]) -> Meeting:
    return Meeting(
        meeting_id=meeting_id,
        title=f"Meeting {meeting_id}",
        start_date=datetime(2024, 2, 1, 9, tzinfo=timezone.utc),
        end_date=datetime(2024, 2, 1, 10, tzinfo=timezone.utc),
        organizer_id=organizer,
        attendee_ids=attendees,
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository([user(ADA, "Ada"), user(BOB, "Bob"), user(CY, "Cy")])


# ── Reference Checker ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_references_to_existing_users_pass(user_repository):
    checker = ReferenceChecker(user_repository)

    await checker.check_meeting_references(ADA, [BOB, CY])

    assert user_repository.calls == [("get_by_id", ADA), ("count_by_ids", [BOB, CY])]


@pytest.mark.asyncio
async def test_missing_organizer_fails_before_attendee_lookup(user_repository):
    checker = ReferenceChecker(user_repository)

    with pytest.raises(OrganizerNotFoundError, match="Organizer not found"):
        await checker.check_meeting_references(GHOST, [BOB])

    assert user_repository.calls == [("get_by_id", GHOST)]


@pytest.mark.asyncio
async def test_one_missing_attendee_fails_the_check(user_repository):
    checker = ReferenceChecker(user_repository)

    with pytest.raises(AttendeesNotFoundError, match="One or more attendees not found"):
        await checker.check_meeting_references(ADA, [BOB, GHOST])


@pytest.mark.asyncio
async def test_repeated_attendees_are_counted_once(user_repository):
    checker = ReferenceChecker(user_repository)

    await checker.check_meeting_references(ADA, [BOB, BOB, BOB])


@pytest.mark.asyncio
async def test_no_attendees_skips_the_count(user_repository):
    checker = ReferenceChecker(user_repository)

    await checker.check_meeting_references(ADA, [])

    assert user_repository.calls == [("get_by_id", ADA)]


# ── Meeting Assembler ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_assembler_embeds_user_summaries(user_repository):
    assembler = MeetingAssembler(user_repository)

    record = await assembler.assemble_one(meeting("m1", ADA, [BOB, CY]))

    assert record["organizer"] == {"id": ADA, "name": "Ada", "email": "ada@example.com"}
    assert [a["name"] for a in record["attendees"]] == ["Bob", "Cy"]
    assert record["startDate"] == "2024-02-01T09:00:00.000Z"


@pytest.mark.asyncio
async def test_assembler_uses_one_batch_lookup(user_repository):
    assembler = MeetingAssembler(user_repository)

    await assembler.assemble([meeting("m1", ADA, [BOB]), meeting("m2", BOB, [CY, ADA])])

    assert user_repository.calls == [("get_by_ids", [ADA, BOB, CY])]


@pytest.mark.asyncio
async def test_assembler_resolves_missing_users_to_none(user_repository):
    assembler = MeetingAssembler(user_repository)

    record = await assembler.assemble_one(meeting("m1", GHOST, [BOB, GHOST]))

    assert record["organizer"] is None
    assert record["attendees"] == [
        {"id": BOB, "name": "Bob", "email": "bob@example.com"},
        None,
    ]


@pytest.mark.asyncio
async def test_assembler_with_no_meetings_skips_lookup(user_repository):
    assert await MeetingAssembler(user_repository).assemble([]) == []
    assert user_repository.calls == []


# ── Meeting Service ──────────────────────────────────────────────────────────


class UnusedMeetingRepository:
    """Fails the test if the service reaches the meeting store."""

    def __getattr__(self, name):
        raise AssertionError(f"meeting store should not be touched ({name})")


@pytest.fixture
def service(user_repository) -> MeetingService:
    return MeetingService(user_repository, UnusedMeetingRepository())


@pytest.mark.asyncio
async def test_validation_failure_stops_before_reference_check(service, user_repository):
    with pytest.raises(ValidationError) as excinfo:
        await service.create_meeting({"title": ""})

    assert {e["field"] for e in excinfo.value.errors} >= {"title", "startDate", "organizer"}
    assert user_repository.calls == []


@pytest.mark.asyncio
async def test_start_must_precede_end(service, user_repository):
    payload = {
        "title": "Backwards",
        "startDate": "2024-02-01T10:00:00Z",
        "endDate": "2024-02-01T10:00:00Z",
        "organizer": ADA,
    }

    with pytest.raises(InvalidScheduleError, match="Start date must be before end date"):
        await service.create_meeting(payload)

    assert user_repository.calls == []


@pytest.mark.asyncio
async def test_malformed_ids_are_not_found(service):
    with pytest.raises(NotFoundError):
        await service.get_meeting("not-an-id")
    with pytest.raises(NotFoundError):
        await service.delete_meeting("upcoming")
    with pytest.raises(NotFoundError, match="User not found"):
        await service.list_user_meetings("123")
