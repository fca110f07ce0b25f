from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from unconference.models.event import Event
from unconference.models.participant import Participant
from unconference.models.ranking import TopicRanking
from unconference.models.statistics import AssignmentStatistics
from unconference.models.topic import Topic


AssignmentMethod = Literal["manual", "automatic", "self-selected"]
AssignmentStatus = Literal["assigned", "confirmed", "declined", "completed"]


class Assignment(BaseModel):
    participant_id: str
    topic_id: str
    event_id: str
    round_number: int = Field(ge=1)
    group_number: int = Field(ge=1)
    assignment_method: AssignmentMethod = "automatic"
    status: AssignmentStatus = "assigned"


class AssignmentInput(BaseModel):
    event: Event
    participants: list[Participant] = Field(default_factory=list)
    topics: list[Topic] = Field(default_factory=list)
    rankings: list[TopicRanking] = Field(default_factory=list)
    # Participant ids of the event's organizers; they are never scheduled.
    organizer_ids: set[str] = Field(default_factory=set)
    # user_id -> role
    user_roles: dict[str, str] = Field(default_factory=dict)


class AssignmentResult(BaseModel):
    assignments: list[Assignment] = Field(default_factory=list)
    statistics: AssignmentStatistics
    warnings: list[str] = Field(default_factory=list)


class AssignmentResponse(Assignment):
    id: str
    created_at: datetime
    updated_at: datetime


class AssignmentGenerateResponse(BaseModel):
    event_id: str
    assignments: list[AssignmentResponse] = Field(default_factory=list)
    statistics: AssignmentStatistics
    warnings: list[str] = Field(default_factory=list)


class AssignmentListResponse(BaseModel):
    event_id: str
    round_number: Optional[int] = None
    assignments: list[AssignmentResponse] = Field(default_factory=list)


class AssignmentClearResponse(BaseModel):
    event_id: str
    deleted: int
