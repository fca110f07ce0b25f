from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from unconference.models.statistics import AssignmentStatistics


EventStatus = Literal["draft", "published", "active", "completed", "cancelled"]


class StoredAssignmentStatistics(AssignmentStatistics):
    generated_at: datetime


class EventSettings(BaseModel):
    enable_topic_ranking: bool = True
    enable_auto_assignment: bool = False
    min_topics_to_rank: Optional[int] = Field(default=None, ge=1)
    last_assignment_statistics: Optional[StoredAssignmentStatistics] = None


class Event(BaseModel):
    id: str
    name: str = ""
    status: EventStatus = "draft"

    number_of_rounds: int = Field(ge=1)
    discussions_per_round: int = Field(ge=1)
    ideal_group_size: int = Field(ge=1)
    min_group_size: int = Field(ge=0)
    max_group_size: int = Field(ge=1)

    settings: EventSettings = Field(default_factory=EventSettings)
