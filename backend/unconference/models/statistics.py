from pydantic import BaseModel, Field


class RoundStatistics(BaseModel):
    round_number: int
    topics_scheduled: int
    participants_assigned: int
    group_sizes: list[int] = Field(default_factory=list)
    average_group_size: float = 0.0


class PreferredChoiceDistribution(BaseModel):
    # number of top-N preferences received -> number of participants
    distribution: dict[int, int] = Field(default_factory=dict)
    total_participants_with_rankings: int = 0


class SortedChoiceDistribution(BaseModel):
    distribution: dict[int, int] = Field(default_factory=dict)
    total_participants_with_rankings: int = 0
    min_topics_to_rank: int


class TopicOccurrence(BaseModel):
    topic_id: str
    topic_title: str
    occurrences: int


class TopicOccurrenceDistribution(BaseModel):
    total_topics_planned: int = 0
    topic_details: list[TopicOccurrence] = Field(default_factory=list)


class AssignmentStatistics(BaseModel):
    total_participants: int
    total_assignments: int
    participants_fully_assigned: int
    participants_partially_assigned: int
    participants_not_assigned: int
    topics_used: int
    average_group_size: float
    round_statistics: list[RoundStatistics] = Field(default_factory=list)
    preferred_choice_distribution: PreferredChoiceDistribution | None = None
    sorted_choice_distribution: SortedChoiceDistribution | None = None
    topic_occurrence_distribution: TopicOccurrenceDistribution | None = None
