from pydantic import BaseModel, Field


class TopicRanking(BaseModel):
    participant_id: str
    event_id: str = ""
    # Index 0 is the most preferred topic.
    ranked_topic_ids: list[str] = Field(default_factory=list)
