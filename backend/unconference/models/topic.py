from typing import Literal

from pydantic import BaseModel


TopicStatus = Literal["proposed", "approved", "scheduled", "completed", "rejected"]


class Topic(BaseModel):
    id: str
    event_id: str = ""
    title: str = ""
    status: TopicStatus = "proposed"

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"
