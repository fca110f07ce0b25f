from typing import Literal, Optional

from pydantic import BaseModel


ParticipantStatus = Literal["registered", "confirmed", "checked-in", "cancelled"]

ACTIVE_PARTICIPANT_STATUSES: frozenset[str] = frozenset({"registered", "confirmed", "checked-in"})


class Participant(BaseModel):
    id: str
    event_id: str = ""
    user_id: Optional[str] = None
    status: ParticipantStatus = "registered"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_PARTICIPANT_STATUSES
