from __future__ import annotations
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


def iso_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    author: str = "Anonymous"
    message: str = Field(min_length=1)
    created_at: str = Field(alias="createdAt")

    @classmethod
    def create(cls, author: str, message: str, now: datetime | None = None) -> "Message":
        now = now or datetime.now(timezone.utc)
        return cls(
            id=str(int(now.timestamp() * 1000)),
            author=author,
            message=message,
            created_at=iso_utc(now),
        )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class QuizResponse(BaseModel):
    timestamp: str
    who_caring_for: str = ""
    dementia_dx: str = ""
    recent_changes: str = ""
    biggest_challenge: str = ""
    join_cohort_interest: str = ""
    stage: str
