from pydantic import ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
from coursemarket.schemas.course import CamelModel


class LiveSessionCreate(CamelModel):
    course_id: int
    title: str = Field(min_length=1)
    start_time: datetime
    meeting_link: str

    @field_validator('start_time')
    @classmethod
    def start_time_as_naive_utc(cls, v: datetime) -> datetime:
        # Stored without tzinfo, so keep everything in UTC
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @field_validator('meeting_link')
    @classmethod
    def meeting_link_is_http(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(('http://', 'https://')):
            raise ValueError('Meeting link must be an http(s) URL')
        return v


class LiveSessionResponse(CamelModel):
    id: int
    course_id: int
    title: str
    start_time: datetime
    meeting_link: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
