from pydantic import ConfigDict
from typing import Optional
from datetime import datetime
from coursemarket.schemas.course import CamelModel


class ContentResponse(CamelModel):
    id: int
    course_id: int
    type: str
    url: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
