from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CourseBase(CamelModel):
    title: str = Field(min_length=1)
    description: str
    image_url: str
    duration: int = Field(ge=0)
    difficulty: str = Field(min_length=1)
    instructor_id: Optional[int] = None
    price: Optional[int] = Field(default=None, ge=0)


class CourseCreate(CourseBase):
    pass


class CourseUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[str] = Field(default=None, min_length=1)
    instructor_id: Optional[int] = None
    price: Optional[int] = Field(default=None, ge=0)


class CourseFilters(BaseModel):
    title: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None


class CourseResponse(CourseBase):
    id: int
    enrolled: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EnrollmentCreate(CamelModel):
    course_id: Optional[int] = None


class EnrollmentResponse(CamelModel):
    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime

    model_config = ConfigDict(from_attributes=True)
