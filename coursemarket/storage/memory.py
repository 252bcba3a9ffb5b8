from datetime import datetime
from itertools import count
from typing import Any, Dict, List, Optional, Set

from coursemarket.core.exceptions import (
    AlreadyEnrolled,
    CourseNotFound,
    EmailTaken,
    InvalidPayload,
    UserNotFound,
)
from coursemarket.models import Content, Course, Enrollment, LiveSession, User, UserRole
from coursemarket.schemas.course import CourseFilters
from coursemarket.storage.base import Storage

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


class MemoryStorage(Storage):
    """
    Dict-backed gateway for tests.

    Rows are transient model instances, so handlers see the same attribute
    shapes as with ``DatabaseStorage``. Referential rules (cascades, unique
    pairs) are applied by hand.
    """

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.courses: Dict[int, Course] = {}
        self.enrollments: Dict[int, Enrollment] = {}
        self.live_sessions: Dict[int, LiveSession] = {}
        self.contents: Dict[int, Content] = {}
        self._ids = {name: count(1) for name in ("user", "course", "enrollment", "live_session", "content")}

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # === Users ===
    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def list_users(self) -> List[User]:
        return [self.users[k] for k in sorted(self.users)]

    def create_user(self, email: str, hashed_password: str, role: UserRole = UserRole.STUDENT) -> User:
        if self.get_user_by_email(email):
            raise EmailTaken()

        now = datetime.utcnow()
        user = User(
            id=self._next_id("user"),
            email=email,
            hashed_password=hashed_password,
            role=UserRole(role),
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> User:
        user = self.get_user(user_id)
        if not user:
            raise UserNotFound()

        new_email = changes.get("email")
        if new_email and new_email != user.email and self.get_user_by_email(new_email):
            raise EmailTaken()

        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = datetime.utcnow()
        return user

    def delete_user(self, user_id: int) -> None:
        if self.users.pop(user_id, None) is None:
            return
        for course in self.courses.values():
            if course.instructor_id == user_id:
                course.instructor_id = None
        for key in [k for k, e in self.enrollments.items() if e.user_id == user_id]:
            del self.enrollments[key]

    # === Courses ===
    def list_courses(self, filters: Optional[CourseFilters] = None) -> List[Course]:
        courses = [self.courses[k] for k in sorted(self.courses)]
        if filters is None:
            return courses

        if filters.title:
            needle = filters.title.translate(_ASCII_LOWER)
            courses = [c for c in courses if needle in c.title.translate(_ASCII_LOWER)]
        if filters.min_price is not None:
            courses = [c for c in courses if c.price is not None and c.price >= filters.min_price]
        if filters.max_price is not None:
            courses = [c for c in courses if c.price is not None and c.price <= filters.max_price]
        return courses

    def get_course(self, course_id: int) -> Optional[Course]:
        return self.courses.get(course_id)

    def create_course(self, data: Dict[str, Any]) -> Course:
        instructor_id = data.get("instructor_id")
        if instructor_id is not None and instructor_id not in self.users:
            raise InvalidPayload("Invalid course data")

        now = datetime.utcnow()
        course = Course(id=self._next_id("course"), created_at=now, updated_at=now, **data)
        self.courses[course.id] = course
        return course

    def update_course(self, course_id: int, changes: Dict[str, Any]) -> Course:
        course = self.get_course(course_id)
        if not course:
            raise CourseNotFound()

        instructor_id = changes.get("instructor_id")
        if instructor_id is not None and instructor_id not in self.users:
            raise InvalidPayload("Invalid course data")

        for field, value in changes.items():
            setattr(course, field, value)
        course.updated_at = datetime.utcnow()
        return course

    def delete_course(self, course_id: int) -> None:
        if self.courses.pop(course_id, None) is None:
            return
        for table in (self.enrollments, self.live_sessions, self.contents):
            for key in [k for k, row in table.items() if row.course_id == course_id]:
                del table[key]

    # === Enrollments ===
    def get_enrollment(self, user_id: int, course_id: int) -> Optional[Enrollment]:
        return next(
            (e for e in self.enrollments.values() if e.user_id == user_id and e.course_id == course_id),
            None,
        )

    def enroll_user(self, user_id: int, course_id: int) -> Enrollment:
        if self.get_enrollment(user_id, course_id):
            raise AlreadyEnrolled()
        if course_id not in self.courses:
            raise CourseNotFound()
        if user_id not in self.users:
            raise UserNotFound()

        enrollment = Enrollment(
            id=self._next_id("enrollment"),
            user_id=user_id,
            course_id=course_id,
            enrolled_at=datetime.utcnow(),
        )
        self.enrollments[enrollment.id] = enrollment
        return enrollment

    def list_enrolled_courses(self, user_id: int) -> List[Course]:
        ids = self.enrolled_course_ids(user_id)
        return [self.courses[k] for k in sorted(ids) if k in self.courses]

    def enrolled_course_ids(self, user_id: int) -> Set[int]:
        return {e.course_id for e in self.enrollments.values() if e.user_id == user_id}

    # === Live sessions ===
    def create_live_session(
        self, course_id: int, title: str, start_time: datetime, meeting_link: str
    ) -> LiveSession:
        if course_id not in self.courses:
            raise CourseNotFound()

        session = LiveSession(
            id=self._next_id("live_session"),
            course_id=course_id,
            title=title,
            start_time=start_time,
            meeting_link=meeting_link,
            created_at=datetime.utcnow(),
        )
        self.live_sessions[session.id] = session
        return session

    def get_live_session(self, session_id: int) -> Optional[LiveSession]:
        return self.live_sessions.get(session_id)

    def list_live_sessions(self, course_id: int) -> List[LiveSession]:
        sessions = [s for s in self.live_sessions.values() if s.course_id == course_id]
        return sorted(sessions, key=lambda s: (s.start_time, s.id))

    # === Content ===
    def add_content(self, course_id: int, type: str, url: str) -> Content:
        if course_id not in self.courses:
            raise CourseNotFound()

        content = Content(
            id=self._next_id("content"),
            course_id=course_id,
            type=type,
            url=url,
            created_at=datetime.utcnow(),
        )
        self.contents[content.id] = content
        return content

    def list_course_content(self, course_id: int) -> List[Content]:
        return [self.contents[k] for k in sorted(self.contents) if self.contents[k].course_id == course_id]
