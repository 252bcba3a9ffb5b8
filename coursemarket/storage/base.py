"""
Persistence gateway used by the request handlers.

Handlers depend on ``Storage`` only; ``DatabaseStorage`` is the production
implementation and ``MemoryStorage`` is a test double with the same contract.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from coursemarket.models import Content, Course, Enrollment, LiveSession, User, UserRole
from coursemarket.schemas.course import CourseFilters


class Storage(ABC):

    # === Users ===
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def list_users(self) -> List[User]:
        ...

    @abstractmethod
    def create_user(self, email: str, hashed_password: str, role: UserRole = UserRole.STUDENT) -> User:
        """Raises EmailTaken when the email is already registered."""

    @abstractmethod
    def update_user(self, user_id: int, changes: Dict[str, Any]) -> User:
        """Apply a partial patch. Raises UserNotFound or EmailTaken."""

    @abstractmethod
    def delete_user(self, user_id: int) -> None:
        """Unconditional delete; unknown ids are a no-op."""

    # === Courses ===
    @abstractmethod
    def list_courses(self, filters: Optional[CourseFilters] = None) -> List[Course]:
        """
        Title matching is a substring match that folds ASCII case only,
        the way SQLite's lower() does. Price bounds are inclusive.
        """

    @abstractmethod
    def get_course(self, course_id: int) -> Optional[Course]:
        ...

    @abstractmethod
    def create_course(self, data: Dict[str, Any]) -> Course:
        ...

    @abstractmethod
    def update_course(self, course_id: int, changes: Dict[str, Any]) -> Course:
        """Apply a partial patch. Raises CourseNotFound."""

    @abstractmethod
    def delete_course(self, course_id: int) -> None:
        """Unconditional delete; unknown ids are a no-op."""

    # === Enrollments ===
    @abstractmethod
    def get_enrollment(self, user_id: int, course_id: int) -> Optional[Enrollment]:
        ...

    @abstractmethod
    def enroll_user(self, user_id: int, course_id: int) -> Enrollment:
        """
        Enroll a user in a course.

        Raises AlreadyEnrolled if the pair exists, CourseNotFound if the
        course does not.
        """

    @abstractmethod
    def list_enrolled_courses(self, user_id: int) -> List[Course]:
        ...

    @abstractmethod
    def enrolled_course_ids(self, user_id: int) -> Set[int]:
        ...

    # === Live sessions ===
    @abstractmethod
    def create_live_session(
        self, course_id: int, title: str, start_time: datetime, meeting_link: str
    ) -> LiveSession:
        ...

    @abstractmethod
    def get_live_session(self, session_id: int) -> Optional[LiveSession]:
        ...

    @abstractmethod
    def list_live_sessions(self, course_id: int) -> List[LiveSession]:
        """Sessions of a course ordered by start time."""

    # === Content ===
    @abstractmethod
    def add_content(self, course_id: int, type: str, url: str) -> Content:
        ...

    @abstractmethod
    def list_course_content(self, course_id: int) -> List[Content]:
        ...
