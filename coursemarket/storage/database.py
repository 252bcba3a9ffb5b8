import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

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

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("/", "//").replace("%", "/%").replace("_", "/_")


class DatabaseStorage(Storage):
    """SQLAlchemy-backed gateway, one instance per request session"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, obj):
        self.db.commit()
        self.db.refresh(obj)
        return obj

    # === Users ===
    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def create_user(self, email: str, hashed_password: str, role: UserRole = UserRole.STUDENT) -> User:
        if self.get_user_by_email(email):
            raise EmailTaken()

        db_user = User(email=email, hashed_password=hashed_password, role=role)
        self.db.add(db_user)
        try:
            return self._commit(db_user)
        except IntegrityError:
            self.db.rollback()
            raise EmailTaken()

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> User:
        db_user = self.get_user(user_id)
        if not db_user:
            raise UserNotFound()

        new_email = changes.get("email")
        if new_email and new_email != db_user.email and self.get_user_by_email(new_email):
            raise EmailTaken()

        for field, value in changes.items():
            setattr(db_user, field, value)

        try:
            return self._commit(db_user)
        except IntegrityError:
            self.db.rollback()
            raise EmailTaken()

    def delete_user(self, user_id: int) -> None:
        db_user = self.get_user(user_id)
        if db_user:
            self.db.delete(db_user)
            self.db.commit()

    # === Courses ===
    def list_courses(self, filters: Optional[CourseFilters] = None) -> List[Course]:
        query = self.db.query(Course)

        if filters is not None:
            if filters.title:
                query = query.filter(
                    func.lower(Course.title).contains(func.lower(_escape_like(filters.title)), escape="/")
                )
            # NULL prices never satisfy a comparison, so unpriced courses drop out here
            if filters.min_price is not None:
                query = query.filter(Course.price >= filters.min_price)
            if filters.max_price is not None:
                query = query.filter(Course.price <= filters.max_price)

        return query.order_by(Course.id).all()

    def get_course(self, course_id: int) -> Optional[Course]:
        return self.db.query(Course).filter(Course.id == course_id).first()

    def create_course(self, data: Dict[str, Any]) -> Course:
        db_course = Course(**data)
        self.db.add(db_course)
        try:
            return self._commit(db_course)
        except IntegrityError:
            self.db.rollback()
            raise InvalidPayload("Invalid course data")

    def update_course(self, course_id: int, changes: Dict[str, Any]) -> Course:
        db_course = self.get_course(course_id)
        if not db_course:
            raise CourseNotFound()

        for field, value in changes.items():
            setattr(db_course, field, value)

        try:
            return self._commit(db_course)
        except IntegrityError:
            self.db.rollback()
            raise InvalidPayload("Invalid course data")

    def delete_course(self, course_id: int) -> None:
        db_course = self.get_course(course_id)
        if db_course:
            self.db.delete(db_course)
            self.db.commit()

    # === Enrollments ===
    def get_enrollment(self, user_id: int, course_id: int) -> Optional[Enrollment]:
        return self.db.query(Enrollment).filter(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id
        ).first()

    def enroll_user(self, user_id: int, course_id: int) -> Enrollment:
        # Early exit only; the unique constraint is the real guard
        if self.get_enrollment(user_id, course_id):
            raise AlreadyEnrolled()

        if not self.get_course(course_id):
            raise CourseNotFound()

        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        self.db.add(enrollment)
        try:
            enrollment = self._commit(enrollment)
        except IntegrityError:
            self.db.rollback()
            if self.get_enrollment(user_id, course_id):
                logger.info(f"Concurrent enrollment detected for user {user_id}, course {course_id}")
                raise AlreadyEnrolled()
            if not self.get_user(user_id):
                raise UserNotFound()
            raise CourseNotFound()

        return enrollment

    def list_enrolled_courses(self, user_id: int) -> List[Course]:
        return (
            self.db.query(Course)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .filter(Enrollment.user_id == user_id)
            .order_by(Course.id)
            .all()
        )

    def enrolled_course_ids(self, user_id: int) -> Set[int]:
        rows = self.db.query(Enrollment.course_id).filter(Enrollment.user_id == user_id).all()
        return {course_id for (course_id,) in rows}

    # === Live sessions ===
    def create_live_session(
        self, course_id: int, title: str, start_time: datetime, meeting_link: str
    ) -> LiveSession:
        if not self.get_course(course_id):
            raise CourseNotFound()

        session = LiveSession(
            course_id=course_id,
            title=title,
            start_time=start_time,
            meeting_link=meeting_link,
        )
        self.db.add(session)
        return self._commit(session)

    def get_live_session(self, session_id: int) -> Optional[LiveSession]:
        return self.db.query(LiveSession).filter(LiveSession.id == session_id).first()

    def list_live_sessions(self, course_id: int) -> List[LiveSession]:
        return (
            self.db.query(LiveSession)
            .filter(LiveSession.course_id == course_id)
            .order_by(LiveSession.start_time, LiveSession.id)
            .all()
        )

    # === Content ===
    def add_content(self, course_id: int, type: str, url: str) -> Content:
        if not self.get_course(course_id):
            raise CourseNotFound()

        content = Content(course_id=course_id, type=type, url=url)
        self.db.add(content)
        return self._commit(content)

    def list_course_content(self, course_id: int) -> List[Content]:
        return (
            self.db.query(Content)
            .filter(Content.course_id == course_id)
            .order_by(Content.id)
            .all()
        )
