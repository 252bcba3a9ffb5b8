# Import every model so Base.metadata knows all tables
from .user import User, UserRole
from .course import Course, Enrollment
from .live_session import LiveSession
from .content import Content

__all__ = ["User", "UserRole", "Course", "Enrollment", "LiveSession", "Content"]
