from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from coursemarket.database import Base
from datetime import datetime
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    def has_role(self, required: "UserRole") -> bool:
        """Exact role match, no hierarchy"""
        return self is UserRole(required)

    @property
    def can_manage_users(self) -> bool:
        return self in (UserRole.ADMIN, UserRole.SUPERADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.STUDENT,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    courses_taught = relationship("Course", back_populates="instructor")
    enrollments = relationship(
        "Enrollment", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
