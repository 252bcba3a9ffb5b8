from .user import (
    UserCreate,
    UserLogin,
    UserUpdate,
    UserResponse,
    Token,
    Identity
)

from .course import (
    CourseCreate,
    CourseUpdate,
    CourseFilters,
    CourseResponse,
    EnrollmentCreate,
    EnrollmentResponse
)

from .live_session import (
    LiveSessionCreate,
    LiveSessionResponse
)

from .content import ContentResponse
