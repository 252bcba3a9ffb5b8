from fastapi import status


class AppError(Exception):
    """Domain error that maps to an HTTP status and a client-safe message"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UserNotFound(NotFound):
    default_message = "User not found"


class CourseNotFound(NotFound):
    default_message = "Course not found"


class LiveSessionNotFound(NotFound):
    default_message = "Session not found"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflict"


class EmailTaken(Conflict):
    default_message = "Email already registered"


class AlreadyEnrolled(Conflict):
    default_message = "User is already enrolled in this course"


class InvalidPayload(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class InvalidUpload(InvalidPayload):
    default_message = "Invalid file type"


class UpstreamFailure(AppError):
    default_message = "Storage unavailable"


class InvalidToken(Exception):
    """Token is malformed, expired, or carries a bad signature"""
