from fastapi import APIRouter
from coursemarket.api.v1.endpoints import auth, courses, enrollments, live_sessions, uploads, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
api_router.include_router(live_sessions.router, prefix="/live-sessions", tags=["Live sessions"])
api_router.include_router(uploads.router, prefix="/upload", tags=["Uploads"])
