from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Course Marketplace"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # Database
    DATABASE_URL: str = "sqlite:///./coursemarket.db"

    # Security
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    # Uploads
    MAX_UPLOAD_SIZE: int = 100 * 1024 * 1024  # 100MB
    ALLOWED_UPLOAD_TYPES: List[str] = [
        "application/pdf",
        "video/mp4",
        "video/webm",
        "image/jpeg",
        "image/png",
    ]
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_BASE_URL: str = "/uploads"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # First admin, seeded on startup when a password is set
    FIRST_ADMIN_EMAIL: str = "admin@spacecourse.com"
    FIRST_ADMIN_PASSWORD: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()


def validate_runtime_config() -> None:
    if settings.APP_ENV.lower() == "production" and settings.SECRET_KEY == "change-me":
        raise RuntimeError("SECRET_KEY must be set in production.")
