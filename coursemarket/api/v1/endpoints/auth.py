import logging

from fastapi import APIRouter, Depends, status

from coursemarket.api.dependencies import get_current_identity, get_storage
from coursemarket.core.exceptions import EmailTaken, Unauthenticated, UserNotFound
from coursemarket.core.security import get_password_hash, issue_token, verify_password
from coursemarket.models.user import UserRole
from coursemarket.schemas.user import Identity, Token, UserCreate, UserLogin, UserResponse
from coursemarket.storage import Storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, storage: Storage = Depends(get_storage)):
    """Register a student account and log it in"""
    if storage.get_user_by_email(user.email):
        raise EmailTaken()

    db_user = storage.create_user(
        email=user.email,
        hashed_password=get_password_hash(user.password),
        role=UserRole.STUDENT,
    )
    logger.info(f"User registered: id={db_user.id}")
    return {"token": issue_token(db_user)}


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, storage: Storage = Depends(get_storage)):
    user = storage.get_user_by_email(credentials.email)

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Failed login attempt")
        raise Unauthenticated("Invalid credentials")

    return {"token": issue_token(user)}


@router.get("/me", response_model=UserResponse)
def read_users_me(
    identity: Identity = Depends(get_current_identity),
    storage: Storage = Depends(get_storage)
):
    user = storage.get_user(identity.id)
    if not user:
        raise UserNotFound()
    return user
