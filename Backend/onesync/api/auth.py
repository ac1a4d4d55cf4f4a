import logging
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from onesync.services.database import get_db
from onesync.models.user import User
from onesync.schemas.user import UserCreate, ProfileResponse, Token
from onesync.core.security import get_password_hash, verify_password, create_access_token, get_current_user
from onesync.core.exceptions import DuplicateError, UnauthorizedError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth")

@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    email = user_data.email.lower()
    # Check if email already exists
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise DuplicateError("Email", email)

    # Account and profile live in the same row
    db_user = User(
        email=email,
        password_hash=get_password_hash(user_data.password),
        name=user_data.name.strip(),
        role=user_data.role,
        total_earnings=0.0,
        available_balance=0.0,
        pending_payments=0.0,
        onboarding_completed=False,
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Registered user {db_user.id}")
    return db_user


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    """OAuth2 password login; the username field carries the email address."""
    result = await db.execute(select(User).where(User.email == form_data.username.lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise UnauthorizedError("Incorrect email or password")
    return Token(access_token=create_access_token(str(user.id)))


@router.get("/me", response_model=ProfileResponse)
async def read_me(current_user: User = Depends(get_current_user)):
    """
    Fetch the current logged-in user.
    """
    return current_user
