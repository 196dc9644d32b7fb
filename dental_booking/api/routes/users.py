import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.api.deps import get_current_user, get_session
from dental_booking.api.schemas.auth import LoginRequest, TokenResponse
from dental_booking.models.booking import BookingPublic
from dental_booking.models.user import User, UserCreate, UserPublic
from dental_booking.services.auth_service import (
    get_user_by_id,
    list_users,
    login_user,
    register_user,
    user_to_public,
)
from dental_booking.services.avatar_storage import avatar_extension, save_avatar
from dental_booking.services.booking_service import list_bookings_for_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(
    name: str = Form(..., min_length=1),
    email: EmailStr = Form(...),
    password: str = Form(..., min_length=1),
    role: str = Form(..., min_length=1),
    overview: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    session: AsyncSession = Depends(get_session),
) -> UserPublic:
    has_avatar = avatar is not None and bool(avatar.filename)
    if has_avatar:
        # Reject bad file types before anything is written
        avatar_extension(avatar.filename)
    data = UserCreate(
        name=name.strip(),
        email=email.strip().lower(),
        password=password,
        role=role.strip(),
        overview=overview,
    )
    user = await register_user(session, data)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        )
    if has_avatar:
        user.avatar = await save_avatar(avatar)
        session.add(user)
        await session.flush()
    return user_to_public(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    result = await login_user(session, body.email.lower(), body.password)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    _, token, expires_in = result
    return TokenResponse(token=token, expires_in=expires_in)


@router.get("/profile", response_model=UserPublic)
async def profile(current_user: User = Depends(get_current_user)) -> UserPublic:
    return user_to_public(current_user)


@router.get("", response_model=list[UserPublic])
async def all_users(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[UserPublic]:
    return [user_to_public(u) for u in await list_users(session)]


@router.get("/{user_id}/bookings", response_model=list[BookingPublic])
async def user_bookings(
    user_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[BookingPublic]:
    bookings = await list_bookings_for_user(session, user_id)
    return [BookingPublic.model_validate(b) for b in bookings]


@router.get("/{user_id}", response_model=UserPublic)
async def user_details(
    user_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> UserPublic:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Could not find user with ID: {user_id}",
        )
    return user_to_public(user)
