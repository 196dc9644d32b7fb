from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.core.config import settings
from dental_booking.core.security import create_access_token, hash_password, verify_password
from dental_booking.models.user import User, UserCreate, UserPublic


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def create_user(session: AsyncSession, data: UserCreate) -> User:
    user = User(
        name=data.name,
        email=data.email,
        role=data.role,
        overview=data.overview,
        avatar=data.avatar or settings.default_avatar,
        hashed_password=hash_password(data.password),
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


def user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        overview=user.overview,
        avatar=user.avatar,
    )


async def register_user(session: AsyncSession, data: UserCreate) -> User | None:
    existing = await get_user_by_email(session, data.email)
    if existing:
        return None
    return await create_user(session, data)


async def login_user(
    session: AsyncSession, email: str, password: str
) -> tuple[User, str, int] | None:
    user = await get_user_by_email(session, email)
    if not user or not user.hashed_password:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    token = create_access_token(user.id, email=user.email)
    return user, token, settings.access_token_expire_minutes * 60
