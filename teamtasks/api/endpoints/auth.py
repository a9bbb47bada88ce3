"""
    Authentication Endpoints
    Registration, login/logout, current user, profile and password updates.
    Authentication is carried by an HttpOnly session cookie that references a
    server-side ``sessions`` row; there are no bearer tokens.
    Endpoints:
    - /register: Creates a user and opens a session.
    - /login: Verifies credentials (rate limited per email + IP) and opens a session.
    - /logout: Deletes the session row and clears the cookie. Idempotent.
    - /me: Returns the current user.
    - /profile: Updates whitelisted profile fields.
    - /password: Changes the password and revokes every other session.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response, status
from redis.asyncio import Redis
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.api.dependencies import get_current_user, get_db, get_redis
from teamtasks.core.config import settings
from teamtasks.core.exceptions import ConflictError, InvalidCredentialsError, RateLimitedError
from teamtasks.core.security import (
    SESSION_MAX_AGE, create_session_token, decode_session_token, generate_session_id,
    get_password_hash, verify_password
)
from teamtasks.helpers.rate_limit import allow, reset
from teamtasks.logging import get_logger
from teamtasks.models.user import User
from teamtasks.models.user_session import UserSession
from teamtasks.schemas.auth import Login, PasswordChange
from teamtasks.schemas.user import ProfileUpdate, UserCreate, UserProfileOut

router = APIRouter()
logger = get_logger("auth")


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def open_session(db: AsyncSession, user: User) -> str:
    """Insert a sessions row for the user and return the signed cookie value"""
    sid = generate_session_id()
    db.add(UserSession(
        sid=sid,
        user_id=user.id,
        expire=datetime.now(timezone.utc) + SESSION_MAX_AGE,
    ))
    await db.flush()
    return create_session_token(user.id, sid, user.token_version)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(SESSION_MAX_AGE.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


async def email_taken(db: AsyncSession, email: str, exclude_user_id: int = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query)
    return result.first() is not None


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    if await email_taken(db, payload.email):
        raise ConflictError("User already exists")

    new_user = User(
        name=payload.name,
        email=payload.email,
        password=get_password_hash(payload.password),
    )
    db.add(new_user)
    try:
        await db.flush()
        token = await open_session(db, new_user)
        await db.commit()
    except IntegrityError:
        # Concurrent registration with the same email
        await db.rollback()
        raise ConflictError("User already exists")

    await db.refresh(new_user)
    set_session_cookie(response, token)
    logger.great("User registered", user_id=new_user.id)

    return {
        "user": UserProfileOut.model_validate(new_user),
        "message": "User registered successfully",
        "success": True,
    }


@router.post("/login")
async def login(
    payload: Login,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis)
):
    ip = client_ip(request)
    if not await allow(
        redis, "login", payload.email, ip,
        max_attempts=settings.LOGIN_MAX_ATTEMPTS,
        window_sec=settings.LOGIN_WINDOW_SEC
    ):
        logger.warning("Login rate limited", email=payload.email, ip=ip)
        raise RateLimitedError()

    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(payload.password, user.password):
        logger.warning("Login failed", email=payload.email, ip=ip)
        raise InvalidCredentialsError()

    user.last_login_at = datetime.now(timezone.utc)
    token = await open_session(db, user)
    await db.commit()
    await db.refresh(user)

    await reset(redis, "login", payload.email, ip)
    set_session_cookie(response, token)
    logger.info("User logged in", user_id=user.id)

    return {
        "user": UserProfileOut.model_validate(user),
        "message": f"Welcome {user.name}",
        "success": True,
    }


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    claims = decode_session_token(token) if token else None
    if claims:
        await db.execute(delete(UserSession).where(UserSession.sid == claims["sid"]))
        await db.commit()

    clear_session_cookie(response)
    return {"message": "Logout successful", "success": True}


@router.get("/me")
async def read_me(current_user: User = Depends(get_current_user)):
    return {"user": UserProfileOut.model_validate(current_user), "success": True}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update the caller's profile.

    Only whitelisted profile columns are written; any other key in the body
    is dropped during validation.
    """
    changes = payload.changes()

    if changes.get("email") and changes["email"] != current_user.email:
        if await email_taken(db, changes["email"], exclude_user_id=current_user.id):
            raise ConflictError("Email already taken")

    for field, value in changes.items():
        setattr(current_user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already taken")

    await db.refresh(current_user)
    logger.info("Profile updated", user_id=current_user.id, fields=",".join(sorted(changes)))

    return {
        "user": UserProfileOut.model_validate(current_user),
        "message": "Profile updated successfully",
        "success": True,
    }


@router.put("/password")
async def change_password(
    payload: PasswordChange,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Change the caller's password.

    Bumps token_version and drops every session of the user, then issues a
    fresh cookie for the caller.
    """
    if not verify_password(payload.oldPassword, current_user.password):
        raise InvalidCredentialsError("Current password is incorrect")

    current_user.password = get_password_hash(payload.newPassword)
    current_user.token_version = (current_user.token_version or 1) + 1
    await db.execute(delete(UserSession).where(UserSession.user_id == current_user.id))
    token = await open_session(db, current_user)
    await db.commit()

    set_session_cookie(response, token)
    logger.info("Password changed", user_id=current_user.id)

    return {"message": "Password changed successfully", "success": True}
