"""
User Authentication and Access Control

Password hashing, JWT bearer tokens and the access gate that keeps
dividend mutations behind an admin principal.
"""

import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, NamedTuple, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, Field

from .config import Settings
from .models import NewUser, User
from .storage import IStorage

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer token scheme; a missing header is left for the gate to decide
security = HTTPBearer(auto_error=False)


# Pydantic models
class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserLogin(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    user_id: Optional[int] = None
    username: Optional[str] = None


# Password functions
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


# Token functions
def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(data: dict, settings: Settings) -> str:
    """Create JWT refresh token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def issue_tokens(user: User, settings: Settings) -> Token:
    claims = {"sub": user.username, "user_id": user.id}
    return Token(
        access_token=create_access_token(claims, settings),
        refresh_token=create_refresh_token(claims, settings),
    )


def verify_token(token: str, settings: Settings, token_type: str = "access") -> TokenData:
    """Verify and decode JWT token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise credentials_exception

    user_id = payload.get("user_id")
    username = payload.get("sub")
    if username is None or user_id is None:
        raise credentials_exception
    if payload.get("type") != token_type:
        raise credentials_exception

    return TokenData(user_id=user_id, username=username)


# User operations
def register_user(storage: IStorage, user_create: UserCreate) -> User:
    """Create a user with a hashed password; admin flag follows the store default"""
    new_user = NewUser(
        username=user_create.username,
        password=get_password_hash(user_create.password),
    )
    return storage.create_user(new_user)


def ensure_admin_user(storage: IStorage, username: str, password: str) -> User:
    """Create the bootstrap admin unless the username is already taken"""
    existing = storage.get_user_by_username(username)
    if existing is not None:
        if not existing.is_admin:
            logger.warning(f"Bootstrap admin {username!r} exists without admin rights")
        return existing

    user = storage.create_user(
        NewUser(username=username, password=get_password_hash(password), is_admin=True)
    )
    logger.info(f"Created bootstrap admin {username!r} (id={user.id})")
    return user


def authenticate_user(storage: IStorage, username: str, password: str) -> Optional[User]:
    """Authenticate user with username and password"""
    user = storage.get_user_by_username(username)
    if not user:
        return None
    if not verify_password(password, user.password):
        return None
    return user


def login_user(storage: IStorage, user_login: UserLogin, settings: Settings) -> Token:
    """Login user and return tokens"""
    user = authenticate_user(storage, user_login.username, user_login.password)
    if not user:
        logger.warning(f"Failed login for {user_login.username!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_tokens(user, settings)


def refresh_tokens(storage: IStorage, refresh_token: str, settings: Settings) -> Token:
    """Exchange a refresh token for a fresh token pair"""
    token_data = verify_token(refresh_token, settings, token_type="refresh")
    user = storage.get_user(token_data.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_tokens(user, settings)


# ─────────────────────────────────────────────────────────────────────────────
# Access gate
# ─────────────────────────────────────────────────────────────────────────────

class AccessDecision(str, enum.Enum):
    """Outcome of the admin check for a request's principal"""
    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def check_admin_access(user: Optional[User]) -> AccessDecision:
    if user is None:
        return AccessDecision.UNAUTHENTICATED
    if not user.is_admin:
        return AccessDecision.FORBIDDEN
    return AccessDecision.ALLOW


class AccessGate(NamedTuple):
    """FastAPI dependencies bound to one store and settings"""
    current_user: Callable[..., Awaitable[Optional[User]]]
    require_user: Callable[..., Awaitable[User]]
    require_admin: Callable[..., Awaitable[User]]


def _not_authenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def build_access_gate(storage: IStorage, settings: Settings) -> AccessGate:
    """Build the request dependencies that resolve and check the principal"""

    async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    ) -> Optional[User]:
        """Principal for the request, or None when there is no valid bearer token"""
        if credentials is None:
            return None
        try:
            token_data = verify_token(credentials.credentials, settings)
        except HTTPException:
            logger.warning("Rejected invalid bearer token")
            return None
        return storage.get_user(token_data.user_id)

    async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
        if user is None:
            raise _not_authenticated()
        return user

    async def require_admin(user: Optional[User] = Depends(get_current_user)) -> User:
        decision = check_admin_access(user)
        if decision is AccessDecision.UNAUTHENTICATED:
            raise _not_authenticated()
        if decision is AccessDecision.FORBIDDEN:
            logger.warning(f"User {user.username!r} denied admin access")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required",
            )
        return user

    return AccessGate(get_current_user, require_user, require_admin)
