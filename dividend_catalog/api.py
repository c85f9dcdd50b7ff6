"""FastAPI web interface for browsing and administering dividend records"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings
from .config import settings as default_settings
from .models import DividendRecord, User, UserResponse, replace_year_entry
from .sample_data import seed_storage
from .schemas import DividendCreate, DividendUpdate, YearAmount
from .storage import IStorage, MemStorage, RecordNotFoundError, UsernameTakenError
from .user_auth import (
    AccessGate,
    RefreshRequest,
    Token,
    UserCreate,
    UserLogin,
    build_access_gate,
    ensure_admin_user,
    issue_tokens,
    login_user,
    refresh_tokens,
    register_user,
)

logger = logging.getLogger(__name__)


class AuthResponse(Token):
    user: UserResponse


def build_storage(settings: Settings) -> MemStorage:
    """Construct the process-wide store described by ``settings``"""
    storage = MemStorage(default_user_is_admin=settings.default_user_is_admin)
    if settings.seed_sample_data:
        seed_storage(storage)
    return storage


def create_app(settings: Optional[Settings] = None, storage: Optional[IStorage] = None) -> FastAPI:
    """Build the application around one store instance.

    Both arguments are optional; by default the module settings are used and
    a fresh MemStorage is built from them.
    """
    settings = settings or default_settings
    if storage is None:
        storage = build_storage(settings)

    if settings.admin_username and settings.admin_password:
        ensure_admin_user(storage, settings.admin_username, settings.admin_password)

    app = FastAPI(
        title="Dividend Catalog API",
        description="Browse corporate dividend records; admins maintain them",
        version=__version__,
    )
    app.state.settings = settings
    app.state.storage = storage

    register_exception_handlers(app)
    gate = build_access_gate(storage, settings)
    register_auth_routes(app, storage, settings, gate)
    register_dividend_routes(app, storage, gate)

    @app.get("/")
    async def root():
        """API root"""
        return {
            "name": "Dividend Catalog API",
            "version": __version__,
            "status": "running",
        }

    @app.get("/health")
    async def health_check():
        """Service health check"""
        return {
            "status": "healthy",
            "dividends": len(storage.get_all_dividends()),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Dividend not found"},
        )

    @app.exception_handler(UsernameTakenError)
    async def username_taken_handler(request: Request, exc: UsernameTakenError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Username already exists"},
        )


def register_auth_routes(app: FastAPI, storage: IStorage, settings: Settings, gate: AccessGate):
    """
    Register account endpoints:
        POST /api/register
        POST /api/login
        POST /api/token/refresh
        GET  /api/user
    """

    @app.post("/api/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
    async def register(user_create: UserCreate):
        """Create an account and log it in"""
        user = register_user(storage, user_create)
        logger.info(f"Registered user {user.username!r} (id={user.id}, admin={user.is_admin})")
        tokens = issue_tokens(user, settings)
        return AuthResponse(user=UserResponse.model_validate(user), **tokens.model_dump())

    @app.post("/api/login", response_model=Token)
    async def login(user_login: UserLogin):
        return login_user(storage, user_login, settings)

    @app.post("/api/token/refresh", response_model=Token)
    async def refresh(body: RefreshRequest):
        return refresh_tokens(storage, body.refresh_token, settings)

    @app.get("/api/user", response_model=UserResponse)
    async def current_user(user: User = Depends(gate.require_user)):
        """Get the logged-in user"""
        return UserResponse.model_validate(user)


def register_dividend_routes(app: FastAPI, storage: IStorage, gate: AccessGate):
    """
    Register dividend endpoints:
        GET    /api/dividends              public
        GET    /api/dividends/{id}         public
        POST   /api/dividends              admin
        PATCH  /api/dividends/{id}         admin
        POST   /api/dividends/{id}/year    admin
        DELETE /api/dividends/{id}         admin
    """

    @app.get("/api/dividends", response_model=List[DividendRecord])
    async def list_dividends():
        """All records in insertion order"""
        return storage.get_all_dividends()

    @app.get("/api/dividends/{dividend_id}", response_model=DividendRecord)
    async def get_dividend(dividend_id: int):
        dividend = storage.get_dividend(dividend_id)
        if dividend is None:
            raise HTTPException(status_code=404, detail="Dividend not found")
        return dividend

    @app.post("/api/dividends", response_model=DividendRecord, status_code=status.HTTP_201_CREATED)
    async def create_dividend(payload: DividendCreate, admin: User = Depends(gate.require_admin)):
        dividend = storage.create_dividend(payload)
        logger.info(f"{admin.username} created dividend {dividend.id} ({dividend.ticker})")
        return dividend

    @app.patch("/api/dividends/{dividend_id}", response_model=DividendRecord)
    async def update_dividend(
        dividend_id: int,
        payload: Optional[DividendUpdate] = None,
        admin: User = Depends(gate.require_admin),
    ):
        # A missing body is an empty change set
        changes = payload.changes() if payload is not None else {}
        dividend = storage.update_dividend(dividend_id, changes)
        logger.info(f"{admin.username} updated dividend {dividend_id}: {sorted(changes)}")
        return dividend

    @app.post("/api/dividends/{dividend_id}/year", response_model=DividendRecord)
    async def add_year_data(
        dividend_id: int,
        payload: YearAmount,
        admin: User = Depends(gate.require_admin),
    ):
        """Set the amount for one year, replacing any existing entry for it"""
        existing = storage.get_dividend(dividend_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="Dividend not found")

        year_wise_data = replace_year_entry(existing.year_wise_data, payload.year, payload.amount)
        dividend = storage.update_dividend(dividend_id, {"year_wise_data": year_wise_data})
        logger.info(f"{admin.username} set {payload.year}:{payload.amount} on dividend {dividend_id}")
        return dividend

    @app.delete("/api/dividends/{dividend_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_dividend(dividend_id: int, admin: User = Depends(gate.require_admin)):
        storage.delete_dividend(dividend_id)
        logger.info(f"{admin.username} deleted dividend {dividend_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)
