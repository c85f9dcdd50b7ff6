"""
Dividend Catalog - Module Entry Point

An in-memory catalog of corporate dividend records behind a small
admin-gated JSON API:
- Record store for users and dividend records
- Request validation schemas
- JWT-based access gate
- FastAPI application factory
"""

__version__ = "1.0.0"

from .models import DividendRecord, Frequency, User
from .schemas import DividendCreate, DividendUpdate, YearAmount
from .storage import IStorage, MemStorage, RecordNotFoundError, UsernameTakenError

__all__ = [
    "DividendRecord",
    "Frequency",
    "User",
    "DividendCreate",
    "DividendUpdate",
    "YearAmount",
    "IStorage",
    "MemStorage",
    "RecordNotFoundError",
    "UsernameTakenError",
]
