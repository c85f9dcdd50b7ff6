"""Record store - in-memory users and dividend records.

All store implementations subclass IStorage. MemStorage keeps each
collection in a dict keyed by id with its own sequential counter, and
hands out deep copies so no caller holds a reference into the store.
"""
import copy
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from .models import DividendRecord, NewUser, User
from .schemas import DividendCreate


class RecordNotFoundError(LookupError):
    """Raised when updating a dividend id the store does not hold"""

    def __init__(self, dividend_id: int):
        super().__init__(f"Dividend {dividend_id} not found")
        self.dividend_id = dividend_id


class UsernameTakenError(ValueError):
    """Raised when registering a username that already exists"""

    def __init__(self, username: str):
        super().__init__(f"Username {username!r} already exists")
        self.username = username


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IStorage(ABC):
    """Data-access interface used by the HTTP layer"""

    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    def create_user(self, new_user: NewUser) -> User:
        pass

    # Dividend records
    @abstractmethod
    def get_all_dividends(self) -> List[DividendRecord]:
        pass

    @abstractmethod
    def get_dividend(self, dividend_id: int) -> Optional[DividendRecord]:
        pass

    @abstractmethod
    def create_dividend(self, dividend: DividendCreate) -> DividendRecord:
        pass

    @abstractmethod
    def update_dividend(self, dividend_id: int, changes: Mapping[str, Any]) -> DividendRecord:
        pass

    @abstractmethod
    def delete_dividend(self, dividend_id: int) -> None:
        pass


class MemStorage(IStorage):
    """Process-local store; contents are lost on restart"""

    _SERVER_FIELDS = frozenset({"id", "last_updated"})

    def __init__(
        self,
        default_user_is_admin: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.default_user_is_admin = default_user_is_admin
        self._clock = clock or utc_now
        self._users: Dict[int, User] = {}
        self._dividends: Dict[int, DividendRecord] = {}
        self._current_user_id = 1
        self._current_dividend_id = 1
        self._lock = threading.RLock()

    # ── Users ────────────────────────────────────────────────────────────────

    def get_user(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        for user in list(self._users.values()):
            if user.username == username:
                return user.model_copy()
        return None

    def create_user(self, new_user: NewUser) -> User:
        with self._lock:
            if self.get_user_by_username(new_user.username) is not None:
                raise UsernameTakenError(new_user.username)

            is_admin = new_user.is_admin
            if is_admin is None:
                is_admin = self.default_user_is_admin

            user_id = self._current_user_id
            self._current_user_id += 1
            user = User(
                id=user_id,
                username=new_user.username,
                password=new_user.password,
                is_admin=is_admin,
            )
            self._users[user_id] = user
            return user.model_copy()

    # ── Dividend records ─────────────────────────────────────────────────────

    def get_all_dividends(self) -> List[DividendRecord]:
        return [d.model_copy(deep=True) for d in list(self._dividends.values())]

    def get_dividend(self, dividend_id: int) -> Optional[DividendRecord]:
        dividend = self._dividends.get(dividend_id)
        return dividend.model_copy(deep=True) if dividend else None

    def create_dividend(self, dividend: DividendCreate) -> DividendRecord:
        with self._lock:
            dividend_id = self._current_dividend_id
            self._current_dividend_id += 1
            record = DividendRecord(
                id=dividend_id,
                last_updated=self._clock(),
                **dividend.model_dump(),
            )
            self._dividends[dividend_id] = record
            return record.model_copy(deep=True)

    def update_dividend(self, dividend_id: int, changes: Mapping[str, Any]) -> DividendRecord:
        """Shallow-merge ``changes`` over the stored record.

        Keys are DividendRecord attribute names. ``id`` and ``last_updated``
        are server-assigned and ignored if present.
        """
        unknown = set(changes) - set(DividendRecord.model_fields)
        if unknown:
            raise ValueError(f"Unknown dividend fields: {sorted(unknown)}")

        with self._lock:
            existing = self._dividends.get(dividend_id)
            if existing is None:
                raise RecordNotFoundError(dividend_id)

            update = {
                k: copy.deepcopy(v) for k, v in changes.items() if k not in self._SERVER_FIELDS
            }
            update["last_updated"] = self._clock()
            updated = existing.model_copy(update=update)
            self._dividends[dividend_id] = updated
            return updated.model_copy(deep=True)

    def delete_dividend(self, dividend_id: int) -> None:
        with self._lock:
            self._dividends.pop(dividend_id, None)
