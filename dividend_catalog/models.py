"""
Dividend Catalog - Data Models

Stored entity types for users and dividend records, plus helpers for the
"YEAR:AMOUNT" encoding used by year-wise dividend history.
"""
import enum
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Frequency(str, enum.Enum):
    """Dividend payment frequency"""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class NewUser(BaseModel):
    """Input to the store's create_user.

    ``password`` is whatever credential string the caller wants kept
    (the auth layer passes a hash). ``is_admin`` left as None means the
    store applies its configured default.
    """
    username: str
    password: str
    is_admin: Optional[bool] = None


class User(CamelModel):
    """Stored user account"""
    id: int
    username: str
    password: str
    is_admin: bool = False

    def __repr__(self):
        return f"<User {self.username}>"


class UserResponse(CamelModel):
    """Public view of a user - never carries the password"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    username: str
    is_admin: bool


class DividendRecord(CamelModel):
    """Stored dividend-payment record for one listed company"""
    id: int
    company_name: str
    ticker: str
    sector: str
    established: int
    quoted_date: int
    fy_ending: str
    dividend_amount: str
    dividend_yield: Optional[str] = Field(default=None, alias="yield")
    frequency: Frequency
    year_wise_data: List[str] = Field(default_factory=list)
    last_updated: datetime

    def __repr__(self):
        return f"<DividendRecord {self.id} {self.ticker}>"


# ─────────────────────────────────────────────────────────────────────────────
# Year-wise data encoding
# ─────────────────────────────────────────────────────────────────────────────

YEAR_SEPARATOR = ":"


def parse_year_entry(entry: str) -> Tuple[int, str]:
    """Split a "YEAR:AMOUNT" entry on its first colon.

    Raises ValueError if the separator is missing or the year is not an integer.
    """
    year, sep, amount = entry.partition(YEAR_SEPARATOR)
    if not sep:
        raise ValueError(f"Year entry {entry!r} must look like 'YEAR:AMOUNT'")
    return int(year.strip()), amount.strip()


def format_year_entry(year: int, amount: str) -> str:
    return f"{year}{YEAR_SEPARATOR}{amount}"


def replace_year_entry(entries: List[str], year: int, amount: str) -> List[str]:
    """Drop any entry for ``year`` and append the new one at the end.

    Remaining entries keep their order; the list is never re-sorted.
    """
    prefix = str(year)
    kept = [e for e in entries if e.split(YEAR_SEPARATOR, 1)[0].strip() != prefix]
    kept.append(format_year_entry(year, amount))
    return kept
