"""
Dividend Catalog - Request Schemas

Validation models for dividend write requests. Every mutating endpoint
validates its body against one of these before the store is touched.
"""
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import CamelModel, Frequency, parse_year_entry

MIN_YEAR = 1800

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def validate_amount(value) -> str:
    """Check that a JSON string or number is a non-negative decimal amount.

    The amount is kept as the client wrote it (stripped); numbers become
    their ``str()`` form.

    >>> validate_amount(" 1.5 ")
    '1.5'
    """
    if isinstance(value, bool) or value is None:
        raise ValueError("amount must be a decimal number")
    text = str(value).strip()
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"{value!r} is not a decimal amount")
    if not amount.is_finite():
        raise ValueError(f"{value!r} is not a finite amount")
    # is_signed() also catches -0
    if amount.is_signed():
        raise ValueError("amount must not be negative")
    return text


def validate_month(value) -> str:
    if not isinstance(value, str):
        raise ValueError("fyEnding must be a month name")
    text = value.strip()
    if text.lower() not in {month.lower() for month in MONTHS}:
        raise ValueError(f"{value!r} is not a month name")
    return text


def validate_year_entry(entry) -> str:
    if not isinstance(entry, str):
        raise ValueError("year entries must be 'YEAR:AMOUNT' strings")
    try:
        year, amount = parse_year_entry(entry)
    except ValueError:
        raise ValueError(f"{entry!r} must look like 'YEAR:AMOUNT'")
    if year < MIN_YEAR:
        raise ValueError(f"year {year} is before {MIN_YEAR}")
    validate_amount(amount)
    return entry.strip()


class _DividendFields(CamelModel):
    """Field checks shared by the create and update schemas"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @field_validator("dividend_amount", "dividend_yield", mode="before", check_fields=False)
    @classmethod
    def check_amount(cls, value):
        if value is None:
            return value
        return validate_amount(value)

    @field_validator("fy_ending", mode="before", check_fields=False)
    @classmethod
    def check_month(cls, value):
        if value is None:
            return value
        return validate_month(value)

    @field_validator("year_wise_data", mode="before", check_fields=False)
    @classmethod
    def check_years(cls, value):
        if value is None:
            return value
        if not isinstance(value, list):
            raise ValueError("yearWiseData must be a list of 'YEAR:AMOUNT' strings")
        return [validate_year_entry(entry) for entry in value]


class DividendCreate(_DividendFields):
    """Full body for POST /api/dividends"""
    company_name: str = Field(min_length=1)
    ticker: str = Field(min_length=1)
    sector: str = Field(min_length=1)
    established: int = Field(ge=MIN_YEAR)
    quoted_date: int = Field(ge=MIN_YEAR)
    fy_ending: str
    dividend_amount: str
    dividend_yield: Optional[str] = Field(default=None, alias="yield")
    frequency: Frequency
    year_wise_data: List[str] = Field(default_factory=list)


class DividendUpdate(_DividendFields):
    """Partial body for PATCH /api/dividends/{id}; any subset of fields"""
    company_name: Optional[str] = Field(default=None, min_length=1)
    ticker: Optional[str] = Field(default=None, min_length=1)
    sector: Optional[str] = Field(default=None, min_length=1)
    established: Optional[int] = Field(default=None, ge=MIN_YEAR)
    quoted_date: Optional[int] = Field(default=None, ge=MIN_YEAR)
    fy_ending: Optional[str] = None
    dividend_amount: Optional[str] = None
    dividend_yield: Optional[str] = Field(default=None, alias="yield")
    frequency: Optional[Frequency] = None
    year_wise_data: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_no_explicit_nulls(self):
        # Only the yield may be cleared; every other field is required on the record
        for name in self.model_fields_set:
            if name != "dividend_yield" and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent, keyed by attribute name"""
        return self.model_dump(exclude_unset=True)


class YearAmount(CamelModel):
    """Body for POST /api/dividends/{id}/year"""
    year: int = Field(ge=MIN_YEAR)
    amount: str

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, value):
        return validate_amount(value)
