"""
Core Data Models for Expense Notes

These models define the strict schemas for expense records and the
shapes that flow into and out of the store:
1. Expense - one persisted record
2. ImportItem - one item from a remote import payload
3. ExpenseQuery / ExpenseQueryResult - browse, search and filter

DESIGN DECISION: We validate at the model boundary. The store builds
every record through Expense, so a malformed record (empty title,
non-positive amount) can never reach persistence.
"""

from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PaidStatus(int, Enum):
    """
    Paid flag for an expense.

    Stored as 0/1 in the serialized collection.
    Manual inserts start PAID, imports start UNPAID.
    """
    UNPAID = 0
    PAID = 1

    def toggled(self) -> "PaidStatus":
        return PaidStatus.UNPAID if self is PaidStatus.PAID else PaidStatus.PAID


class SortOrder(str, Enum):
    """Supported orderings for expense queries."""
    NEWEST = "newest"
    OLDEST = "oldest"
    AMOUNT_DESC = "amount_desc"
    AMOUNT_ASC = "amount_asc"


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if not isinstance(v, str):
        return v
    v = v.strip()
    return v or None


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single expense record as held by the store.

    CRITICAL: id and created_at are assigned by the store and never change
    after creation. Only title, amount, category and paid are mutable.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = Field(
        ...,
        ge=1,
        description="Store-assigned identifier, unique within the store"
    )
    title: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount spent"
    )
    category: Optional[str] = Field(
        default=None,
        description="Free-text category, None when uncategorized"
    )
    paid: PaidStatus = Field(
        default=PaidStatus.PAID,
        description="Paid flag (0 or 1)"
    )
    created_at: int = Field(
        ...,
        ge=0,
        description="Creation time in epoch milliseconds"
    )

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v: Optional[str]) -> Optional[str]:
        """An empty category means uncategorized."""
        return _blank_to_none(v)

    @property
    def is_paid(self) -> bool:
        return self.paid is PaidStatus.PAID

    def to_storage_dict(self) -> dict:
        """
        Convert to the dictionary written into the serialized collection.

        Shape: {id, title, amount, category, paid, created_at}
        """
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "category": self.category,
            "paid": self.paid.value,
            "created_at": self.created_at,
        }


class ImportItem(BaseModel):
    """
    One item from an import payload.

    Remote sources carry many more attributes (description, stock, ...);
    only title, price and category are used.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(
        ...,
        min_length=1,
        description="Becomes the expense title"
    )
    price: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Becomes the expense amount"
    )
    category: Optional[str] = None

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


# =============================================================================
# QUERY MODELS
# =============================================================================

class ExpenseQuery(BaseModel):
    """
    A browse/search/filter request over the expense list.

    All filters are optional; an empty query lists everything newest first.
    """

    search: Optional[str] = Field(
        default=None,
        description="Case-insensitive substring to look for in titles"
    )
    category: Optional[str] = Field(
        default=None,
        description="Exact category to match"
    )
    paid: Optional[PaidStatus] = Field(
        default=None,
        description="Only paid or only unpaid expenses"
    )
    sort: SortOrder = SortOrder.NEWEST

    limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of expenses to return"
    )
    offset: int = Field(
        default=0,
        ge=0
    )

    @field_validator('search', 'category', mode='before')
    @classmethod
    def blank_filters_are_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ExpenseQueryResult(BaseModel):
    """Result of executing an ExpenseQuery."""

    expenses: list[Expense] = Field(default_factory=list)
    result_count: int = Field(
        ge=0,
        description="Number of expenses matching the filters, before paging"
    )

    # Totals over every matching expense, not only the returned page
    total_amount: float = 0.0
    paid_total: float = 0.0
    unpaid_total: float = 0.0

    @property
    def data_found(self) -> bool:
        return self.result_count > 0
