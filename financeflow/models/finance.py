"""
Core Data Models for FinanceFlow

These models define the strict schemas for every record kind the
ledger keeps. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable to the record store as plain JSON
4. Keep money in Decimal, never float

DESIGN DECISION: Records are complete and valid by construction.
Raw user input lives in the *Draft models and only becomes a record
after passing through the validator.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class OperationType(str, Enum):
    """
    Kind of money movement.

    The stored amount is always positive; the sign of the balance
    effect comes from this type when the operation is recorded.
    """
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"

    @property
    def display_name(self) -> str:
        return {
            OperationType.EXPENSE: "Expense",
            OperationType.INCOME: "Income",
            OperationType.TRANSFER: "Transfer",
        }[self]


class BudgetPeriod(str, Enum):
    """Budget period. Stored with the budget but not applied to spent."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @property
    def display_name(self) -> str:
        return self.value.title()


class AccountType(str, Enum):
    """Where the money of an account lives."""
    CASH = "cash"
    CARD = "card"
    DEPOSIT = "deposit"
    WALLET = "wallet"
    CRYPTO = "crypto"

    @property
    def display_name(self) -> str:
        return {
            AccountType.CASH: "Cash",
            AccountType.CARD: "Card",
            AccountType.DEPOSIT: "Deposit",
            AccountType.WALLET: "E-Wallet",
            AccountType.CRYPTO: "Crypto",
        }[self]

    @property
    def icon(self) -> str:
        return {
            AccountType.CASH: "banknote",
            AccountType.CARD: "creditcard",
            AccountType.DEPOSIT: "building.2",
            AccountType.WALLET: "wallet.pass",
            AccountType.CRYPTO: "bitcoinsign",
        }[self]


class RecordKind(str, Enum):
    """The five record kinds held by the record store."""
    ACCOUNTS = "accounts"
    OPERATIONS = "operations"
    CATEGORIES = "categories"
    BUDGETS = "budgets"
    GOALS = "goals"


# =============================================================================
# RECORDS
# =============================================================================

def _normalize_currency(v: str) -> str:
    return v.strip().upper()


def _naive_local(v: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes become naive local time; the ledger compares against datetime.now()."""
    if v is not None and v.tzinfo is not None:
        return v.astimezone().replace(tzinfo=None)
    return v


class Account(BaseModel):
    """
    A place money is kept.

    balance is signed: an account can go negative after expenses.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    balance: Decimal = Field(default=Decimal("0"))
    currency: str = Field(default="KZT", min_length=3, max_length=3)
    account_type: AccountType = AccountType.CASH

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return _normalize_currency(v)


class Category(BaseModel):
    """
    Operation category.

    Built-in categories are seeded once (is_custom=False);
    categories created by the user have is_custom=True.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(default="📌", max_length=16)
    color: str = Field(
        default="CCCCCC",
        pattern=r"^#?[0-9A-Fa-f]{6}$",
        description="Hex color, with or without a leading #"
    )
    category_type: OperationType = OperationType.EXPENSE
    is_custom: bool = False

    @property
    def rgb(self) -> tuple[int, int, int]:
        """Color as an (r, g, b) tuple of 0-255 ints."""
        value = int(self.color.lstrip("#"), 16)
        return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


class Operation(BaseModel):
    """
    A single recorded income, expense or transfer.

    CRITICAL: amount is always positive. Operations are never
    edited after creation, only deleted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    operation_type: OperationType
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(default="KZT", min_length=3, max_length=3)
    category_id: UUID
    date: datetime = Field(default_factory=datetime.now)
    account_id: UUID
    description: str = Field(default="", max_length=500)
    attachments: list[str] = Field(
        default_factory=list,
        description="Base64-encoded attachment payloads"
    )

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return _normalize_currency(v)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return _naive_local(v)


class Budget(BaseModel):
    """
    Spending cap for one category.

    NOTE: spent is stored for compatibility but is NOT authoritative.
    The ledger recomputes it from operations on every read.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    category_id: UUID
    limit: Decimal = Field(..., gt=0)
    spent: Decimal = Field(default=Decimal("0"), ge=0)
    period: BudgetPeriod = BudgetPeriod.MONTH
    start_date: date = Field(default_factory=date.today)
    currency: str = Field(default="KZT", min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return _normalize_currency(v)


class Goal(BaseModel):
    """
    Savings target tied to one account.

    Funding a goal is bookkeeping only: the account balance is not touched.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: date
    currency: str = Field(default="KZT", min_length=3, max_length=3)
    account_id: UUID

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return _normalize_currency(v)

    @model_validator(mode='after')
    def validate_amounts(self) -> 'Goal':
        """Current amount lives in [0, target]."""
        if self.current_amount > self.target_amount:
            raise ValueError("Current amount cannot exceed target amount")
        return self


RECORD_MODELS: dict[RecordKind, type[BaseModel]] = {
    RecordKind.ACCOUNTS: Account,
    RecordKind.OPERATIONS: Operation,
    RecordKind.CATEGORIES: Category,
    RecordKind.BUDGETS: Budget,
    RecordKind.GOALS: Goal,
}

Record = Union[Account, Operation, Category, Budget, Goal]


# =============================================================================
# DRAFTS - raw user input, validated before becoming records
# =============================================================================

RawAmount = Optional[Union[Decimal, str]]


class OperationDraft(BaseModel):
    """
    Operation as typed into a form.

    All selections are optional here; the validator reports
    what is missing instead of failing on construction.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    operation_type: OperationType = OperationType.EXPENSE
    amount: RawAmount = None
    currency: Optional[str] = None
    category_id: Optional[UUID] = None
    account_id: Optional[UUID] = None
    date: Optional[datetime] = None
    description: str = ""

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _naive_local(v)


class AccountDraft(BaseModel):
    """Account as typed into a form. An empty name falls back to the type name."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    balance: RawAmount = None
    currency: Optional[str] = None
    account_type: AccountType = AccountType.CASH


class CategoryDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    icon: str = "📌"
    color: str = "CCCCCC"
    category_type: OperationType = OperationType.EXPENSE


class BudgetDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category_id: Optional[UUID] = None
    limit: RawAmount = None
    period: BudgetPeriod = BudgetPeriod.MONTH
    start_date: Optional[date] = None
    currency: Optional[str] = None


class GoalDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    target_amount: RawAmount = None
    deadline: Optional[date] = None
    currency: Optional[str] = None
    account_id: Optional[UUID] = None
