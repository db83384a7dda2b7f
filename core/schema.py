"""
Pydantic schemas for records and request/response validation.
JSON field names follow the portal's public API (camelCase).
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Decimals travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

TransactionType = Literal["income", "expense"]

ACTIVE_STATUS = "active"


class AllowedPhoneRecord(BaseModel):
    """A row of the allow-list snapshot."""
    phone_number: str
    name: str = ""
    status: str = ""

    @property
    def is_active(self) -> bool:
        return self.status.strip().lower() == ACTIVE_STATUS


class Transaction(BaseModel):
    """A ledger entry. The sign lives in ``type``; ``amount`` is never negative."""
    id: str
    date: str
    description: str
    amount: Money = Field(..., ge=0)
    type: TransactionType
    balance: Money = Field(default=Decimal("0"), description="Running balance after this entry")


class TransactionSummary(BaseModel):
    """Dashboard totals."""
    model_config = ConfigDict(populate_by_name=True)

    total_collected: Money = Field(default=Decimal("0"), alias="totalCollected")
    total_expenses: Money = Field(default=Decimal("0"), alias="totalExpenses")
    current_balance: Money = Field(default=Decimal("0"), alias="currentBalance")
    income_count: int = Field(default=0, alias="incomeCount")
    expense_count: int = Field(default=0, alias="expenseCount")


class SessionEntry(BaseModel):
    """An authenticated session held by the registry."""
    model_config = ConfigDict(frozen=True)

    token: str
    phone_number: str
    authenticated_at: datetime

    @property
    def authenticated_at_ms(self) -> int:
        """Issuance time as epoch milliseconds."""
        return int(self.authenticated_at.timestamp() * 1000)


# Requests. Fields are optional so that a missing value is reported as a 400.

class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")


class CheckSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_token: Optional[str] = Field(default=None, alias="sessionToken")


# Responses

class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    session_token: str = Field(..., alias="sessionToken")
    phone_number: str = Field(..., alias="phoneNumber")
    message: str


class SessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    phone_number: str = Field(..., alias="phoneNumber")
    authenticated_at: int = Field(..., alias="authenticatedAt", description="Epoch milliseconds")


class TransactionsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    transactions: List[Transaction] = Field(default_factory=list)
    summary: TransactionSummary = Field(default_factory=TransactionSummary)
    skipped_rows: int = Field(default=0, alias="skippedRows")
    error: Optional[str] = None


class AllowedPhonesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    allowed_phones: List[AllowedPhoneRecord] = Field(default_factory=list, alias="allowedPhones")
    skipped_rows: int = Field(default=0, alias="skippedRows")
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
