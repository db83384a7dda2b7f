"""
Transaction read model.
Turns the ledger snapshot into typed transactions with running totals.
"""
import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from core.config import Settings, get_settings
from core.exceptions import BackingStoreError, ValidationError
from core.logger import setup_logger
from core.parsing import TRANSACTION_COLUMNS, parse_csv
from core.schema import Transaction, TransactionSummary, TransactionType
from core.store import BlobStore

logger = setup_logger(__name__)

# Dashboard filter name -> transaction type (None keeps everything)
FILTERS = {
    "all": None,
    "income": "income",
    "expenses": "expense",
    "expense": "expense",
}


def parse_amount(value: str) -> Decimal:
    """
    Parse a ledger amount such as "$1,200.50" or "-150".
    Removes currency symbols, grouping separators and spaces. Exponent
    notation is not accepted and the value must fit in a float, since
    amounts travel as JSON numbers.

    Args:
        value: Raw amount text

    Returns:
        Signed decimal amount

    Raises:
        ValueError: If no finite number remains after cleaning
    """
    cleaned = str(value).strip().replace("$", "").replace(",", "").replace(" ", "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if "e" in cleaned.lower() or not amount.is_finite() or not math.isfinite(float(amount)):
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def classify(type_hint: Optional[str], amount: Decimal) -> TransactionType:
    """An explicit "expense" hint or a negative amount makes an expense."""
    if (type_hint or "").strip().lower() == "expense" or amount < 0:
        return "expense"
    return "income"


def build_transaction(
    row_number: int,
    date: str,
    description: str,
    amount_text: str,
    type_hint: Optional[str] = "",
    balance: Decimal = Decimal("0"),
) -> Transaction:
    """
    Build a Transaction from raw column values.

    Raises:
        ValueError: If the amount cannot be parsed
    """
    amount = parse_amount(amount_text)
    return Transaction(
        id=str(row_number),
        date=date,
        description=description,
        amount=abs(amount),
        type=classify(type_hint, amount),
        balance=balance,
    )


def signed_amount(txn: Transaction) -> Decimal:
    return txn.amount if txn.type == "income" else -txn.amount


@dataclass
class TransactionListing:
    """Result of a ledger read. ``error`` is set when the snapshot was unreadable."""
    transactions: List[Transaction] = field(default_factory=list)
    summary: TransactionSummary = field(default_factory=TransactionSummary)
    skipped_rows: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class TransactionService:
    """Service for reading the club ledger."""

    def __init__(self, store: BlobStore, settings: Optional[Settings] = None):
        """Initialize transaction service."""
        self.store = store
        self.settings = settings or get_settings()

    def load_transactions(self) -> TransactionListing:
        """
        Read and parse the full ledger, computing running balances.

        Rows with too few columns or an unparseable amount are skipped and
        counted.

        Raises:
            BackingStoreError: If the snapshot cannot be read
        """
        text = self.store.read_text(self.settings.transactions_file)
        parsed = parse_csv(text, TRANSACTION_COLUMNS, source=self.settings.transactions_file)

        listing = TransactionListing(skipped_rows=parsed.skipped_rows)
        balance = Decimal("0")

        for row in parsed.rows:
            date, description, amount_text, type_hint = row.fields[:TRANSACTION_COLUMNS]
            try:
                txn = build_transaction(row.row_number, date, description, amount_text, type_hint)
            except (ValueError, ArithmeticError) as e:
                listing.skipped_rows += 1
                logger.warning(f"Skipping ledger row {row.row_number}: {e}")
                continue

            balance += signed_amount(txn)
            listing.transactions.append(txn.model_copy(update={"balance": balance}))

        listing.summary = self.summarize(listing.transactions)
        return listing

    def list_transactions(self, filter_name: str = "all") -> TransactionListing:
        """
        List ledger entries for the dashboard.

        Never raises for an unreadable snapshot: the listing comes back
        empty with ``error`` set instead.

        Args:
            filter_name: "all", "income" or "expenses"

        Returns:
            TransactionListing with entries in file order

        Raises:
            ValidationError: If the filter name is unknown
        """
        key = (filter_name or "all").strip().lower()
        if key not in FILTERS:
            raise ValidationError(
                f"Filtro desconocido: {filter_name}",
                details={"allowed": sorted(FILTERS)}
            )

        try:
            listing = self.load_transactions()
        except BackingStoreError as e:
            logger.error(f"Failed to read transactions: {e.message} {e.details}")
            return TransactionListing(error="Failed to read transactions")

        wanted = FILTERS[key]
        if wanted is not None:
            listing.transactions = [t for t in listing.transactions if t.type == wanted]

        logger.info(
            f"Listed {len(listing.transactions)} transaction(s) "
            f"(filter={key}, skipped={listing.skipped_rows})"
        )
        return listing

    def summarize(self, transactions: List[Transaction]) -> TransactionSummary:
        """
        Build dashboard totals.

        Args:
            transactions: Entries to total

        Returns:
            TransactionSummary with collected, expenses and balance
        """
        income = [t.amount for t in transactions if t.type == "income"]
        expenses = [t.amount for t in transactions if t.type == "expense"]
        total_collected = sum(income, Decimal("0"))
        total_expenses = sum(expenses, Decimal("0"))
        return TransactionSummary(
            total_collected=total_collected,
            total_expenses=total_expenses,
            current_balance=total_collected - total_expenses,
            income_count=len(income),
            expense_count=len(expenses),
        )
