"""
Minimal CSV parsing for the allow-list and ledger snapshots.
Comma-delimited, header row first, no quoting or escaping.
"""
from dataclasses import dataclass, field
from typing import List

from core.logger import setup_logger

logger = setup_logger(__name__)

# Minimum column counts per schema
PHONE_COLUMNS = 3  # phone_number, name, status
TRANSACTION_COLUMNS = 4  # date, description, amount, type


@dataclass
class CsvRow:
    """A data line split into trimmed fields."""
    row_number: int
    fields: List[str]


@dataclass
class ParseResult:
    """Accepted rows in file order plus the number of dropped lines."""
    header: List[str] = field(default_factory=list)
    rows: List[CsvRow] = field(default_factory=list)
    skipped_rows: int = 0


def split_line(line: str) -> List[str]:
    """Split a line on commas and trim every field."""
    return [value.strip() for value in line.split(",")]


def parse_csv(text: str, min_columns: int, source: str = "csv") -> ParseResult:
    """
    Parse delimited text into rows.

    The first non-empty line is the header and is not validated. Data lines
    with fewer than ``min_columns`` fields are dropped and counted in
    ``skipped_rows``; they never raise.

    Args:
        text: Raw file contents
        min_columns: Minimum number of fields a data line needs
        source: Name used in log messages

    Returns:
        ParseResult with header, accepted rows and skipped count
    """
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]

    result = ParseResult()
    if not lines:
        logger.debug(f"{source}: no content")
        return result

    result.header = split_line(lines[0])

    for row_number, line in enumerate(lines[1:], start=1):
        values = split_line(line)
        if len(values) < min_columns:
            result.skipped_rows += 1
            logger.debug(
                f"{source}: skipping row {row_number} "
                f"({len(values)} of {min_columns} columns)"
            )
            continue
        result.rows.append(CsvRow(row_number=row_number, fields=values))

    if result.skipped_rows:
        logger.warning(
            f"{source}: skipped {result.skipped_rows} malformed row(s), "
            f"accepted {len(result.rows)}"
        )

    return result
