"""
CSV parsing for bulk job import.

Turns an uploaded CSV file into job field dictionaries ready to be inserted.
Header names are trimmed, cell values are trimmed, blank optional cells become
None and dates must be ISO formatted (YYYY-MM-DD).
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from app.utils.constants import DEFAULT_JOB_STATUS
from app.utils.helpers import blank_to_none


class CSVImportError(ValueError):
    """Raised when an uploaded CSV cannot be read."""


@dataclass
class ParsedJobsCSV:
    """Result of parsing an import file."""

    rows: List[Dict] = field(default_factory=list)
    skipped_rows: List[int] = field(default_factory=list)  # 1-based data row numbers


def parse_date(value: Optional[str], column: str, row_number: int) -> Optional[date]:
    """
    Parse an optional ISO date cell.

    Raises:
        CSVImportError: If the cell is not blank and not YYYY-MM-DD
    """
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise CSVImportError(
            f"Row {row_number}: invalid {column} '{value}' (expected YYYY-MM-DD)"
        )


def parse_job_row(data: Dict[str, Optional[str]], row_number: int) -> Dict:
    """Map one CSV record to job fields."""
    return {
        "company": (data.get("company") or "").strip(),
        "role": (data.get("role") or "").strip(),
        "status": blank_to_none(data.get("status")) or DEFAULT_JOB_STATUS,
        "deadline": parse_date(data.get("deadline"), "deadline", row_number),
        "applied_through": blank_to_none(data.get("applied_through")),
        "interview_date": parse_date(data.get("interview_date"), "interview_date", row_number),
    }


def parse_jobs_csv(content: bytes) -> ParsedJobsCSV:
    """
    Parse raw CSV bytes into job rows.

    Rows without a company or role are skipped and reported by number.

    Args:
        content: Uploaded file contents

    Returns:
        ParsedJobsCSV with insertable rows and skipped row numbers

    Raises:
        CSVImportError: If the file is not UTF-8, is malformed or has a bad date
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise CSVImportError("File is not valid UTF-8 text")

    reader = csv.DictReader(io.StringIO(text, newline=""), skipinitialspace=True)
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]

    result = ParsedJobsCSV()
    try:
        for row_number, data in enumerate(reader, start=1):
            if not any((value or "").strip() for value in data.values() if isinstance(value, str)):
                continue  # blank line
            job = parse_job_row(data, row_number)
            if not job["company"] or not job["role"]:
                result.skipped_rows.append(row_number)
                continue
            result.rows.append(job)
    except csv.Error as e:
        raise CSVImportError(f"Malformed CSV: {e}")

    return result
