"""
Row validation for third-party CSV imports.

Rows are read one at a time from any iterable of text lines, so an upload is
never loaded into memory whole. Header names are matched case-insensitively.
"""
import csv
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

NAME_REQUIRED = "name is required"
RISK_SCORE_NOT_NUMBER = "riskscore must be a number"

TEXT_COLUMNS = ("email", "company", "role", "industry")


@dataclass
class RowError:
    row_number: int
    row: Dict[str, Any]
    error: str


@dataclass
class IngestReport:
    accepted: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.accepted) + len(self.errors)


def normalize_row(row: Dict[Optional[str], Any]) -> Dict[str, str]:
    normalized = {}
    for key, value in row.items():
        # csv.DictReader files overflow cells under the None key
        if key is None:
            continue
        normalized[key.strip().lower()] = value.strip() if isinstance(value, str) else ""
    return normalized


def parse_risk_score(raw: str) -> Optional[float]:
    """Return the numeric score, 0.0 for blank input, None when not a finite number."""
    if raw == "":
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def validate_row(row: Dict[Optional[str], Any]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Check one CSV row. Returns (fields, None) when accepted or (None, reason).

    The name check runs before the riskscore check, so a row failing both
    reports the missing name.
    """
    normalized = normalize_row(row)

    name = normalized.get("name", "")
    if not name:
        return None, NAME_REQUIRED

    risk_score = parse_risk_score(normalized.get("riskscore", ""))
    if risk_score is None:
        return None, RISK_SCORE_NOT_NUMBER

    fields = {"name": name, "risk_score": risk_score}
    for column in TEXT_COLUMNS:
        fields[column] = normalized.get(column, "")
    return fields, None


def iter_rows(lines: Iterable[str]) -> Iterator[Dict[Optional[str], Any]]:
    yield from csv.DictReader(lines)


def validate_rows(lines: Iterable[str]) -> IngestReport:
    report = IngestReport()
    for row_number, row in enumerate(iter_rows(lines), start=1):
        fields, reason = validate_row(row)
        if reason is not None:
            original = {k: v for k, v in row.items() if k is not None}
            report.errors.append(RowError(row_number=row_number, row=original, error=reason))
        else:
            report.accepted.append(fields)
    return report
