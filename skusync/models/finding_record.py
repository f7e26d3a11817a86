from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .finding import DuplicateSkuFinding, MissingValueFinding

"""FindingRecord model for the findings log.

Each validation finding is written as one JSON Lines record with a fixed set of
keys. Rows and columns are 0-based sheet indices (row 0 = header row).
"""

__all__ = [
    "FindingRecord",
]


@dataclass(frozen=True)
class FindingRecord:
    """Structured finding record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        sheet: Sheet name the finding belongs to
        row: Sheet row index of the offending cell
        column: Sheet column index of the offending cell
        finding_type: `missing-value` or `duplicate-sku`
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    sheet: str
    row: int
    column: int
    finding_type: str
    message: str

    @staticmethod
    def create(sheet: str, finding: MissingValueFinding | DuplicateSkuFinding) -> FindingRecord:
        """Create a record for `finding` stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return FindingRecord(
            timestamp=ts,
            sheet=sheet,
            row=finding.row,
            column=finding.column,
            finding_type=finding.type.value,
            message=finding.message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
