from __future__ import annotations

import logging
from collections import defaultdict

from ..models.finding import DuplicateSkuFinding, MissingValueFinding, ValidationReport
from ..models.sheet import SheetConfig, SheetType, cell_text
from .binding import BindingKind, find_sku_column, resolve_bindings

"""Validator: two independent, read-only passes over one sheet.

- Missing-value pass: non-empty cells of spec-bound columns whose text is not a
  current display value of the bound specification.
- Duplicate-SKU pass: non-empty SKU cells shared by two or more data rows.

Neither pass mutates the sheet; callers decide when to run them.
"""

__all__ = [
    "find_duplicate_skus",
    "find_missing_values",
    "run_validation",
]

logger = logging.getLogger(__name__)


def find_missing_values(sheet: SheetConfig) -> list[MissingValueFinding]:
    """Report spec-bound cells referencing labels absent from their specification."""
    if sheet.type is not SheetType.DATA:
        return []
    # 列ごとの有効ラベル集合はパス開始時に一度だけ構築
    targets = [
        (b.index, b.specification.name, b.specification.display_values)
        for b in resolve_bindings(sheet)
        if b.kind is BindingKind.SPEC and b.specification is not None
    ]
    findings: list[MissingValueFinding] = []
    if not targets:
        return findings
    for row_index in sheet.data_row_indices:
        for col, spec_name, valid in targets:
            text = cell_text(sheet.cell(row_index, col))
            if text and text not in valid:
                findings.append(MissingValueFinding(
                    row=row_index,
                    column=col,
                    spec_name=spec_name,
                    offending_value=text,
                ))
    return findings


def find_duplicate_skus(sheet: SheetConfig) -> list[DuplicateSkuFinding]:
    """Report every row whose non-empty SKU is shared with another row."""
    if sheet.type is not SheetType.DATA:
        return []
    sku_col = find_sku_column(sheet)
    if sku_col is None:
        return []
    groups: dict[str, list[int]] = defaultdict(list)
    for row_index in sheet.data_row_indices:
        sku = cell_text(sheet.cell(row_index, sku_col))
        if sku:
            groups[sku].append(row_index)
    findings: list[DuplicateSkuFinding] = []
    for sku, rows in groups.items():
        if len(rows) < 2:
            continue
        cluster = tuple(sorted(rows))
        for row_index in cluster:
            findings.append(DuplicateSkuFinding(row=row_index, column=sku_col, sku=sku, rows=cluster))
    findings.sort(key=lambda f: f.row)
    return findings


def run_validation(sheet: SheetConfig) -> ValidationReport:
    """Run both passes and bundle their findings."""
    report = ValidationReport(
        sheet_id=sheet.id,
        missing_value=tuple(find_missing_values(sheet)),
        duplicate_sku=tuple(find_duplicate_skus(sheet)),
    )
    logger.debug(
        f"validate sheet={sheet.name} missing_values={len(report.missing_value)} "
        f"duplicate_skus={len(report.duplicate_sku)}"
    )
    return report
