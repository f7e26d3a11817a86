from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import WorkbookReadError, read_workbook
from ..excel.writer import write_workbook
from ..logging.finding_log import FindingLogBuffer
from ..logging.init import log_finding
from ..models.config_models import AppConfig
from ..models.finding_record import FindingRecord
from ..models.run_result import RunResult, SheetStat
from ..models.sheet import SheetType
from .binding import MissingSkuColumnError
from .progress import ProgressTracker
from .reactivity import ReactivityError
from .workbook import Workbook

"""Run orchestration for the command line tool.

1. Read the workbook file into a raw table
2. Import it into a Workbook (full replacement, all SKUs regenerated)
3. Validate every data sheet, buffering findings for the findings log
4. Optionally write the regenerated workbook back out
"""

__all__ = [
    "RunError",
    "load_workbook",
    "run_workbook",
]

logger = logging.getLogger(__name__)


class RunError(Exception):
    """Fatal error that stops a run (unreadable workbook, broken sheet structure)."""


def load_workbook(path: Path, config: AppConfig) -> tuple[Workbook, int]:
    """Read and import `path`. Returns the workbook and the number of regenerated SKU cells."""
    try:
        raw = read_workbook(path, keep_na_strings=config.import_options.keep_na_strings)
    except WorkbookReadError as e:
        raise RunError(str(e)) from e
    workbook = Workbook(settings=config.settings, import_options=config.import_options)
    try:
        regenerated = workbook.import_sheets(raw)
    except (MissingSkuColumnError, ReactivityError) as e:
        raise RunError(f"import failed: {e}") from e
    return workbook, regenerated


def run_workbook(
    path: Path,
    config: AppConfig,
    findings_log: FindingLogBuffer | None = None,
    output: Path | None = None,
) -> RunResult:
    """Import, regenerate and validate one workbook file."""
    start_time = datetime.now(UTC)
    workbook, regenerated = load_workbook(path, config)

    data_sheets = [s for s in workbook.sheets if s.type is SheetType.DATA]
    reports = []
    stats: list[SheetStat] = []
    with ProgressTracker(len(data_sheets)) as progress:
        for sheet in data_sheets:
            progress.start_sheet(sheet.name)
            report = workbook.run_validation(sheet.id)
            for finding in report.all_findings():
                log_finding(sheet.name, finding)
                if findings_log is not None:
                    findings_log.append(FindingRecord.create(sheet.name, finding))
            reports.append(report)
            stats.append(SheetStat(
                sheet_name=sheet.name,
                data_rows=len(sheet.data_row_indices),
                missing_values=len(report.missing_value),
                duplicate_skus=len(report.duplicate_sku),
            ))
            progress.finish_sheet(report)

    if output is not None:
        written = write_workbook(workbook.export_sheets(), output)
        logger.info(f"wrote regenerated workbook: {written}")

    end_time = datetime.now(UTC)
    return RunResult(
        sheets=len(data_sheets),
        data_rows=sum(s.data_rows for s in stats),
        missing_values=sum(s.missing_values for s in stats),
        duplicate_skus=sum(s.duplicate_skus for s in stats),
        regenerated_cells=regenerated,
        start_time=start_time,
        end_time=end_time,
        reports=reports,
        sheet_stats=stats,
    )
