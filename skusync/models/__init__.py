"""Domain models for the specification/SKU synchronization engine."""

from .config_models import AppConfig, ImportOptions
from .finding import DuplicateSkuFinding, FindingType, MissingValueFinding, ValidationReport
from .finding_record import FindingRecord
from .run_result import RunResult, SheetStat
from .settings import AppSettings
from .sheet import CellData, ColumnDef, ColumnType, SheetConfig, SheetType, cell_text
from .specification import Specification, SpecValue, new_id
from .workbook_state import WorkbookState

__all__ = [
    # Configuration models
    "AppConfig",
    "AppSettings",
    "ImportOptions",
    # Specification models
    "SpecValue",
    "Specification",
    "new_id",
    # Sheet models
    "CellData",
    "ColumnDef",
    "ColumnType",
    "SheetConfig",
    "SheetType",
    "WorkbookState",
    "cell_text",
    # Findings
    "DuplicateSkuFinding",
    "FindingRecord",
    "FindingType",
    "MissingValueFinding",
    "ValidationReport",
    # Run results
    "RunResult",
    "SheetStat",
]
