from __future__ import annotations

from dataclasses import dataclass, field

from .settings import AppSettings
from .sheet import SheetConfig

"""WorkbookState: all sheets plus settings, the single shared mutable structure."""

__all__ = [
    "WorkbookState",
]


@dataclass
class WorkbookState:
    sheets: list[SheetConfig] = field(default_factory=list)
    settings: AppSettings = field(default_factory=AppSettings)
    active_sheet_id: str | None = None

    def get_sheet(self, sheet_id: str) -> SheetConfig | None:
        for sheet in self.sheets:
            if sheet.id == sheet_id:
                return sheet
        return None

    def sheets_owning(self, spec_id: str) -> list[SheetConfig]:
        """Sheets whose current specification set contains `spec_id`."""
        return [s for s in self.sheets if s.find_specification(spec_id) is not None]
