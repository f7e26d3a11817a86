from __future__ import annotations

import logging
from dataclasses import replace

from ..models.sheet import CellData, ColumnType, SheetConfig, cell_text
from ..models.specification import Specification, SpecValue, new_id
from .binding import columns_bound_to, effective_columns
from .reactivity import SpecificationChangeset

"""Specification store: the only writer of a sheet's specification table.

Every mutator builds a new tuple of frozen Specification snapshots, assigns it
to `sheet.specifications` and returns a SpecificationChangeset for the
reactivity engine. The store never touches data cells except where a
structural operation owns them (renaming bound headers, removing the columns
of a deleted specification).
"""

__all__ = [
    "SpecificationStore",
    "SpecificationStoreError",
]

logger = logging.getLogger(__name__)


class SpecificationStoreError(Exception):
    """Raised for mutations addressing unknown specifications or values."""


class SpecificationStore:
    """Mutation API over one sheet's specifications."""

    def __init__(self, sheet: SheetConfig) -> None:
        self.sheet = sheet

    # --- helpers --------------------------------------------------------------

    def _commit(self, specifications: list[Specification] | tuple[Specification, ...]) -> SpecificationChangeset:
        self.sheet.specifications = tuple(specifications)
        return SpecificationChangeset(self.sheet.id, self.sheet.specifications)

    def _require(self, spec_id: str) -> Specification:
        spec = self.sheet.find_specification(spec_id)
        if spec is None:
            raise SpecificationStoreError(
                f"specification '{spec_id}' not found in sheet '{self.sheet.name}'"
            )
        return spec

    def _replace_spec(self, updated: Specification) -> SpecificationChangeset:
        return self._commit([updated if s.id == updated.id else s for s in self.sheet.specifications])

    def get(self, spec_id: str) -> Specification | None:
        return self.sheet.find_specification(spec_id)

    def ordered(self) -> list[Specification]:
        return sorted(self.sheet.specifications, key=lambda s: s.order)

    # --- specifications -------------------------------------------------------

    def create_specification(self, name: str) -> tuple[str, SpecificationChangeset]:
        """Append a new, empty specification after the current last one."""
        name = name.strip()
        if not name:
            raise SpecificationStoreError("specification name must not be blank")
        order = max((s.order for s in self.sheet.specifications), default=-1) + 1
        spec = Specification(id=new_id(), name=name, order=order)
        logger.debug(f"sheet={self.sheet.name} create specification '{name}' order={order}")
        return spec.id, self._commit([*self.sheet.specifications, spec])

    def rename_specification(self, spec_id: str, name: str) -> SpecificationChangeset:
        """Rename a specification and the headers of the columns bound to it."""
        spec = self._require(spec_id)
        name = name.strip()
        if not name:
            raise SpecificationStoreError("specification name must not be blank")
        if name == spec.name:
            return SpecificationChangeset(self.sheet.id, self.sheet.specifications)

        bound = columns_bound_to(self.sheet, spec_id)
        if self.sheet.columns:
            self.sheet.columns = [
                replace(col, header=name) if col.type is ColumnType.SPEC and col.spec_id == spec_id else col
                for col in self.sheet.columns
            ]
        if self.sheet.data:
            for col in bound:
                # 見出し駆動シートは見出し文字列が束縛キーなので旧名と一致するものだけ書き換える
                if self.sheet.columns or cell_text(self.sheet.cell(0, col)) == spec.name:
                    self.sheet.set_cell(0, col, CellData.of(name))
        return self._replace_spec(replace(spec, name=name))

    def reorder(self, spec_id: str, new_order: int) -> SpecificationChangeset:
        """Move a specification to `new_order`, shifting the ones in between."""
        spec = self._require(spec_id)
        old_order = spec.order
        if old_order == new_order:
            return SpecificationChangeset(self.sheet.id, self.sheet.specifications)
        updated: list[Specification] = []
        for s in self.sheet.specifications:
            if s.id == spec_id:
                updated.append(replace(s, order=new_order))
            elif old_order < new_order and old_order < s.order <= new_order:
                updated.append(replace(s, order=s.order - 1))
            elif old_order > new_order and new_order <= s.order < old_order:
                updated.append(replace(s, order=s.order + 1))
            else:
                updated.append(s)
        return self._commit(updated)

    def delete_specification(self, spec_id: str) -> SpecificationChangeset:
        """Remove a specification and every column bound to it.

        Remaining orders are renumbered 0..n-1 keeping their relative order.
        """
        self._require(spec_id)
        bound = columns_bound_to(self.sheet, spec_id)
        if bound:
            if not self.sheet.columns:
                self.sheet.columns = effective_columns(self.sheet)
            for col in sorted(bound, reverse=True):
                del self.sheet.columns[col]
                for row in self.sheet.data:
                    if col < len(row):
                        del row[col]
            logger.info(
                f"sheet={self.sheet.name} removed {len(bound)} column(s) bound to deleted specification"
            )
        remaining = sorted(
            (s for s in self.sheet.specifications if s.id != spec_id), key=lambda s: s.order
        )
        return self._commit([
            s if s.order == index else replace(s, order=index) for index, s in enumerate(remaining)
        ])

    # --- values ---------------------------------------------------------------

    def add_value(self, spec_id: str, display_value: str, sku_fragment: str) -> tuple[str, SpecificationChangeset]:
        spec = self._require(spec_id)
        value = SpecValue(id=new_id(), display_value=display_value, sku_fragment=sku_fragment)
        return value.id, self._replace_spec(replace(spec, values=(*spec.values, value)))

    def update_value(
        self,
        spec_id: str,
        value_id: str,
        display_value: str | None = None,
        sku_fragment: str | None = None,
    ) -> SpecificationChangeset:
        spec = self._require(spec_id)
        current = spec.get_value(value_id)
        if current is None:
            raise SpecificationStoreError(
                f"value '{value_id}' not found in specification '{spec.name}'"
            )
        updated = replace(
            current,
            display_value=current.display_value if display_value is None else display_value,
            sku_fragment=current.sku_fragment if sku_fragment is None else sku_fragment,
        )
        if updated == current:
            return SpecificationChangeset(self.sheet.id, self.sheet.specifications)
        values = tuple(updated if v.id == value_id else v for v in spec.values)
        return self._replace_spec(replace(spec, values=values))

    def remove_value(self, spec_id: str, value_id: str) -> SpecificationChangeset:
        spec = self._require(spec_id)
        if spec.get_value(value_id) is None:
            raise SpecificationStoreError(
                f"value '{value_id}' not found in specification '{spec.name}'"
            )
        values = tuple(v for v in spec.values if v.id != value_id)
        return self._replace_spec(replace(spec, values=values))
