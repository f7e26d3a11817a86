from __future__ import annotations

import uuid
from dataclasses import dataclass
from functools import cached_property

"""Specification domain models.

A Specification is a named attribute category (Color, Size, ...) owning an
ordered list of SpecValues. Each SpecValue pairs the label users see in the
sheet with the SKU fragment it contributes to the generated code.

Both classes are frozen: the store never edits a snapshot in place, it builds
a new one. The reactivity engine relies on this to detect change by identity.
"""

__all__ = [
    "SpecValue",
    "Specification",
    "new_id",
]


def new_id() -> str:
    """Return a fresh opaque identifier for specifications, values, sheets and columns."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class SpecValue:
    """One selectable option inside a Specification."""
    id: str  # label/fragment から独立した安定 ID
    display_value: str  # セルに表示されるラベル
    sku_fragment: str  # SKU に寄与するコード片 (空文字 = SKU から除外)


@dataclass(frozen=True)
class Specification:
    """Named attribute category with ordered values.

    `name` doubles as the header text matched by header-driven sheets, and
    `order` determines the left-to-right position of its fragment in the SKU.
    """
    id: str
    name: str
    order: int
    values: tuple[SpecValue, ...] = ()

    @cached_property
    def value_index(self) -> dict[str, SpecValue]:
        """display_value -> SpecValue lookup, built once per snapshot.

        When two values share a label the first one wins, the same as a
        linear scan would.
        """
        index: dict[str, SpecValue] = {}
        for value in self.values:
            index.setdefault(value.display_value, value)
        return index

    @cached_property
    def display_values(self) -> frozenset[str]:
        return frozenset(self.value_index)

    def find_value(self, display_value: str) -> SpecValue | None:
        """Exact, case-sensitive lookup by label."""
        return self.value_index.get(display_value)

    def get_value(self, value_id: str) -> SpecValue | None:
        for value in self.values:
            if value.id == value_id:
                return value
        return None
