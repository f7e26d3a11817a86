from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.settings import AppSettings
from ..models.sheet import SheetConfig
from ..models.specification import Specification
from .binding import ColumnBinding, row_pairs

"""SKU generator.

Pure functions; nothing here raises on bad data. A selection that matches no
value (stale or deleted label) and a value with an empty fragment both
contribute nothing. The validator reports the stale case separately.
"""

__all__ = [
    "generate_row_sku",
    "generate_sku",
]


def generate_sku(
    pairs: Iterable[tuple[Specification, str | None]],
    settings: AppSettings,
) -> str:
    """Build a SKU string from ordered (Specification, selected label) pairs.

    Parameters
    ----------
    pairs: already ordered pairs; an empty/None selection is skipped
    settings: delimiter, prefix and suffix

    Returns
    -------
    str: `prefix + fragments joined by delimiter + suffix`, or "" when no
    fragment was collected (prefix/suffix are not applied to an empty SKU)

    Examples
    --------
    >>> from skusync.models.specification import Specification, SpecValue
    >>> color = Specification("c", "Color", 0, (SpecValue("r", "Red", "R"),))
    >>> size = Specification("s", "Size", 1, (SpecValue("sm", "Small", "S"),))
    >>> generate_sku([(color, "Red"), (size, "Small")], AppSettings())
    'R-S'
    >>> generate_sku([(color, ""), (size, None)], AppSettings(prefix="X"))
    ''
    """
    fragments: list[str] = []
    for spec, selection in pairs:
        if not selection:
            continue
        value = spec.find_value(selection)
        if value is None or not value.sku_fragment:
            continue
        fragments.append(value.sku_fragment)
    if not fragments:
        return ""
    return f"{settings.prefix}{settings.delimiter.join(fragments)}{settings.suffix}"


def generate_row_sku(
    sheet: SheetConfig,
    row_index: int,
    settings: AppSettings,
    bindings: Sequence[ColumnBinding] | None = None,
) -> str:
    """SKU for one data row of `sheet` using its current bindings."""
    return generate_sku(row_pairs(sheet, row_index, bindings), settings)
