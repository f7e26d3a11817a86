from __future__ import annotations

from dataclasses import dataclass, replace

"""AppSettings model: decoration applied uniformly to every generated SKU."""

__all__ = [
    "AppSettings",
    "DEFAULT_DELIMITER",
]

DEFAULT_DELIMITER = "-"


@dataclass(frozen=True)
class AppSettings:
    delimiter: str = DEFAULT_DELIMITER  # フラグメント間の区切り
    prefix: str = ""
    suffix: str = ""

    def merged(
        self,
        delimiter: str | None = None,
        prefix: str | None = None,
        suffix: str | None = None,
    ) -> AppSettings:
        """Return a copy with the given fields replaced (None = keep)."""
        updates: dict[str, str] = {}
        if delimiter is not None:
            updates["delimiter"] = delimiter
        if prefix is not None:
            updates["prefix"] = prefix
        if suffix is not None:
            updates["suffix"] = suffix
        return replace(self, **updates)
