from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering for the command line tool."""


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Format:
    SUMMARY sheets={n} rows={rows} missing_values={m} duplicate_skus={d}
    regenerated={g} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     sheets=2, data_rows=10, missing_values=1, duplicate_skus=2,
        ...     regenerated_cells=3, start_time=start, end_time=end,
        ... )
        >>> render_summary_line(result)
        'SUMMARY sheets=2 rows=10 missing_values=1 duplicate_skus=2 regenerated=3 elapsed_sec=2'
    """
    elapsed = result.elapsed_seconds
    if elapsed == 0:
        elapsed_str = "0"
    elif elapsed == int(elapsed):
        elapsed_str = str(int(elapsed))
    elif elapsed < 0.01:
        # Format very small numbers to avoid scientific notation
        elapsed_str = f"{elapsed:.6f}".rstrip('0').rstrip('.')
    else:
        elapsed_str = f"{elapsed:.3f}".rstrip('0').rstrip('.')

    return (
        f"SUMMARY sheets={result.sheets} "
        f"rows={result.data_rows} "
        f"missing_values={result.missing_values} "
        f"duplicate_skus={result.duplicate_skus} "
        f"regenerated={result.regenerated_cells} "
        f"elapsed_sec={elapsed_str}"
    )
