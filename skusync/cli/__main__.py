from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from skusync.config.loader import DEFAULT_CONFIG_PATH, ConfigError, default_config, load_config
from skusync.logging.finding_log import FindingLogBuffer
from skusync.logging.init import log_summary, setup_logging
from skusync.models.config_models import AppConfig
from skusync.models.sheet import SheetType, cell_text
from skusync.services.binding import resolve_bindings
from skusync.services.runner import RunError, load_workbook, run_workbook
from skusync.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (overrides existing environment) and config/skusync.yml
- Import the workbook, regenerating every SKU
- Validate each data sheet, log findings, print the SUMMARY line
- Optionally write the regenerated workbook

Exit codes: 0 = no findings, 2 = findings reported, 1 = fatal error.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_FINDINGS = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; SKUSYNC_* values win over the config file."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Regenerate and validate SKUs in a specification workbook")
    p.add_argument("workbook", type=Path, help="Workbook file (.xlsx or .csv)")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--output", type=Path, default=None, help="Write the regenerated workbook to this path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print column bindings & first rows then exit")
    p.add_argument("--no-findings-log", action="store_true", help="Do not write logs/findings-*.log")
    return p.parse_args(argv)


def _resolve_config(explicit: Path | None) -> AppConfig:
    if explicit is not None:
        return load_config(explicit)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _inspect_data(path: Path, cfg: AppConfig) -> int:
    try:
        workbook, _ = load_workbook(path, cfg)
    except RunError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    for sheet in workbook.sheets:
        print(f"SHEET: {sheet.name} type={sheet.type.value} rows={len(sheet.data)}")
        if sheet.type is not SheetType.DATA:
            continue
        headers = [cell_text(c) for c in sheet.header_row]
        for binding in resolve_bindings(sheet):
            header = headers[binding.index] if binding.index < len(headers) else ""
            spec = f" -> {binding.specification.name}" if binding.specification is not None else ""
            print(f"  col={binding.index} '{header}' {binding.kind.value}{spec}")
        for row_index in list(sheet.data_row_indices)[:3]:
            print("    sample_row=", [cell_text(c) for c in sheet.data[row_index]])
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む ([] を渡すテストで pytest の引数が混入しないように)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.workbook, cfg)

    logger.info(f"Processing workbook: {args.workbook}")
    findings_log = None if args.no_findings_log else FindingLogBuffer(Path(cfg.logs_directory))
    try:
        result = run_workbook(args.workbook, cfg, findings_log=findings_log, output=args.output)
    except RunError as e:
        logger.error(f"run: {e}")
        return EXIT_FATAL

    if findings_log is not None:
        log_path = findings_log.flush()
        if log_path is not None:
            logger.info(f"findings written to {log_path}")

    summary_line = render_summary_line(result)
    # log_summary が "SUMMARY " を付けるので本文のみ渡す
    log_summary(summary_line[len("SUMMARY "):])

    if result.total_findings > 0:
        return EXIT_FINDINGS
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
