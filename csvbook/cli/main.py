from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..engine.assembler import ConversionError, assemble
from ..logging.init import log_summary, setup_logging
from ..models.config_models import ConvertConfig, NumericPolicy, SinkKind
from ..models.source_file import SourceFile
from ..models.table import WorkbookBuffer
from ..persistence.writer import DirectoryChooser, fixed_directory, prompt_directory
from ..services.orchestrator import ProcessingError, convert_all, scan_csv_files
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (overrides the process environment) and the YAML config
- Apply command line overrides (flags win over env, env wins over the file)
- Collect CSV inputs: positional paths (files or directories), else the
  configured source_directory
- Convert, persist into the output directory, print the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

PREVIEW_ROWS = 5


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; a broken file only produces a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Convert CSV files into formatted .xlsx workbooks")
    p.add_argument("paths", nargs="*", type=Path, help="CSV files or directories (default: source_directory)")
    p.add_argument("--config", type=Path, default=None, help="YAML config (default: config/convert.yml if present)")
    p.add_argument("--output-dir", type=Path, default=None, help="Directory for the written workbooks")
    p.add_argument("--ask-output-dir", action="store_true", help="Ask for the output directory interactively")
    p.add_argument("--sink", choices=[k.value for k in SinkKind], default=None, help="Workbook backend")
    p.add_argument(
        "--numeric-policy",
        choices=[k.value for k in NumericPolicy],
        default=None,
        help="Which strings become numbers and which columns get number format",
    )
    p.add_argument("--no-export", action="store_true", help="Session sink: don't export sheets separately")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet names, formats & first rows then exit")
    return p.parse_args(argv)


def _apply_cli_overrides(cfg: ConvertConfig, args: argparse.Namespace) -> ConvertConfig:
    changes: dict[str, object] = {}
    if args.sink:
        changes["sink"] = SinkKind(args.sink)
    if args.numeric_policy:
        changes["numeric_policy"] = NumericPolicy(args.numeric_policy)
    if args.no_export:
        changes["export_sheets"] = False
    if args.output_dir is not None:
        changes["output_directory"] = str(args.output_dir)
    return replace(cfg, **changes) if changes else cfg


def _collect_sources(paths: list[Path], cfg: ConvertConfig) -> list[SourceFile]:
    """Resolve inputs in the order given; directories expand to their .csv files."""
    if not paths:
        if not cfg.source_directory:
            raise ProcessingError("no input files given and no source_directory configured")
        paths = [Path(cfg.source_directory)]
    sources: list[SourceFile] = []
    for p in paths:
        if p.is_dir():
            sources.extend(SourceFile.from_path(f) for f in scan_csv_files(p))
        elif p.is_file():
            sources.append(SourceFile.from_path(p))
        else:
            raise ProcessingError(f"input not found: {p}")
    return sources


def _inspect_data(sources: list[SourceFile], cfg: ConvertConfig) -> int:
    if not sources:
        print("inspect: no .csv files")
        return EXIT_SUCCESS_ALL
    for source in sources:
        print(f"FILE: {source.name}")
        try:
            unit = assemble(
                source.read_bytes(),
                source.name,
                policy=cfg.numeric_policy,
                exclusions=cfg.exclusions,
                encoding=cfg.encoding,
            )
        except (OSError, ConversionError) as e:
            print(f"  read_error: {e}")
            continue
        if unit is None:
            print("  empty")
            continue
        print(f"  SHEET: {unit.sheet_name} cols={unit.table.column_count} rows={unit.table.row_count}")
        print(f"  numeric_columns={list(unit.numeric_columns)}")
        preview = unit.table.to_frame().head(PREVIEW_ROWS)
        print("  " + preview.to_string(index=False).replace("\n", "\n  "))
    return EXIT_SUCCESS_ALL


def _directory_chooser(cfg: ConvertConfig, ask: bool) -> DirectoryChooser:
    if ask:
        return prompt_directory()
    return fixed_directory(Path(cfg.output_directory or "."))


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only None reads sys.argv; an empty list is an explicit "no arguments"
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _apply_cli_overrides(load_config(args.config), args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        sources = _collect_sources(args.paths, cfg)
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(sources, cfg)

    logger.info(
        f"Converting {len(sources)} file(s) sink={cfg.sink.value} policy={cfg.numeric_policy.value}"
    )
    pending: list[WorkbookBuffer] = []
    try:
        result = convert_all(
            sources,
            cfg,
            pending,
            choose_directory=_directory_chooser(cfg, args.ask_output_dir),
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.persist_status == "cancelled":
        logger.info("save cancelled by user, nothing written")
    elif result.persist_status == "saved":
        logger.info(f"saved {len(result.saved_paths)} workbook(s)")

    summary_line = render_summary_line(result)
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.persist_status == "failed":
        return EXIT_FATAL
    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
