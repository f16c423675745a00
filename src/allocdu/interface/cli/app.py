from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration resolution
(built-in defaults, saved preferences and command-line overrides), console
preparation, the usage run itself and the final rendering (streamed text or
a JSON document).
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from allocdu.core.analysis.report_formatter import should_use_color
from allocdu.core.pipeline.engine import run_usage
from allocdu.core.pipeline.sinks import (
    KIND_DIVIDER,
    KIND_TOTAL,
    CollectingSink,
    ConsoleSink,
    ReportRecord,
    ReportSink,
)
from allocdu.core.pipeline.validator import validate_config
from allocdu.domain import config as config_store
from allocdu.domain.config import get_default_config, load_config, save_config
from allocdu.domain.usage_models import UsageOptions, UsageRunResult
from allocdu.infra.console import prepare_console
from allocdu.infra.fs import resolve_targets
from allocdu.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
    level_for_flags,
    shutdown_logging,
)
from allocdu.interface.cli import args as cli_args
from allocdu.utils.i18n import i18n

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_TARGET_FAILED = 1
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 when every target was processed, 1 when at
             least one target could not be accessed).
    """
    # 1. Argument parsing phase (-?/--help exits here)
    args = cli_args.parse_cli(argv)

    # 2. Logging bootstrap (stderr only, stdout belongs to the report)
    logging_conf = LoggingConfig(
        level=level_for_flags(verbose=args.verbose, debug=args.debug),
        console=True,
        log_file=args.log_file,
    )
    configure_logging(logging_conf, force=True)

    try:
        return _run(args)
    finally:
        shutdown_logging()


def _run(args: Any) -> int:
    # 3. Resolve configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    for w in warnings:
        logger.warning(i18n.t("cli.warnings.config", warning=w))

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_defaults:
        if save_config(clean_conf):
            print(i18n.t("cli.status.saved", path=config_store.CONFIG_FILE), file=sys.stderr)

    options = UsageOptions.from_config(clean_conf)
    targets = resolve_targets(args.targets)
    logger.debug(f"Effective options: {options}")

    # 4. Output mode selection
    sink: ReportSink
    if args.json_output:
        sink = CollectingSink()
    else:
        vt_ready = prepare_console()
        color = should_use_color(options.color, sys.stdout)
        if color and not vt_ready and options.color == "auto":
            color = False
        sink = ConsoleSink(exact=options.exact_bytes, color=color)

    # 5. Usage run
    try:
        result = run_usage(targets, options, sink)
    except KeyboardInterrupt:
        print(i18n.t("cli.status.interrupted"), file=sys.stderr)
        return EXIT_INTERRUPTED
    except BrokenPipeError:
        # Reader went away (e.g. piped into head); nothing left to report
        _silence_stdout()
        return EXIT_OK

    # 6. Machine-readable rendering
    if isinstance(sink, CollectingSink):
        print(json.dumps(build_json_report(result, sink.records), ensure_ascii=False, indent=2))

    return EXIT_OK if result.ok else EXIT_TARGET_FAILED

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into the base configuration.

    Only known keys are merged, preventing schema pollution.
    """
    out = dict(base)
    for k in get_default_config():
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (MACHINE READABLE)
# -----------------------------------------------------------------------------

def build_json_report(result: UsageRunResult, records: List[ReportRecord]) -> Dict[str, Any]:
    """
    Assemble the JSON document of a run.

    Records are split per target at each 'total' record, which closes the
    report of one successfully processed target.
    """
    per_target: List[List[ReportRecord]] = []
    batch: List[ReportRecord] = []
    for rec in records:
        if rec.kind == KIND_DIVIDER:
            continue
        if rec.kind == KIND_TOTAL:
            per_target.append(batch)
            batch = []
            continue
        batch.append(rec)

    batches = iter(per_target)
    targets: List[Dict[str, Any]] = []
    for report in result.targets:
        entries = next(batches, []) if report.ok else []
        targets.append({
            "path": report.path,
            "ok": report.ok,
            "error": report.error,
            "total": report.total,
            "entries": [{"kind": r.kind, "path": r.path, "size": r.size} for r in entries],
            "stats": asdict(report.stats),
        })

    return {"ok": result.ok, "targets": targets}


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        pass
    finally:
        os.close(devnull)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
