"""Command-line entry point for carbon_curves."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .errors import CarbonCurvesError, ReferenceDataError
from .logging_pipeline import (
    configure_structured_logging,
    new_run_id,
    shutdown_listeners,
)
from .settings import get_settings
from .strategies import STRATEGIES, create_strategy


def _read_stdin() -> str | None:
    """Read the JSON payload from stdin if available."""
    try:
        if sys.stdin and not sys.stdin.isatty():
            return sys.stdin.read()
    except OSError as e:
        print(f"Error reading stdin: {e}", file=sys.stderr)
    return None


def _load_rows(path: str | None, stdin_payload: str | None) -> list[dict[str, object]]:
    """Load input rows from a file or stdin."""
    if path:
        return _parse_rows(Path(path).read_text(encoding="utf-8"))
    if stdin_payload:
        return _parse_rows(stdin_payload)
    raise ValueError("No input provided. Use --input or pipe JSON via stdin.")


def _parse_rows(payload: str) -> list[dict[str, object]]:
    """Parse a JSON string and ensure it holds a list of objects."""

    data = json.loads(payload)
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ValueError("Input JSON must be an array of objects.")
    return [{str(key): value for key, value in row.items()} for row in data]


def _parse_config(payload: str) -> dict[str, object]:
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("--config must be a JSON object.")
    return {str(key): value for key, value in data.items()}


def main(argv: list[str] | None = None) -> int:
    """Estimate energy and embodied carbon for a batch of rows."""
    parser = argparse.ArgumentParser(
        description="Estimate energy and embodied carbon from CPU utilization."
    )
    parser.add_argument(
        "--model",
        "-m",
        required=True,
        choices=sorted(STRATEGIES),
        help="Estimation strategy to run.",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="{}",
        help="Static strategy parameters as a JSON object.",
    )
    parser.add_argument(
        "--input",
        "-i",
        help="Path to a JSON array of rows. If omitted, reads from stdin.",
    )

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    settings = get_settings()
    run_id = new_run_id(args.model)
    logger = logging.getLogger("carbon_curves")
    listener = configure_structured_logging(
        logger,
        run_id=run_id,
        level=logging.getLevelNamesMapping().get(settings.log_level, logging.WARNING),
    )
    run_context = {"run_id": run_id, "model": args.model}
    try:
        config = _parse_config(args.config)
        rows = _load_rows(args.input, None if args.input else _read_stdin())
        strategy = create_strategy(args.model).bind_run(run_id).configure(config)
        outputs = asyncio.run(strategy.execute(rows))
        logger.info("Batch estimated", extra={**run_context, "rows": len(outputs)})
    except (CarbonCurvesError, ReferenceDataError, ValueError, OSError) as exc:
        logger.error(
            "Estimation failed",
            extra={**run_context, "error": type(exc).__name__},
        )
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        shutdown_listeners([listener])
        logger.handlers.clear()

    print(json.dumps(outputs, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
