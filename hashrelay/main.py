import argparse
import asyncio
import sys

from hashrelay.actors.pipeline import relay_records
from hashrelay.config import DEFAULT_ADDRESS, DEFAULT_LOG_FILE, RunConfig
from hashrelay.exceptions import ConfigurationError, InputError, ReportError
from hashrelay.loader import load_records
from hashrelay.logging_config import setup_logging

EXIT_OK = 0
EXIT_BAD_INPUT = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Distribute records across worker actors and write a hash report."
    )
    parser.add_argument("--input", required=True, help="JSON file with the input records.")
    parser.add_argument("--output", required=True, help="Path of the report file to write.")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker actors (default: records // 4, at least 2).",
    )
    parser.add_argument(
        "--address", default=DEFAULT_ADDRESS, help="Address of the xoscar actor pool."
    )
    parser.add_argument("--log-level", default="INFO", help="Minimum log level.")
    parser.add_argument(
        "--log-file",
        default=DEFAULT_LOG_FILE,
        help="JSON-lines log file; pass an empty string to disable.",
    )
    return parser


def run(config: RunConfig) -> int:
    """Run one relay for ``config`` and return the process exit code."""
    log = setup_logging("hashrelay", default_level=config.log_level, log_file=config.log_file)

    try:
        records = load_records(config.input_path)
    except InputError as e:
        log.error(str(e))
        return EXIT_BAD_INPUT

    worker_count = config.resolve_worker_count(len(records))
    try:
        summary = asyncio.run(
            relay_records(
                records,
                config.output_path,
                n_workers=worker_count,
                address=config.address,
            )
        )
    except ReportError as e:
        log.error(str(e))
        return e.exit_code

    print(
        f"Processed {summary.classified} records with {summary.worker_count} workers: "
        f"{summary.accepted} accepted, {summary.rejected} rejected, {summary.failed} failed. "
        f"Report written to {config.output_path}"
    )
    return EXIT_OK


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = RunConfig(
            input_path=args.input,
            output_path=args.output,
            worker_count=args.workers,
            address=args.address,
            log_level=args.log_level,
            log_file=args.log_file or None,
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
