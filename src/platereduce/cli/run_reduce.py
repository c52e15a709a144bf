"""Command-line plate reduction.

Usage:
    platereduce <plate_url> --level 5
    platereduce <plate_url> -l 5 -j 3 -n 8 --start_t 100 --end_t 200 -t 2000

Parsing lives here; the actual work is done by
:class:`platereduce.pipeline.driver.ReductionDriver`.
"""

import sys
import argparse
import logging
from typing import List, Optional

from pydantic import ValidationError

from platereduce.contracts import ContractViolation
from platereduce.errors import PlateReduceError, UsageError
from platereduce.pipeline.driver import ReductionDriver, setup_logging
from platereduce.schemas import CLIConfig, InternalConfig, ParamConfig, resolve_config

__all__ = ['build_parser', 'config_from_args', 'main']

logger = logging.getLogger(__name__)

DESCRIPTION = "Perform weighted averages of all layers within a tile inside a plate file"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    param = ParamConfig()
    job = param.job

    parser = _ArgumentParser(
        prog="platereduce",
        description=DESCRIPTION,
        usage="%(prog)s <plate_url> [options]",
        add_help=False,
    )
    parser.add_argument("url", nargs="?", help="Plate to reduce (path or sqlite:// URL)")
    parser.add_argument("-j", "--job_id", type=int,
                        help=f"Index of this job (default: {job.job_id})")
    parser.add_argument("-n", "--num_jobs", type=int,
                        help=f"Total number of jobs (default: {job.num_jobs})")
    parser.add_argument("--start_t", type=int,
                        help=f"Input starting transaction ID range (default: {job.start_transaction_id})")
    parser.add_argument("--end_t", type=int,
                        help="Input ending transaction ID range (default: latest)")
    parser.add_argument("-l", "--level", type=int,
                        help="Level inside the plate in which to process. "
                             f"{job.level} will error out and show the number of levels available.")
    parser.add_argument("-f", "--function",
                        help="Functions that are available are [WeightedAvg ...] (default: WeightedAvg)")
    parser.add_argument("-t", "--transaction-id", dest="transaction_id", type=int,
                        help=f"Transaction id to write to (default: {job.output_transaction_id})")
    parser.add_argument("--log-file", dest="log_file", help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-h", "--help", action="store_true", help="Display this help message")
    return parser


def config_from_args(args: argparse.Namespace) -> InternalConfig:
    """Resolve the runtime config from parsed arguments (Param < CLI)."""
    cli_cfg = CLIConfig.model_validate({
        k: v
        for k, v in {
            "url": args.url,
            "job_id": args.job_id,
            "num_jobs": args.num_jobs,
            "level": args.level,
            "start_t": args.start_t,
            "end_t": args.end_t,
            "function": args.function,
            "transaction_id": args.transaction_id,
            "log_level": "DEBUG" if args.verbose else None,
            "log_file": args.log_file,
        }.items()
        if v is not None
    })
    return resolve_config(ParamConfig(), cli_cfg)


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        location = ".".join(str(p) for p in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code (0 success, 1 failure)."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        print(f"Error parsing input:\n\t{e}\n", file=sys.stderr)
        print(parser.format_help(), file=sys.stderr)
        return 1

    if args.help:
        print(parser.format_help())
        return 0

    if not args.url:
        print("Error: missing plate URL\n", file=sys.stderr)
        print(parser.format_help(), file=sys.stderr)
        return 1

    try:
        config = config_from_args(args)
    except ValidationError as e:
        print(f"Error: invalid configuration: {_format_validation_error(e)}", file=sys.stderr)
        return 1

    try:
        setup_logging(config.logging.level, config.logging.file)
    except OSError as e:
        print(f"Error: cannot open log file {config.logging.file}: {e}", file=sys.stderr)
        return 1

    try:
        ReductionDriver(config).run()
    except (PlateReduceError, ContractViolation) as e:
        logger.error("Error: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
