"""httpd-hit-report: per-client HTTP status summary of Apache access logs."""

import logging
import sys
from argparse import ArgumentParser

from hitreport.aggregator import aggregate_sources
from hitreport.config import DEFAULT_LOG_DIR, Config, ConfigError, load_config, load_yaml_config
from hitreport.reader import collect_sources
from hitreport.reporter import format_report, write_report

APP_NAME = "httpd-hit-report"
APP_VERSION = "0.0.1"

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    defaults = Config()
    parser = ArgumentParser(
        prog=APP_NAME,
        description="A simple utility to parse Apache logs and generate a report.",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help=f"Explicit input files (otherwise logs under {DEFAULT_LOG_DIR} are searched)",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME}\t{APP_VERSION}",
    )
    parser.add_argument(
        "-s", "--stdin",
        dest="read_from_stdin",
        action="store_true",
        help="Read log lines from stdin instead of searching for logs",
    )
    parser.add_argument(
        "-g", "--gzip",
        dest="read_gzipped_files",
        action="store_true",
        help="Accepted for compatibility; gzipped files are always skipped (pipe them through zcat with --stdin)",
    )
    parser.add_argument(
        "-F", "--follow",
        dest="follow_symlinks",
        action="store_true",
        help="Follow symlinks",
    )
    parser.add_argument(
        "-R", "-r", "--recurse",
        dest="recurse",
        action="store_true",
        help="Recurse through subdirectories",
    )
    parser.add_argument(
        "-a", "--access",
        dest="access_glob",
        metavar="GLOB",
        help=f"Glob pattern for access log files (default: {defaults.access_glob})",
    )
    parser.add_argument(
        "-e", "--error",
        dest="error_glob",
        metavar="GLOB",
        help=f"Glob pattern for error log files (default: {defaults.error_glob})",
    )
    parser.add_argument(
        "-o", "--output",
        dest="output_file",
        metavar="FILE",
        help="Write the report to FILE (default: stdout)",
    )
    parser.add_argument(
        "-l", "--log-dir",
        dest="log_dir",
        metavar="DIR",
        help=f"Directory in which to search for logs (default: {DEFAULT_LOG_DIR})",
    )
    parser.add_argument(
        "-c", "--config",
        metavar="FILE",
        help="YAML config file",
    )
    parser.add_argument(
        "-d", "--details",
        action="store_true",
        help="Append a per-request table to each client section",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic verbosity on stderr (default: INFO)",
    )
    return parser


def run_pipeline(config: Config) -> str:
    """Read, aggregate, and render; returns the report text."""
    if config.read_gzipped_files:
        logger.warning("Reading gzipped files is not supported; use: zcat FILE | %s --stdin",
                       APP_NAME)

    sources, diagnostics = collect_sources(config)
    for diagnostic in diagnostics:
        logger.warning("%s", diagnostic)

    result = aggregate_sources(sources)
    logger.info("Parsed %d client(s) from %d source(s), %d line(s) skipped",
                len(result.connections), len(sources), result.skipped)

    return format_report(result.connections, details=config.details)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s [httpd-report] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args, load_yaml_config(args.config))
    except ConfigError as exc:
        parser.error(str(exc))

    try:
        report = run_pipeline(config)
        write_report(report, config.output_file)
    except KeyboardInterrupt:
        return 0
    except BrokenPipeError:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
