"""Log file discovery, gzip detection, and candidate-line reading.

Nothing in here raises on a bad file or directory: problems are returned as
Diagnostic values so the caller can report them and carry on.
"""

import fnmatch
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, TextIO

from hitreport.config import Config
from hitreport.models import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

HTTP_MARKER = "HTTP/1.1"
GZIP_MAGIC = b"\x1f\x8b"
STDIN_SOURCE = "stdin"


@dataclass
class SearchResult:
    access_logs: list[str] = field(default_factory=list)
    error_logs: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def is_gzipped(path: str) -> bool:
    """True if the file starts with the gzip magic bytes.

    Raises OSError if the file cannot be opened.
    """
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


def candidate_lines(stream: Iterable[str]) -> list[str]:
    """Return the lines of *stream* that contain the HTTP/1.1 marker."""
    return [line.rstrip("\r\n") for line in stream if HTTP_MARKER in line]


def search_log_files(config: Config) -> SearchResult:
    """Find access and error logs under config.log_dir."""
    result = SearchResult()
    if not os.path.isdir(config.log_dir):
        result.diagnostics.append(Diagnostic(
            DiagnosticKind.FILE_ACCESS, config.log_dir, "log directory does not exist",
        ))
        return result
    _scan_directory(config.log_dir, config, result, set())
    return result


def _scan_directory(dir_path: str, config: Config, result: SearchResult,
                    seen: set[str]) -> None:
    """Scan one directory; *seen* holds the real paths already visited or collected."""
    real_dir = os.path.realpath(dir_path)
    if real_dir in seen:
        logger.debug("Already scanned %s, skipping", dir_path)
        return
    seen.add(real_dir)

    try:
        with os.scandir(dir_path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        result.diagnostics.append(Diagnostic(
            DiagnosticKind.FILE_ACCESS, dir_path, f"cannot scan directory: {exc.strerror or exc}",
        ))
        return

    for entry in entries:
        if entry.is_symlink() and not config.follow_symlinks:
            logger.debug("Skipping symlink %s", entry.path)
            continue

        try:
            is_dir = entry.is_dir()
            is_file = entry.is_file()
        except OSError as exc:
            result.diagnostics.append(Diagnostic(
                DiagnosticKind.FILE_ACCESS, entry.path, f"cannot stat entry: {exc.strerror or exc}",
            ))
            continue

        if is_dir:
            if config.recurse:
                _scan_directory(entry.path, config, result, seen)
            continue

        # Dangling symlinks and special files land here
        if not is_file:
            continue

        # A followed symlink may point at a file that is already collected
        real_file = os.path.realpath(entry.path)
        if real_file in seen:
            logger.debug("Skipping %s, same file as one already found", entry.path)
            continue
        seen.add(real_file)

        if fnmatch.fnmatch(entry.name, config.access_glob):
            result.access_logs.append(entry.path)
        elif fnmatch.fnmatch(entry.name, config.error_glob):
            result.error_logs.append(entry.path)


def read_file(path: str) -> tuple[list[str], Diagnostic | None]:
    """Read candidate lines from one file.

    Returns (lines, None) on success, or ([], diagnostic) when the file is
    gzip-compressed or cannot be read.
    """
    try:
        if is_gzipped(path):
            return [], Diagnostic(
                DiagnosticKind.GZIP_SKIPPED, path,
                "gzipped file detected, skipping (use zcat and --stdin)",
            )
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return candidate_lines(f), None
    except OSError as exc:
        return [], Diagnostic(
            DiagnosticKind.FILE_ACCESS, path, f"failed to open: {exc.strerror or exc}",
        )


def read_sources(paths: list[str]) -> tuple[dict[str, list[str]], list[Diagnostic]]:
    """Read every path in order; returns (source -> lines, diagnostics)."""
    sources: dict[str, list[str]] = {}
    diagnostics: list[Diagnostic] = []
    for path in paths:
        lines, diagnostic = read_file(path)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
            continue
        logger.debug("Read %d candidate line(s) from %s", len(lines), path)
        sources[path] = lines
    return sources, diagnostics


def read_stdin(stream: TextIO | None = None) -> dict[str, list[str]]:
    """Read candidate lines from standard input (or *stream*)."""
    stream = stream if stream is not None else sys.stdin
    return {STDIN_SOURCE: candidate_lines(stream)}


def collect_sources(config: Config) -> tuple[dict[str, list[str]], list[Diagnostic]]:
    """Gather candidate lines from wherever the config points.

    Precedence: stdin, then explicit input files, then the log directory.
    """
    if config.read_from_stdin:
        return read_stdin(), []

    if config.input_files:
        return read_sources(list(config.input_files))

    search = search_log_files(config)
    for path in search.error_logs:
        logger.debug("Ignoring error log %s", path)
    sources, diagnostics = read_sources(search.access_logs)
    return sources, search.diagnostics + diagnostics
