"""Markdown report rendering: one status-code table per client source."""

import logging
import sys
from typing import Mapping

from hitreport.aggregator import TRACKED_STATUS_CODES, count_status_codes
from hitreport.models import ConnectionRecord

logger = logging.getLogger(__name__)

REPORT_TITLE = "# HTTPD Report"
SOURCE_HEADER = "Source"
SOURCE_MIN_WIDTH = len(SOURCE_HEADER) + 2
COUNT_WIDTH = 11
SECTION_SEPARATOR = "----------"

DETAIL_HEADERS = (
    "Source", "Client ID", "User ID", "Timestamp", "Method", "URI", "Version", "Status", "Size",
)


def spacer_strings(width: int, text: str) -> tuple[str, str]:
    """Return (leading, trailing) padding that centres *text* in *width*.

    An odd amount of padding puts the extra space on the leading side.
    Text wider than *width* gets no padding.
    """
    padding = max(width - len(text), 0)
    leading = (padding + 1) // 2
    return " " * leading, " " * (padding - leading)


def center(text: str, width: int) -> str:
    leading, trailing = spacer_strings(width, text)
    return f"{leading}{text}{trailing}"


def _row(cells: list[str]) -> str:
    return "|" + "|".join(cells) + "|"


def format_client_table(client: str, records: list[ConnectionRecord]) -> list[str]:
    """Header, separator, and count rows for one client."""
    source_width = max(len(client), SOURCE_MIN_WIDTH)
    counts = count_status_codes(records)

    header = [center(SOURCE_HEADER, source_width)]
    header += [center(f"Total {code}", COUNT_WIDTH) for code in TRACKED_STATUS_CODES]
    separator = ["-" * source_width] + ["-" * COUNT_WIDTH] * len(TRACKED_STATUS_CODES)
    data = [center(client, source_width)]
    data += [center(str(counts[code]), COUNT_WIDTH) for code in TRACKED_STATUS_CODES]

    return [_row(header), _row(separator), _row(data)]


def format_detail_table(records: list[ConnectionRecord]) -> list[str]:
    """Per-request rows for one client, in encounter order."""
    lines = [
        "| " + " | ".join(DETAIL_HEADERS) + " |",
        _row(["---"] * len(DETAIL_HEADERS)),
    ]
    lines.extend(r.to_markdown_row() for r in records)
    return lines


def format_report(connections: Mapping[str, list[ConnectionRecord]],
                  details: bool = False) -> str:
    """Render the whole report; clients appear in lexicographic order."""
    lines = [REPORT_TITLE, f"## Total Unique IPs: {len(connections)}", ""]

    for client in sorted(connections):
        records = connections[client]
        lines.extend(format_client_table(client, records))
        if details:
            lines.append("")
            lines.extend(format_detail_table(records))
        lines.extend(["", SECTION_SEPARATOR, ""])

    return "\n".join(lines) + "\n"


def write_report(text: str, output_file: str | None = None) -> str:
    """Write the report to *output_file*, or stdout if unset or unwritable.

    Returns where the report ended up.
    """
    if output_file:
        try:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(text)
            logger.info("Report written to %s", output_file)
            return output_file
        except OSError as exc:
            logger.error("Cannot write report to %s (%s), using stdout instead",
                         output_file, exc.strerror or exc)

    sys.stdout.write(text)
    sys.stdout.flush()
    return "stdout"
