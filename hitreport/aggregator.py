"""Group parsed connection records by client source and count status codes."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from hitreport.models import ConnectionRecord, Diagnostic, DiagnosticKind, ParseError
from hitreport.parser import parse_line

logger = logging.getLogger(__name__)

TRACKED_STATUS_CODES = (200, 204, 301, 400, 401, 403, 404, 500, 503)


@dataclass
class AggregateResult:
    connections: dict[str, list[ConnectionRecord]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.diagnostics)


def group_connections(lines: Iterable[str]) -> AggregateResult:
    """Parse *lines* and bucket the records by client source.

    Each unparseable line becomes a PARSE diagnostic, which is logged and
    kept on the result; records keep their encounter order within each bucket.
    """
    result = AggregateResult()
    for line in lines:
        if not line.strip():
            continue
        try:
            record = parse_line(line)
        except ParseError as exc:
            diagnostic = Diagnostic(
                DiagnosticKind.PARSE, exc.line,
                f"failed to parse connection info ({exc.stage} stage), skipping",
            )
            logger.warning("%s", diagnostic)
            result.diagnostics.append(diagnostic)
            continue
        result.connections.setdefault(record.client_source, []).append(record)
    return result


def merge_connections(total: dict[str, list[ConnectionRecord]],
                      partial: Mapping[str, list[ConnectionRecord]]) -> None:
    """Append each bucket of *partial* to the matching bucket of *total*."""
    for client, records in partial.items():
        total.setdefault(client, []).extend(records)


def aggregate_sources(sources: Mapping[str, list[str]]) -> AggregateResult:
    """Group lines from several sources, in the mapping's order."""
    total = AggregateResult()
    for source, lines in sources.items():
        partial = group_connections(lines)
        if partial.skipped:
            logger.info("%s: skipped %d unparseable line(s)", source, partial.skipped)
        merge_connections(total.connections, partial.connections)
        total.diagnostics.extend(partial.diagnostics)
    return total


def count_status_codes(records: Iterable[ConnectionRecord]) -> dict[int, int]:
    """Count the tracked status codes; every tracked code is present."""
    counter = Counter(r.status_code for r in records)
    return {code: counter[code] for code in TRACKED_STATUS_CODES}
