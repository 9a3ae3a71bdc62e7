"""Staged parser for Apache common/combined access-log lines.

Layout: ``%h %l %u %t "%r" %>s %b`` with any trailing combined-format fields
(referer, user agent) ignored. Each stage consumes part of the line and
raises ParseError naming itself when its delimiter is missing.
"""

import re

from hitreport.models import ConnectionRecord, ParseError

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def lenient_int(text: str) -> int:
    """Parse the leading integer of *text*, returning 0 when there is none."""
    m = _LEADING_INT_RE.match(text)
    if not m:
        return 0
    return int(m.group(1))


def _take_token(line: str, start: int, stage: str) -> tuple[str, int]:
    """Return the text from *start* up to the next space, and the offset after it."""
    end = line.find(" ", start)
    if end == -1 or end == start:
        raise ParseError(stage, line)
    return line[start:end], end + 1


def _take_enclosed(line: str, start: int, opener: str, closer: str,
                   stage: str) -> tuple[str, int]:
    """Return the text between the next *opener* and *closer* after *start*."""
    begin = line.find(opener, start)
    if begin == -1:
        raise ParseError(stage, line)
    end = line.find(closer, begin + 1)
    if end == -1:
        raise ParseError(stage, line)
    return line[begin + 1:end], end + 1


def _split_request(request: str, line: str) -> tuple[str, str, str]:
    """Split 'GET /path HTTP/1.1' into (method, uri, version)."""
    tokens = request.split()
    if len(tokens) < 3:
        raise ParseError("request", line)
    return tokens[0], tokens[1], tokens[2]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_line(line: str) -> ConnectionRecord:
    """Parse one access-log line into a ConnectionRecord.

    Raises ParseError if any stage fails; no partial record is ever returned.
    """
    line = line.rstrip("\r\n")

    client_source, pos = _take_token(line, 0, "source")
    client_id, pos = _take_token(line, pos, "identity")
    user_id, pos = _take_token(line, pos, "user")
    timestamp, pos = _take_enclosed(line, pos, "[", "]", "timestamp")
    request, pos = _take_enclosed(line, pos, '"', '"', "request")
    method, uri, version = _split_request(request, line)

    tail = line[pos:].split(None, 2)
    if not tail:
        raise ParseError("status", line)
    status_code = lenient_int(tail[0])
    response_size = lenient_int(tail[1]) if len(tail) > 1 else 0

    return ConnectionRecord(
        client_source=client_source,
        client_id=client_id,
        user_id=user_id,
        timestamp=timestamp,
        http_method=method,
        request_uri=uri,
        http_version=version,
        status_code=status_code,
        response_size=response_size,
    )
