"""Connection record, diagnostics, and parse error types."""

from dataclasses import dataclass
from enum import Enum


class ParseError(ValueError):
    """Raised when a log line does not have the expected combined-log layout."""

    def __init__(self, stage: str, line: str):
        super().__init__(f"{stage}: cannot parse {line!r}")
        self.stage = stage
        self.line = line


@dataclass(frozen=True)
class ConnectionRecord:
    client_source: str
    client_id: str
    user_id: str
    timestamp: str  # raw text between the brackets
    http_method: str
    request_uri: str
    http_version: str
    status_code: int
    response_size: int

    def to_markdown_row(self) -> str:
        fields = (
            self.client_source, self.client_id, self.user_id, self.timestamp,
            self.http_method, self.request_uri, self.http_version,
            str(self.status_code), str(self.response_size),
        )
        return "|" + "|".join(fields) + "|"


class DiagnosticKind(Enum):
    PARSE = "parse"
    FILE_ACCESS = "file_access"
    GZIP_SKIPPED = "gzip_skipped"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    source: str
    message: str

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"
