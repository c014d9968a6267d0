from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class DiagnosticKind(Enum):
    TRUNCATED = "truncated"
    LENGTH_MISMATCH = "length_mismatch"
    UNSUPPORTED_TYPE = "unsupported_type"
    UNKNOWN_LINK_KIND = "unknown_link_kind"
    INVALID_METRIC = "invalid_metric"
    INVALID_ENCODING = "invalid_encoding"
    RESOLUTION_WARNING = "resolution_warning"


@dataclass(frozen=True)
class Diagnostic:
    """
    A structured report of a skipped record or an unresolved link.

    Attributes:
        context: Where the problem was found, e.g. "record 7" or
            "router 1.1.1.1 link 2".
        kind: The category of the problem.
        message: Human-readable explanation.
    """
    context: str
    kind: DiagnosticKind
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"context": self.context, "kind": self.kind.value, "message": self.message}


class OSPFGraphError(Exception):
    """Base class for all errors raised by ospf_graph."""


class LSADecodeError(OSPFGraphError, ValueError):
    """
    Raised when a byte string cannot be decoded as a supported LSA.

    ``record_index`` is filled in by batch decoding so a caller can tell which
    record of the LSDB walk was rejected.
    """
    kind: DiagnosticKind = DiagnosticKind.TRUNCATED

    def __init__(self, message: str, record_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.record_index = record_index

    def __str__(self) -> str:
        if self.record_index is None:
            return self.message
        return f"record {self.record_index}: {self.message}"

    def to_diagnostic(self, context: str) -> Diagnostic:
        return Diagnostic(context=context, kind=self.kind, message=self.message)


class TruncatedLSAError(LSADecodeError):
    kind = DiagnosticKind.TRUNCATED


class LengthMismatchError(LSADecodeError):
    kind = DiagnosticKind.LENGTH_MISMATCH

    def __init__(self, declared: int, actual: int) -> None:
        super().__init__(f"LSA declares length {declared} but buffer holds {actual} bytes")
        self.declared = declared
        self.actual = actual


class InvalidHexError(LSADecodeError):
    kind = DiagnosticKind.INVALID_ENCODING


class UnsupportedLSATypeError(LSADecodeError):
    kind = DiagnosticKind.UNSUPPORTED_TYPE

    def __init__(self, ls_type: int) -> None:
        super().__init__(f"LSA type {ls_type} is not supported")
        self.ls_type = ls_type


class UnknownLinkTypeError(LSADecodeError):
    kind = DiagnosticKind.UNKNOWN_LINK_KIND

    def __init__(self, link_type: int, link_index: int) -> None:
        super().__init__(f"link {link_index} has unknown type {link_type}")
        self.link_type = link_type
        self.link_index = link_index


class InvalidMetricError(LSADecodeError):
    kind = DiagnosticKind.INVALID_METRIC

    def __init__(self, metric: int, link_index: int) -> None:
        super().__init__(f"link {link_index} has invalid metric {metric}, expected 1-65535")
        self.metric = metric
        self.link_index = link_index
