from .prefix import prefix_length, apply_mask, prefix_matches
from .errors import (
    Diagnostic, DiagnosticKind, OSPFGraphError, LSADecodeError,
    TruncatedLSAError, LengthMismatchError, UnsupportedLSATypeError,
    UnknownLinkTypeError, InvalidMetricError, InvalidHexError
)
from .lsa import (
    LSA, LSAType, LSAHeader,
    RouterLSA, RouterLSALink, RouterLSALinkType,
    NetworkLSA, IPAddress, RouterID
)
from .decoder import decode_lsa, decode_lsdb, parse_hex, DecodeResult
from .graph import TopologyGraph, NodeKind, NodeRef, Edge
from .topology import build_topology, TopologyResult
from .config import Settings

__all__ = [
    "prefix_length", "apply_mask", "prefix_matches",
    "Diagnostic", "DiagnosticKind", "OSPFGraphError", "LSADecodeError",
    "TruncatedLSAError", "LengthMismatchError", "UnsupportedLSATypeError",
    "UnknownLinkTypeError", "InvalidMetricError", "InvalidHexError",
    "LSA", "LSAType", "LSAHeader",
    "RouterLSA", "RouterLSALink", "RouterLSALinkType",
    "NetworkLSA", "IPAddress", "RouterID",
    "decode_lsa", "decode_lsdb", "parse_hex", "DecodeResult",
    "TopologyGraph", "NodeKind", "NodeRef", "Edge",
    "build_topology", "TopologyResult",
    "Settings",
]
