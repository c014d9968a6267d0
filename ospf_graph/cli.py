"""Command line entry point: hex-encoded LSDB dump in, topology JSON out."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .config import Settings
from .decoder import decode_lsdb, parse_hex
from .errors import InvalidHexError, OSPFGraphError
from .topology import build_topology

LOGGER = logging.getLogger(__name__)


def parse_hex_records(lines: Iterable[str]) -> List[bytes]:
    """
    Parses one hex-encoded LSA per line.

    Blank lines and lines starting with "#" are skipped; the rest are read
    with :func:`ospf_graph.decoder.parse_hex`.

    Raises:
        ValueError: If a line is not valid hexadecimal.
    """
    records: List[bytes] = []
    for number, line in enumerate(lines, start=1):
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        try:
            records.append(parse_hex(text))
        except InvalidHexError:
            raise ValueError(f"line {number}: not a hexadecimal LSA") from None
    return records


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Build an OSPF topology graph from raw LSAs")
    parser.add_argument("input", type=Path, help="File with one hex-encoded LSA per line")
    parser.add_argument("--strict", action="store_true", default=settings.strict_decode,
                        help="Fail on the first LSA that cannot be decoded")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    parser.add_argument("--draw", type=Path, default=None, help="Save a drawing of the topology to this file")
    args = parser.parse_args(argv)

    settings.strict_decode = args.strict
    settings.log_level = args.log_level.upper()
    try:
        settings.configure_logging()
    except ValueError as exc:
        parser.error(str(exc))

    try:
        with args.input.open("r", encoding="utf-8") as handle:
            records = parse_hex_records(handle)
        decoded = decode_lsdb(records, strict=settings.strict_decode)
    except (OSError, ValueError, OSPFGraphError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    result = build_topology(decoded.lsas)
    LOGGER.info("decoded %d of %d LSAs", len(decoded.lsas), len(records))

    if args.draw is not None:
        # Imported here so that plain JSON output does not load matplotlib
        from .visualize import draw_topology
        draw_topology(result.graph, args.draw)

    output = result.graph.to_dict()
    output["diagnostics"] = [d.to_dict() for d in decoded.diagnostics + result.diagnostics]
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
