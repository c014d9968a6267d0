"""
Decoding of raw OSPFv2 LSAs (RFC 2328 appendix A.4) into typed records.

The input is one complete LSA, header included, exactly as it is stored in
the ``ospfLsdbAdvertisement`` column of the OSPF-MIB. Only Router-LSAs (type 1)
and Network-LSAs (type 2) are supported.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Union
import ipaddress
import logging
import struct

from .errors import (
    Diagnostic, InvalidHexError, InvalidMetricError, LengthMismatchError, LSADecodeError,
    TruncatedLSAError, UnknownLinkTypeError, UnsupportedLSATypeError
)
from .lsa import (
    LSA, LSA_BODY_OFFSET, LSA_HEADER_LENGTH, ROUTER_LINK_LENGTH,
    IPAddress, LSAHeader, LSAType, NetworkLSA, RouterID, RouterLSA,
    RouterLSALink, RouterLSALinkType
)

LOGGER = logging.getLogger(__name__)

_HEADER = struct.Struct("!HBB4s4siHH")
_ROUTER_LINK = struct.Struct("!4s4sBBH")

# Router-LSA flag bits, RFC 2328 A.4.2
_FLAG_V = 0x04
_FLAG_E = 0x02
_FLAG_B = 0x01


@dataclass
class DecodeResult:
    lsas: List[LSA] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _address(raw: bytes) -> IPAddress:
    return IPAddress(ipaddress.IPv4Address(raw))


def decode_header(data: bytes) -> LSAHeader:
    """
    Decodes and validates the 20-byte LSA header.

    Raises:
        TruncatedLSAError: If the buffer is shorter than the header.
        LengthMismatchError: If the length field disagrees with the buffer size.
        UnsupportedLSATypeError: If the type is neither Router nor Network.
    """
    if len(data) < LSA_HEADER_LENGTH:
        raise TruncatedLSAError(
            f"LSA is {len(data)} bytes, shorter than the {LSA_HEADER_LENGTH}-byte header")

    ls_age, options, ls_type, ls_id, adv_router, seq, checksum, length = _HEADER.unpack_from(data)
    if length != len(data):
        raise LengthMismatchError(length, len(data))
    try:
        lsa_type = LSAType(ls_type)
    except ValueError:
        raise UnsupportedLSATypeError(ls_type) from None

    return LSAHeader(
        ls_age=ls_age,
        options=options,
        ls_type=lsa_type,
        link_state_id=_address(ls_id),
        advertising_router=RouterID(_address(adv_router)),
        ls_sequence_number=seq,
        ls_checksum=checksum,
        length=length,
    )


def _decode_router_lsa(header: LSAHeader, data: bytes) -> RouterLSA:
    if len(data) < LSA_BODY_OFFSET:
        raise TruncatedLSAError(f"Router-LSA is {len(data)} bytes, too short for flags and link count")
    flags = data[20]
    link_count = struct.unpack_from("!H", data, 22)[0]
    expected = LSA_BODY_OFFSET + ROUTER_LINK_LENGTH * link_count
    if len(data) != expected:
        raise TruncatedLSAError(
            f"Router-LSA announces {link_count} links ({expected} bytes) but holds {len(data)} bytes")

    links: List[RouterLSALink] = []
    for index in range(link_count):
        offset = LSA_BODY_OFFSET + index * ROUTER_LINK_LENGTH
        link_id, link_data, link_type, tos, metric = _ROUTER_LINK.unpack_from(data, offset)
        try:
            kind = RouterLSALinkType(link_type)
        except ValueError:
            raise UnknownLinkTypeError(link_type, index) from None
        if metric == 0:
            raise InvalidMetricError(metric, index)
        links.append(RouterLSALink(
            link_id=_address(link_id),
            link_data=_address(link_data),
            link_type=kind,
            tos=tos,
            metric=metric,
        ))

    return RouterLSA(
        header=header,
        is_virtual_link_endpoint=bool(flags & _FLAG_V),
        is_asbr=bool(flags & _FLAG_E),
        is_abr=bool(flags & _FLAG_B),
        links=tuple(links),
    )


def _decode_network_lsa(header: LSAHeader, data: bytes) -> NetworkLSA:
    if len(data) < LSA_BODY_OFFSET:
        raise TruncatedLSAError(f"Network-LSA is {len(data)} bytes, too short for the network mask")
    remainder = len(data) - LSA_BODY_OFFSET
    if remainder % 4:
        raise TruncatedLSAError(
            f"Network-LSA attached router list is {remainder} bytes, not a multiple of 4")

    attached = tuple(RouterID(_address(data[offset:offset + 4]))
                     for offset in range(LSA_BODY_OFFSET, len(data), 4))
    return NetworkLSA(
        header=header,
        network_mask=_address(data[20:24]),
        attached_routers=attached,
    )


def parse_hex(text: str) -> bytes:
    """
    Converts a hex-encoded LSA to bytes.

    Bytes may be separated by spaces or colons and the string may carry a "0x"
    prefix, matching what common SNMP tools print for OCTET STRING values.

    Raises:
        InvalidHexError: If the text is not hexadecimal.
    """
    text = text.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    try:
        return bytes.fromhex(text.replace(":", " "))
    except ValueError:
        raise InvalidHexError("record is not a hexadecimal LSA") from None


def decode_lsa(data: bytes) -> LSA:
    """
    Decodes one complete LSA.

    Args:
        data: The LSA bytes, starting with the 20-byte header.

    Returns:
        A RouterLSA or a NetworkLSA.

    Raises:
        LSADecodeError: A subclass describing why the bytes were rejected.
            Nothing is returned for a malformed record.
    """
    data = bytes(data)
    header = decode_header(data)
    if header.ls_type == LSAType.ROUTER_LSA:
        lsa: LSA = _decode_router_lsa(header, data)
    elif header.ls_type == LSAType.NETWORK_LSA:
        lsa = _decode_network_lsa(header, data)
    else:  # LSAType only has the two members
        raise TypeError(f"Unhandled LSA type {header.ls_type!r}")
    LOGGER.debug("decoded %s %s from %s (%d bytes)", header.ls_type.name,
                 header.link_state_id, header.advertising_router, header.length)
    return lsa


def decode_lsdb(records: Iterable[Union[bytes, bytearray, str]], strict: bool = False) -> DecodeResult:
    """
    Decodes every LSA of one LSDB snapshot.

    Args:
        records: Raw LSAs in walk order, as bytes or as hex strings.
        strict: If True, the first bad record aborts the batch. Otherwise bad
            records are skipped and reported as diagnostics.

    Returns:
        The decoded LSAs in input order and one diagnostic per skipped record.

    Raises:
        LSADecodeError: Only in strict mode, with ``record_index`` set.
    """
    result = DecodeResult()
    for index, raw in enumerate(records):
        try:
            if isinstance(raw, str):
                raw = parse_hex(raw)
            result.lsas.append(decode_lsa(raw))
        except LSADecodeError as exc:
            exc.record_index = index
            if strict:
                raise
            LOGGER.warning("skipping LSA record %d: %s", index, exc.message)
            result.diagnostics.append(exc.to_diagnostic(f"record {index}"))
    return result
