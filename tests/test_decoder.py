import dataclasses
import ipaddress
import logging

import pytest
import ospf_graph.decoder
from ospf_graph.decoder import decode_header, decode_lsa, decode_lsdb, parse_hex
from ospf_graph.errors import (
    DiagnosticKind, InvalidHexError, InvalidMetricError, LengthMismatchError, LSADecodeError,
    TruncatedLSAError, UnknownLinkTypeError, UnsupportedLSATypeError
)
from ospf_graph.lsa import LSAType, NetworkLSA, RouterLSA, RouterLSALinkType

from lsa_builders import build_lsa_header, build_network_lsa, build_router_lsa, with_length


def ip(address: str) -> ipaddress.IPv4Address:
    return ipaddress.IPv4Address(address)


class TestHeader:
    def test_header_fields(self):
        header = decode_header(build_router_lsa("1.1.1.1"))
        assert header.ls_age == 42
        assert header.options == 0x22
        assert header.ls_type == LSAType.ROUTER_LSA
        assert header.link_state_id == ip("1.1.1.1")
        assert header.advertising_router == ip("1.1.1.1")
        assert header.ls_sequence_number == -0x7FFFFFFF
        assert header.ls_checksum == 0x1234
        assert header.length == 24

    def test_shorter_than_header_is_truncated(self):
        with pytest.raises(TruncatedLSAError, match="shorter than the 20-byte header"):
            decode_lsa(b"\x00" * 19)

    def test_empty_buffer_is_truncated(self):
        with pytest.raises(TruncatedLSAError):
            decode_lsa(b"")

    @pytest.mark.parametrize("declared", [0, 23, 25, 0xFFFF])
    def test_length_mismatch(self, declared):
        data = with_length(build_router_lsa("1.1.1.1"), declared)
        with pytest.raises(LengthMismatchError) as excinfo:
            decode_lsa(data)
        assert excinfo.value.declared == declared
        assert excinfo.value.actual == 24
        assert excinfo.value.kind == DiagnosticKind.LENGTH_MISMATCH

    def test_length_checked_before_type(self):
        data = with_length(build_lsa_header(3, "10.0.0.0", "1.1.1.1", 28) + b"\x00" * 8, 20)
        with pytest.raises(LengthMismatchError):
            decode_lsa(data)

    @pytest.mark.parametrize("ls_type", [0, 3, 4, 5, 7, 10, 255])
    def test_unsupported_type(self, ls_type):
        data = build_lsa_header(ls_type, "10.0.0.0", "1.1.1.1", 28) + b"\xff\xff\xff\x00\x00\x00\x00\x0a"
        with pytest.raises(UnsupportedLSATypeError, match=f"LSA type {ls_type} is not supported") as excinfo:
            decode_lsa(data)
        assert excinfo.value.ls_type == ls_type

    def test_decode_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            decode_lsa(b"\x01")


class TestRouterLSA:
    def test_point_to_point_link(self):
        lsa = decode_lsa(build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10)]))
        assert isinstance(lsa, RouterLSA)
        assert lsa.router_id == ip("1.1.1.1")
        assert lsa.link_count == 1
        link = lsa.links[0]
        assert link.link_id == ip("2.2.2.2")
        assert link.link_data == ip("10.0.12.1")
        assert link.link_type == RouterLSALinkType.POINT_TO_POINT
        assert link.tos == 0
        assert link.metric == 10

    def test_all_link_types_in_order(self):
        links = [
            ("2.2.2.2", "10.0.12.1", 1, 10),
            ("10.0.0.1", "10.0.0.2", 2, 20),
            ("192.0.2.0", "255.255.255.0", 3, 30),
            ("4.4.4.4", "10.0.14.1", 4, 65535),
        ]
        lsa = decode_lsa(build_router_lsa("1.1.1.1", links))
        assert [link.link_type for link in lsa.links] == [
            RouterLSALinkType.POINT_TO_POINT,
            RouterLSALinkType.TRANSIT_NETWORK,
            RouterLSALinkType.STUB_NETWORK,
            RouterLSALinkType.VIRTUAL_LINK,
        ]
        assert [link.metric for link in lsa.links] == [10, 20, 30, 65535]

    def test_no_links(self):
        lsa = decode_lsa(build_router_lsa("3.3.3.3"))
        assert lsa.link_count == 0
        assert lsa.links == ()

    def test_flags(self):
        lsa = decode_lsa(build_router_lsa("1.1.1.1", flags=0x07))
        assert lsa.is_virtual_link_endpoint
        assert lsa.is_asbr
        assert lsa.is_abr

        lsa = decode_lsa(build_router_lsa("1.1.1.1", flags=0x01))
        assert lsa.is_abr
        assert not lsa.is_asbr
        assert not lsa.is_virtual_link_endpoint

    def test_tos_byte_is_kept(self):
        lsa = decode_lsa(build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10)], tos=5))
        assert lsa.links[0].tos == 5

    def test_missing_link_count_is_truncated(self):
        data = with_length(build_router_lsa("1.1.1.1")[:22], 22)
        with pytest.raises(TruncatedLSAError, match="too short for flags and link count"):
            decode_lsa(data)

    def test_fewer_links_than_announced(self):
        data = build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10)], link_count=2)
        with pytest.raises(TruncatedLSAError, match="announces 2 links"):
            decode_lsa(data)

    def test_partial_link_record(self):
        data = build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10)])[:-4]
        with pytest.raises(TruncatedLSAError):
            decode_lsa(with_length(data, len(data)))

    def test_more_bytes_than_announced(self):
        data = build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10)], link_count=0)
        with pytest.raises(TruncatedLSAError):
            decode_lsa(data)

    @pytest.mark.parametrize("link_type", [0, 5, 255])
    def test_unknown_link_type(self, link_type):
        data = build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10), ("3.3.3.3", "10.0.13.1", link_type, 10)])
        with pytest.raises(UnknownLinkTypeError) as excinfo:
            decode_lsa(data)
        assert excinfo.value.link_type == link_type
        assert excinfo.value.link_index == 1
        assert excinfo.value.kind == DiagnosticKind.UNKNOWN_LINK_KIND

    def test_zero_metric(self):
        data = build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 0)])
        with pytest.raises(InvalidMetricError, match="invalid metric 0") as excinfo:
            decode_lsa(data)
        assert excinfo.value.link_index == 0
        assert excinfo.value.kind == DiagnosticKind.INVALID_METRIC

    def test_accepts_bytearray(self):
        lsa = decode_lsa(bytearray(build_router_lsa("1.1.1.1")))
        assert lsa.router_id == ip("1.1.1.1")

    def test_describe(self):
        lsa = decode_lsa(build_router_lsa("1.1.1.1", [("192.0.2.0", "255.255.255.0", 3, 5)]))
        text = str(lsa)
        assert text.splitlines()[0] == "[Router ID 1.1.1.1]"
        assert "[Type 3] [Metric = 5]. Connection to a stub network." in text
        assert "IP network/subnet number is 192.0.2.0" in text
        assert "Network's IP address mask is 255.255.255.0" in text

    def test_link_groupings(self):
        lsa = decode_lsa(build_router_lsa("1.1.1.1", [
            ("2.2.2.2", "10.0.12.1", 1, 10),
            ("10.0.0.1", "10.0.0.2", 2, 20),
            ("192.0.2.0", "255.255.255.0", 3, 30),
        ]))
        assert lsa.adjacent_routers() == {ip("2.2.2.2"): 10}
        assert lsa.adjacent_networks() == {ip("10.0.0.2"): 20}
        assert lsa.stubs() == {"192.0.2.0/24": 30}


class TestNetworkLSA:
    def test_fields_and_derived_prefix(self):
        lsa = decode_lsa(build_network_lsa("10.0.0.1", "255.255.255.0", ["1.1.1.1", "2.2.2.2"]))
        assert isinstance(lsa, NetworkLSA)
        assert lsa.designated_router == ip("10.0.0.1")
        assert lsa.network_mask == ip("255.255.255.0")
        assert lsa.prefix_length == 24
        assert lsa.prefix == ip("10.0.0.0")
        assert lsa.prefix_string == "10.0.0.0/24"
        assert lsa.attached_routers == (ip("1.1.1.1"), ip("2.2.2.2"))

    def test_no_attached_routers(self):
        lsa = decode_lsa(build_network_lsa("172.16.1.9", "255.255.255.248", []))
        assert lsa.attached_routers == ()
        assert lsa.prefix_string == "172.16.1.8/29"

    def test_attached_routers_not_multiple_of_four(self):
        data = build_network_lsa("10.0.0.1", "255.255.255.0", ["1.1.1.1"]) + b"\x02\x02"
        with pytest.raises(TruncatedLSAError, match="not a multiple of 4"):
            decode_lsa(with_length(data, len(data)))

    def test_missing_mask_is_truncated(self):
        data = build_network_lsa("10.0.0.1")[:22]
        with pytest.raises(TruncatedLSAError, match="too short for the network mask"):
            decode_lsa(with_length(data, 22))

    def test_describe(self):
        lsa = decode_lsa(build_network_lsa("10.0.0.1", "255.255.255.0", ["1.1.1.1"]))
        assert lsa.describe() == "[Network 10.0.0.0/24; DR=10.0.0.1]\n * 1.1.1.1"


class TestDecodeLSDB:
    def records(self):
        return [
            build_router_lsa("1.1.1.1", [("2.2.2.2", "10.0.12.1", 1, 10)]),
            build_lsa_header(5, "0.0.0.0", "1.1.1.1", 36) + b"\x00" * 16,
            build_network_lsa("10.0.0.1", "255.255.255.0", ["1.1.1.1"]),
            with_length(build_router_lsa("2.2.2.2"), 99),
        ]

    def test_skips_bad_records_with_diagnostics(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ospf_graph.decoder"):
            result = decode_lsdb(self.records())
        assert [type(lsa) for lsa in result.lsas] == [RouterLSA, NetworkLSA]
        assert [(d.context, d.kind) for d in result.diagnostics] == [
            ("record 1", DiagnosticKind.UNSUPPORTED_TYPE),
            ("record 3", DiagnosticKind.LENGTH_MISMATCH),
        ]
        assert "skipping LSA record 1" in caplog.text

    def test_strict_mode_raises_with_record_index(self):
        with pytest.raises(UnsupportedLSATypeError) as excinfo:
            decode_lsdb(self.records(), strict=True)
        assert excinfo.value.record_index == 1
        assert str(excinfo.value) == "record 1: LSA type 5 is not supported"

    def test_all_good(self):
        result = decode_lsdb([build_router_lsa("1.1.1.1"), build_router_lsa("2.2.2.2")])
        assert len(result.lsas) == 2
        assert result.diagnostics == []

    def test_diagnostic_to_dict(self):
        result = decode_lsdb([b"\x00"])
        assert result.diagnostics[0].to_dict() == {
            "context": "record 0",
            "kind": "truncated",
            "message": "LSA is 1 bytes, shorter than the 20-byte header",
        }

    def test_error_without_index_has_plain_message(self):
        with pytest.raises(LSADecodeError) as excinfo:
            decode_lsa(b"\x00")
        assert excinfo.value.record_index is None
        assert str(excinfo.value) == "LSA is 1 bytes, shorter than the 20-byte header"

    def test_hex_records(self):
        router = build_router_lsa("1.1.1.1")
        network = build_network_lsa("10.0.0.1", "255.255.255.0", ["1.1.1.1"])
        result = decode_lsdb([
            router.hex(),
            "0x" + network.hex(),
            ":".join(f"{byte:02x}" for byte in router),
            build_router_lsa("2.2.2.2"),
        ])
        assert [type(lsa) for lsa in result.lsas] == [RouterLSA, NetworkLSA, RouterLSA, RouterLSA]
        assert str(result.lsas[3].router_id) == "2.2.2.2"
        assert result.diagnostics == []

    def test_bad_hex_is_a_diagnostic(self):
        result = decode_lsdb([build_router_lsa("1.1.1.1").hex(), "zz", build_router_lsa("2.2.2.2")])
        assert len(result.lsas) == 2
        assert [(d.context, d.kind) for d in result.diagnostics] == [
            ("record 1", DiagnosticKind.INVALID_ENCODING),
        ]

    def test_bad_hex_strict(self):
        with pytest.raises(InvalidHexError) as excinfo:
            decode_lsdb([build_router_lsa("1.1.1.1").hex(), "not hex"], strict=True)
        assert excinfo.value.record_index == 1


class TestParseHex:
    @pytest.mark.parametrize("text", ["0a0b0c", "0x0A0B0C", "0a 0b 0c", "0a:0b:0c", "  0a0b0c\n"])
    def test_formats(self, text):
        assert parse_hex(text) == b"\x0a\x0b\x0c"

    @pytest.mark.parametrize("text", ["zz", "0a0", "0a-0b"])
    def test_rejects_non_hex(self, text):
        with pytest.raises(InvalidHexError):
            parse_hex(text)


def test_unhandled_header_type_is_a_programming_error(monkeypatch):
    real_decode_header = ospf_graph.decoder.decode_header

    def decode_header_with_unknown_type(data):
        return dataclasses.replace(real_decode_header(data), ls_type="bogus")

    monkeypatch.setattr(ospf_graph.decoder, "decode_header", decode_header_with_unknown_type)
    with pytest.raises(TypeError, match="Unhandled LSA type"):
        decode_lsa(build_router_lsa("1.1.1.1"))
