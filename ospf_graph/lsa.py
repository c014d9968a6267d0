from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NewType, Tuple, Union
import ipaddress

from .prefix import apply_mask, prefix_length

# OSPF Router IDs and interface addresses are both 32-bit values written in
# dotted-quad form; NewType keeps the intent visible in signatures.
IPAddress = NewType("IPAddress", ipaddress.IPv4Address)
RouterID = NewType("RouterID", ipaddress.IPv4Address)

LSA_HEADER_LENGTH = 20
LSA_BODY_OFFSET = 24   # Router-LSA links and Network-LSA attached routers start here
ROUTER_LINK_LENGTH = 12


class LSAType(Enum):
    ROUTER_LSA = 1
    NETWORK_LSA = 2


@dataclass(frozen=True)
class LSAHeader:
    ls_age: int                   # In seconds, max 3600 (LSMaxAge)
    options: int
    ls_type: LSAType
    link_state_id: IPAddress      # Meaning depends on LSA type
    advertising_router: RouterID  # Router ID of the originator
    ls_sequence_number: int       # Signed 32-bit integer, starts with 0x80000001
    ls_checksum: int
    length: int                   # Length in bytes, including the header

# --- Router LSA (Type 1) --- #

class RouterLSALinkType(Enum):
    POINT_TO_POINT = 1
    TRANSIT_NETWORK = 2  # Connection to a transit network (DR exists)
    STUB_NETWORK = 3     # Connection to a stub network (no other routers)
    VIRTUAL_LINK = 4


# RFC 2328 section 12.4.1, presentation only.
LINK_TYPE_DESCRIPTIONS: Dict[RouterLSALinkType, str] = {
    RouterLSALinkType.POINT_TO_POINT: "Point-to-point connection to another router",
    RouterLSALinkType.TRANSIT_NETWORK: "Connection to a transit network",
    RouterLSALinkType.STUB_NETWORK: "Connection to a stub network",
    RouterLSALinkType.VIRTUAL_LINK: "Virtual link",
}

LINK_ID_MEANINGS: Dict[RouterLSALinkType, str] = {
    RouterLSALinkType.POINT_TO_POINT: "Neighboring router's Router ID",
    RouterLSALinkType.TRANSIT_NETWORK: "IP address of Designated Router",
    RouterLSALinkType.STUB_NETWORK: "IP network/subnet number",
    RouterLSALinkType.VIRTUAL_LINK: "Neighboring router's Router ID",
}

LINK_DATA_MEANINGS: Dict[RouterLSALinkType, str] = {
    RouterLSALinkType.POINT_TO_POINT: "Router interface's IP address",
    RouterLSALinkType.TRANSIT_NETWORK: "Router interface's IP address",
    RouterLSALinkType.STUB_NETWORK: "Network's IP address mask",
    RouterLSALinkType.VIRTUAL_LINK: "Router interface's IP address",
}


@dataclass(frozen=True)
class RouterLSALink:
    link_id: IPAddress    # Neighbor Router ID, DR address or network number
    link_data: IPAddress  # Interface address, or the network mask for stubs
    link_type: RouterLSALinkType
    tos: int
    metric: int           # Cost of this link, 1-65535

    def describe(self) -> str:
        return (
            f"[Type {self.link_type.value}] [Metric = {self.metric}]. "
            f"{LINK_TYPE_DESCRIPTIONS[self.link_type]}. "
            f"{LINK_ID_MEANINGS[self.link_type]} is {self.link_id}. "
            f"{LINK_DATA_MEANINGS[self.link_type]} is {self.link_data}"
        )


@dataclass(frozen=True)
class RouterLSA:
    header: LSAHeader
    # Flags: V (Virtual Link endpoint), E (ASBR), B (ABR)
    is_virtual_link_endpoint: bool = False
    is_asbr: bool = False
    is_abr: bool = False
    links: Tuple[RouterLSALink, ...] = field(default_factory=tuple)

    @property
    def router_id(self) -> RouterID:
        # Link State ID for Router LSA is the originating Router ID itself
        return RouterID(self.header.link_state_id)

    @property
    def link_count(self) -> int:
        return len(self.links)

    def links_of_type(self, link_type: RouterLSALinkType) -> List[RouterLSALink]:
        return [link for link in self.links if link.link_type == link_type]

    def adjacent_routers(self) -> Dict[RouterID, int]:
        """Maps each point-to-point neighbor's Router ID to the link metric."""
        return {RouterID(link.link_id): link.metric
                for link in self.links_of_type(RouterLSALinkType.POINT_TO_POINT)}

    def adjacent_networks(self) -> Dict[IPAddress, int]:
        """
        Maps the address held in each transit link's Link Data to the metric.

        The Network-LSA for that segment is found later by prefix matching.
        """
        return {IPAddress(link.link_data): link.metric
                for link in self.links_of_type(RouterLSALinkType.TRANSIT_NETWORK)}

    def stubs(self) -> Dict[str, int]:
        """Maps each stub network as "network/length" to the link metric."""
        return {f"{link.link_id}/{prefix_length(link.link_data)}": link.metric
                for link in self.links_of_type(RouterLSALinkType.STUB_NETWORK)}

    def describe(self) -> str:
        lines = [f"[Router ID {self.router_id}]"]
        lines.extend(f" * {link.describe()}" for link in self.links)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()

# --- Network LSA (Type 2) --- #

@dataclass(frozen=True)
class NetworkLSA:
    header: LSAHeader
    network_mask: IPAddress
    attached_routers: Tuple[RouterID, ...] = field(default_factory=tuple)  # RIDs on this network (incl. DR)

    @property
    def designated_router(self) -> IPAddress:
        # Link State ID for Network LSA is the IP Interface Address of the DR
        return IPAddress(self.header.link_state_id)

    @property
    def prefix_length(self) -> int:
        return prefix_length(self.network_mask)

    @property
    def prefix(self) -> IPAddress:
        return IPAddress(ipaddress.IPv4Address(apply_mask(self.designated_router, self.network_mask)))

    @property
    def prefix_string(self) -> str:
        return f"{self.prefix}/{self.prefix_length}"

    def describe(self) -> str:
        lines = [f"[Network {self.prefix_string}; DR={self.designated_router}]"]
        lines.extend(f" * {router}" for router in self.attached_routers)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()


# Closed set of supported LSAs. Anything dispatching on it must handle both.
LSA = Union[RouterLSA, NetworkLSA]
