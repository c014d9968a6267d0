"""
Topology building from a decoded OSPF link-state database.

The graph has three node kinds:

* routers, one per Router-LSA, keyed by Router ID;
* transit networks, one per Network-LSA, keyed by "prefix/length";
* stub networks, one per distinct stub link, keyed by "network/length".

Edge costs follow the SPF graph of RFC 2328 section 16.1: router links carry
the advertised metric, and the leg from a transit network back to each
attached router costs 0.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging

from .errors import Diagnostic, DiagnosticKind
from .graph import TopologyGraph
from .lsa import LSA, NetworkLSA, RouterLSA, RouterLSALink, RouterLSALinkType
from .prefix import format_prefix, prefix_matches

LOGGER = logging.getLogger(__name__)


@dataclass
class TopologyResult:
    graph: TopologyGraph
    diagnostics: List[Diagnostic] = field(default_factory=list)


class _TopologyBuilder:

    def __init__(self, lsas: Sequence[LSA]) -> None:
        self.router_lsas: List[RouterLSA] = []
        self.network_lsas: List[NetworkLSA] = []
        for lsa in lsas:
            if isinstance(lsa, RouterLSA):
                self.router_lsas.append(lsa)
            elif isinstance(lsa, NetworkLSA):
                self.network_lsas.append(lsa)
            else:
                raise TypeError(f"Expected RouterLSA or NetworkLSA, got {type(lsa).__name__}")
        self.graph = TopologyGraph()
        self.diagnostics: List[Diagnostic] = []

    def warn(self, context: str, message: str) -> None:
        LOGGER.warning("%s: %s", context, message)
        self.diagnostics.append(Diagnostic(context, DiagnosticKind.RESOLUTION_WARNING, message))

    def build(self) -> TopologyResult:
        # Pass 1: nodes for every LSA, so that edges can be resolved in any order
        for router_lsa in self.router_lsas:
            self.graph.upsert_node(
                TopologyGraph.router(str(router_lsa.router_id)),
                is_abr=router_lsa.is_abr,
                is_asbr=router_lsa.is_asbr,
                is_virtual_link_endpoint=router_lsa.is_virtual_link_endpoint,
            )
        for network_lsa in self.network_lsas:
            self.graph.upsert_node(
                TopologyGraph.network(network_lsa.prefix_string),
                designated_router=str(network_lsa.designated_router),
                network_mask=str(network_lsa.network_mask),
            )

        # Pass 2: edges
        for router_lsa in self.router_lsas:
            for index, link in enumerate(router_lsa.links):
                self.add_router_link(router_lsa, index, link)
        for network_lsa in self.network_lsas:
            self.add_network_links(network_lsa)

        LOGGER.info("built topology with %d nodes and %d edges (%d warnings)",
                    self.graph.get_nodes_count(), self.graph.get_edges_count(), len(self.diagnostics))
        return TopologyResult(graph=self.graph, diagnostics=self.diagnostics)

    def add_router_link(self, router_lsa: RouterLSA, index: int, link: RouterLSALink) -> None:
        source = TopologyGraph.router(str(router_lsa.router_id))
        context = f"router {router_lsa.router_id} link {index}"

        if link.link_type == RouterLSALinkType.POINT_TO_POINT:
            neighbor = TopologyGraph.router(str(link.link_id))
            if not self.graph.has_node(neighbor):
                self.warn(context, f"point-to-point neighbor {link.link_id} has no Router-LSA")
                return
            self.graph.add_edge(source, neighbor, link.metric)

        elif link.link_type == RouterLSALinkType.TRANSIT_NETWORK:
            network_lsa = self.find_transit_network(link)
            if network_lsa is None:
                # Commonly a point-to-point/broadcast network type mismatch: the
                # broadcast side expects a Network-LSA the other side never originates.
                self.warn(context, f"no Network-LSA matches designated router address {link.link_data}")
                return
            self.graph.add_edge(source, TopologyGraph.network(network_lsa.prefix_string), link.metric)

        elif link.link_type == RouterLSALinkType.STUB_NETWORK:
            # Link ID is the network number, Link Data its mask
            stub = TopologyGraph.stub(format_prefix(link.link_id, link.link_data))
            self.graph.upsert_node(stub)
            self.graph.add_edge(source, stub, link.metric)

        elif link.link_type == RouterLSALinkType.VIRTUAL_LINK:
            LOGGER.debug("%s: ignoring virtual link to %s", context, link.link_id)

        else:  # pragma: no cover - RouterLSALinkType has exactly four members
            raise TypeError(f"Unhandled link type {link.link_type!r}")

    def find_transit_network(self, link: RouterLSALink) -> Optional[NetworkLSA]:
        # Linear scan in record order, first match wins. OSPF areas are small.
        for network_lsa in self.network_lsas:
            if prefix_matches(link.link_data, network_lsa.prefix, network_lsa.network_mask):
                return network_lsa
        return None

    def add_network_links(self, network_lsa: NetworkLSA) -> None:
        source = TopologyGraph.network(network_lsa.prefix_string)
        for router_id in network_lsa.attached_routers:
            target = TopologyGraph.router(str(router_id))
            if not self.graph.has_node(target):
                self.warn(f"network {network_lsa.prefix_string}",
                          f"attached router {router_id} has no Router-LSA")
                continue
            # Cost from a network to its attached routers is always 0
            self.graph.add_edge(source, target, 0)


def build_topology(lsas: Sequence[LSA]) -> TopologyResult:
    """
    Builds the topology graph of one LSDB snapshot.

    Every LSA of the snapshot must be passed at once, because a Router-LSA's
    transit links can only be resolved against all Network-LSAs.

    Args:
        lsas: Decoded Router-LSAs and Network-LSAs, in LSDB order.

    Returns:
        The graph and a resolution warning for every link that could not be
        matched to a node. Unresolved links are left out of the graph.

    Raises:
        TypeError: If an element is not a RouterLSA or NetworkLSA.
    """
    return _TopologyBuilder(lsas).build()
