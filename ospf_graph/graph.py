from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

import networkx as nx


class NodeKind(Enum):
    ROUTER = "router"
    NETWORK = "network"
    STUB = "stub"


class NodeRef(NamedTuple):
    """
    Identifies a topology node.

    Keys are only unique within a kind, so a stub "10.0.0.0/24" and a transit
    network "10.0.0.0/24" are two different nodes.
    """
    kind: NodeKind
    key: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.key}"


class Edge(NamedTuple):
    source: NodeRef
    target: NodeRef
    cost: int


class TopologyGraph:
    """
    A directed graph of OSPF routers, transit networks and stub networks.

    There is at most one edge per ordered pair of nodes; adding the same pair
    again replaces its cost.
    """

    def __init__(self) -> None:
        self._nodes: Dict[NodeRef, Dict[str, Any]] = {}  # node -> attributes
        self._adjacency_list: Dict[NodeRef, Dict[NodeRef, int]] = {}  # node -> {neighbor: cost}

    def add_node(self, node: NodeRef, data: Optional[Dict[str, Any]] = None) -> None:
        """
        Adds a node to the graph.

        Args:
            node: The kind and key of the node.
            data: Optional attributes to associate with the node.

        Raises:
            ValueError: If the node already exists.
        """
        if node in self._nodes:
            raise ValueError(f"Node {node} already exists.")
        self._nodes[node] = dict(data or {})
        self._adjacency_list[node] = {}

    def upsert_node(self, node: NodeRef, **attributes: Any) -> None:
        """Adds a node if it is missing and merges the given attributes into it."""
        if node not in self._nodes:
            self.add_node(node)
        self._nodes[node].update(attributes)

    def get_node_data(self, node: NodeRef) -> Dict[str, Any]:
        """
        Retrieves the attributes associated with a node.

        Raises:
            ValueError: If the node does not exist.
        """
        if node not in self._nodes:
            raise ValueError(f"Node {node} does not exist.")
        return self._nodes[node]

    def has_node(self, node: NodeRef) -> bool:
        return node in self._nodes

    def add_edge(self, u: NodeRef, v: NodeRef, cost: int) -> None:
        """
        Adds or replaces the directed edge from u to v.

        Missing endpoints are added to the graph without attributes.
        """
        if u not in self._nodes:
            self.add_node(u)
        if v not in self._nodes:
            self.add_node(v)

        self._adjacency_list[u][v] = cost

    def has_edge(self, u: NodeRef, v: NodeRef) -> bool:
        return v in self._adjacency_list.get(u, {})

    def get_edge_cost(self, u: NodeRef, v: NodeRef) -> Optional[int]:
        """Returns the cost of the edge from u to v, or None if there is none."""
        return self._adjacency_list.get(u, {}).get(v)

    def neighbors(self, node: NodeRef) -> Iterator[NodeRef]:
        """
        Returns an iterator over the nodes that node has an edge to.

        Raises:
            ValueError: If the node does not exist.
        """
        if node not in self._nodes:
            raise ValueError(f"Node {node} does not exist.")
        return iter(self._adjacency_list[node])

    def predecessors(self, node: NodeRef) -> List[NodeRef]:
        if node not in self._nodes:
            raise ValueError(f"Node {node} does not exist.")
        return [u for u, targets in self._adjacency_list.items() if node in targets]

    def get_all_nodes(self) -> Iterator[NodeRef]:
        return iter(self._nodes)

    def nodes_of_kind(self, kind: NodeKind) -> List[NodeRef]:
        return [node for node in self._nodes if node.kind == kind]

    def edges(self) -> Iterator[Edge]:
        for u, targets in self._adjacency_list.items():
            for v, cost in targets.items():
                yield Edge(u, v, cost)

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get_nodes_count(self) -> int:
        return len(self._nodes)

    def get_edges_count(self) -> int:
        return sum(len(targets) for targets in self._adjacency_list.values())

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Returns the interchange form of the graph.

        Nodes are ``{"kind", "key"}`` objects and edges are
        ``{"from", "to", "cost", "from_kind", "to_kind"}`` objects, where the
        kinds tell a stub apart from a transit network with the same key.
        """
        return {
            "nodes": [{"kind": node.kind.value, "key": node.key} for node in self._nodes],
            "edges": [
                {
                    "from": edge.source.key,
                    "to": edge.target.key,
                    "cost": edge.cost,
                    "from_kind": edge.source.kind.value,
                    "to_kind": edge.target.kind.value,
                }
                for edge in self.edges()
            ],
        }

    def to_networkx(self) -> nx.DiGraph:
        """
        Converts the topology to a networkx DiGraph for analysis.

        Node IDs are the ``kind:key`` strings, each node carries ``kind``,
        ``key`` and its other attributes, each edge carries ``cost``.
        """
        digraph = nx.DiGraph()
        for node, data in self._nodes.items():
            digraph.add_node(str(node), kind=node.kind.value, key=node.key, **data)
        for edge in self.edges():
            digraph.add_edge(str(edge.source), str(edge.target), cost=edge.cost)
        return digraph

    def __repr__(self) -> str:
        return f"TopologyGraph(nodes={self.get_nodes_count()}, edges={self.get_edges_count()})"

    @staticmethod
    def router(key: str) -> NodeRef:
        return NodeRef(NodeKind.ROUTER, key)

    @staticmethod
    def network(key: str) -> NodeRef:
        return NodeRef(NodeKind.NETWORK, key)

    @staticmethod
    def stub(key: str) -> NodeRef:
        return NodeRef(NodeKind.STUB, key)

