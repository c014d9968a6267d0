from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
import networkx as nx

from .graph import NodeKind, TopologyGraph

NODE_COLORS = {
    NodeKind.ROUTER.value: "lightblue",
    NodeKind.NETWORK.value: "lightgreen",
    NodeKind.STUB.value: "lightgray",
}


def draw_topology(graph: TopologyGraph, path: Optional[Union[str, Path]] = None) -> plt.Figure:
    """
    Draws the topology with routers, transit networks and stubs coloured apart.

    Args:
        graph: The topology to draw.
        path: If given, the figure is saved there and closed.

    Returns:
        The matplotlib figure.
    """
    digraph = graph.to_networkx()
    labels = {node: data["key"] for node, data in digraph.nodes(data=True)}
    colors = [NODE_COLORS[data["kind"]] for _, data in digraph.nodes(data=True)]
    edge_labels = {(u, v): data["cost"] for u, v, data in digraph.edges(data=True)}

    figure = plt.figure(figsize=(8, 8))
    positions = nx.spring_layout(digraph, seed=1)
    nx.draw(
        digraph,
        positions,
        labels=labels,
        node_color=colors,
        edge_color="gray",
        node_size=800,
        font_size=8,
        font_weight="bold",
    )
    nx.draw_networkx_edge_labels(digraph, positions, edge_labels=edge_labels, font_size=7)
    plt.title("OSPF Topology")
    plt.tight_layout()

    if path is not None:
        figure.savefig(path)
        plt.close(figure)
    return figure
