# ============================================================================
#  File: scheduler.py
#  Version: 1.0
#  Purpose: Deterministic topological ordering of workflow nodes
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from collections import deque
from typing import Dict, List, Sequence

from loguru import logger

from complaint_workflow.error_handling import CycleDetected, NodeNotFound
from complaint_workflow.graph_model import Edge, Node
#
# ============================================================================
# SECTION 2: Scheduling
# ============================================================================
# Function 2.1: compute_order
# ============================================================================
#
def compute_order(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[str]:
    """
    Computes a dependency-respecting execution order using Kahn's algorithm.

    Entry points (in-degree 0) are seeded in node declaration order and
    targets are released in edge declaration order, so a given graph always
    yields the same sequence.

    Args:
        nodes: Workflow nodes, in declaration order
        edges: Directed "must precede" edges

    Returns:
        List[str]: Node ids in execution order

    Raises:
        NodeNotFound: An edge references a node id that is not in `nodes`
        CycleDetected: The graph is not acyclic; carries the unreached ids
    """
    adjacency: Dict[str, List[str]] = {}
    in_degree: Dict[str, int] = {}
    for node in nodes:
        adjacency[node.id] = []
        in_degree[node.id] = 0

    for edge in edges:
        if edge.source not in adjacency:
            raise NodeNotFound(edge.source, referenced_by=edge.id)
        if edge.target not in adjacency:
            raise NodeNotFound(edge.target, referenced_by=edge.id)
        adjacency[edge.source].append(edge.target)
        in_degree[edge.target] += 1

    queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    order: List[str] = []

    while queue:
        current = queue.popleft()
        order.append(current)
        for neighbor in adjacency[current]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(order) != len(adjacency):
        reached = set(order)
        unreached = [node_id for node_id in adjacency if node_id not in reached]
        logger.error(f"Cycle detected in workflow graph; unreached nodes: {unreached}")
        raise CycleDetected(unreached)

    return order
#
#
## End Script
