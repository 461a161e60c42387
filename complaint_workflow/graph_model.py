# ============================================================================
#  File: graph_model.py
#  Version: 1.0
#  Purpose: Node / edge model of a designer-authored workflow graph
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from complaint_workflow.error_handling import DuplicateNodeId
#
# ============================================================================
# SECTION 2: Enums
# ============================================================================
# Class 2.1: NodeType
# ============================================================================
#
class NodeType(Enum):
    """Coarse node types emitted by the workflow designer"""

    START = "start"
    END = "end"
    TASK = "task"
    DECISION = "decision"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str) -> Optional["NodeType"]:
        try:
            return cls(value)
        except ValueError:
            return None
#
# ============================================================================
# Class 2.2: CustomNodeKind
# ============================================================================
#
class CustomNodeKind(Enum):
    """Concrete behaviour of a custom node, resolved from its label"""

    EMAIL_NOTIFICATION = "email_notification"
    SMS_NOTIFICATION = "sms_notification"
    WHATSAPP_NOTIFICATION = "whatsapp_notification"
    INITIAL_INSPECTION = "initial_inspection"
    ASSESSMENT = "assessment"
    ENFORCEMENT_ACTION = "enforcement_action"
    RESOLUTION = "resolution"
    UNKNOWN = "unknown"


# Checked in order; the first fragment contained in the label wins.
CUSTOM_LABEL_RULES: Tuple[Tuple[str, CustomNodeKind], ...] = (
    ("email notification", CustomNodeKind.EMAIL_NOTIFICATION),
    ("sms notification", CustomNodeKind.SMS_NOTIFICATION),
    ("whatsapp notification", CustomNodeKind.WHATSAPP_NOTIFICATION),
    ("initial inspection", CustomNodeKind.INITIAL_INSPECTION),
    ("assessment", CustomNodeKind.ASSESSMENT),
    ("enforcement", CustomNodeKind.ENFORCEMENT_ACTION),
    ("resolution", CustomNodeKind.RESOLUTION),
)


def resolve_custom_kind(label: Optional[str]) -> CustomNodeKind:
    """Map a custom node label to its kind (case-insensitive substring match)."""
    normalized = (label or "").lower()
    for fragment, kind in CUSTOM_LABEL_RULES:
        if fragment in normalized:
            return kind
    return CustomNodeKind.UNKNOWN
#
# ============================================================================
# SECTION 3: Graph Primitives
# ============================================================================
# Class 3.1: Node
# ============================================================================
#
@dataclass(frozen=True)
class Node:
    id: str
    type: str
    label: str = ""
    config: Dict[str, Any] = field(default_factory=dict)
    position: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def node_type(self) -> Optional[NodeType]:
        return NodeType.parse(self.type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        """Accepts designer JSON ({id, type, data: {label, config}}) or the flat form."""
        payload = data.get("data") or {}
        label = payload.get("label", data.get("label", ""))
        config = payload.get("config", data.get("config")) or {}
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", "")),
            label=label or "",
            config=dict(config),
            position=dict(data.get("position") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "data": {"label": self.label, "config": dict(self.config)},
            "position": dict(self.position),
        }
#
# ============================================================================
# Class 3.2: Edge
# ============================================================================
#
@dataclass(frozen=True)
class Edge:
    id: str
    source: str
    target: str
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        source = str(data["source"])
        target = str(data["target"])
        return cls(
            id=str(data.get("id") or f"e-{source}-{target}"),
            source=source,
            target=target,
            label=data.get("label"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"id": self.id, "source": self.source, "target": self.target}
        if self.label is not None:
            result["label"] = self.label
        return result
#
# ============================================================================
# Class 3.3: WorkflowGraph
# ============================================================================
#
class WorkflowGraph:
    """
    Read-only node and edge collections of one workflow, in declaration order.

    Custom node kinds are resolved here, once, so execution dispatches on the
    enum instead of re-matching labels. Edge endpoints and acyclicity are
    checked by the scheduler, which needs the whole graph.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge]):
        self._nodes: Dict[str, Node] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise DuplicateNodeId(node.id)
            self._nodes[node.id] = node
        self._edges: Tuple[Edge, ...] = tuple(edges)
        self._custom_kinds: Dict[str, CustomNodeKind] = {
            node.id: resolve_custom_kind(node.label)
            for node in self._nodes.values()
            if node.node_type is NodeType.CUSTOM
        }

    @classmethod
    def from_definition(cls, definition: Dict[str, Any]) -> "WorkflowGraph":
        nodes = [Node.from_dict(item) for item in definition.get("nodes") or []]
        edges = [Edge.from_dict(item) for item in definition.get("edges") or []]
        return cls(nodes, edges)

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def node_ids(self) -> List[str]:
        return list(self._nodes.keys())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def custom_kind(self, node_id: str) -> Optional[CustomNodeKind]:
        """Resolved kind of a custom node; None for non-custom or unknown ids."""
        return self._custom_kinds.get(node_id)

    def to_definition(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [edge.to_dict() for edge in self._edges],
        }
#
#
## End Script
