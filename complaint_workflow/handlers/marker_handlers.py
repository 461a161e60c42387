# ============================================================================
#  File: marker_handlers.py
#  Purpose: Start / end markers; no side effects
# ============================================================================
from typing import Any, Dict

from complaint_workflow.context import ExecutionContext
from complaint_workflow.graph_model import Node
from complaint_workflow.handlers.handler_base import NodeHandler


class StartHandler(NodeHandler):
    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        return {
            "type": "start",
            "timestamp": self.timestamp(),
            "complaintId": context.complaint_id,
        }


class EndHandler(NodeHandler):
    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        return {
            "type": "end",
            "timestamp": self.timestamp(),
            "complaintId": context.complaint_id,
        }
