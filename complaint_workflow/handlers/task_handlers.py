# ============================================================================
#  File: task_handlers.py
#  Version: 1.0
#  Purpose: Handlers for nodes that hand work to people
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from typing import Any, Dict, Optional

from loguru import logger

from complaint_workflow.collaborators import WorkflowServices
from complaint_workflow.config_manager import AppSettings
from complaint_workflow.context import ExecutionContext
from complaint_workflow.graph_model import CustomNodeKind, Node
from complaint_workflow.handlers.handler_base import NodeHandler

# Result messages for the label-selected task stubs
TASK_STUB_MESSAGES = {
    CustomNodeKind.INITIAL_INSPECTION: "Initial inspection task will be assigned to field staff",
    CustomNodeKind.ASSESSMENT: "Assessment task will be assigned to supervisor",
    CustomNodeKind.ENFORCEMENT_ACTION: "Enforcement action task will be assigned",
    CustomNodeKind.RESOLUTION: "Resolution task will be assigned",
}
#
# ============================================================================
# SECTION 2: Human Task Handlers
# ============================================================================
# Class 2.1: HumanTaskHandler
# ============================================================================
#
class HumanTaskHandler(NodeHandler):
    """
    `task` and `decision` nodes. The engine only describes the task; the
    persisted task row is created by the caller from the result or from
    `context.pending_tasks`.
    """

    def __init__(
        self,
        name: str,
        services: WorkflowServices,
        settings: Optional[AppSettings] = None,
        *,
        task_type: str = "task",
    ):
        super().__init__(name, services, settings)
        self.task_type = task_type

    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        if self.task_type == "decision":
            status = "decision_created"
            message = "Decision task will be created for user input"
        else:
            status = "task_created"
            message = "Workflow task will be created for user assignment"

        context.add_pending_task({
            "nodeId": node.id,
            "taskType": self.task_type,
            "label": node.label,
            "config": dict(node.config),
        })
        return {
            "type": self.task_type,
            "label": node.label,
            "status": status,
            "message": message,
        }
#
# ============================================================================
# Class 2.2: TaskStubHandler
# ============================================================================
#
class TaskStubHandler(NodeHandler):
    """Custom nodes labelled as inspection / assessment / enforcement / resolution."""

    def __init__(
        self,
        name: str,
        services: WorkflowServices,
        settings: Optional[AppSettings] = None,
        *,
        kind: CustomNodeKind,
    ):
        if kind not in TASK_STUB_MESSAGES:
            raise ValueError(f"{kind} is not a task stub kind")
        super().__init__(name, services, settings)
        self.kind = kind

    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        context.add_pending_task({
            "nodeId": node.id,
            "taskType": self.kind.value,
            "label": node.label,
            "config": dict(node.config),
        })
        return {
            "type": self.kind.value,
            "status": "notification_sent",
            "message": TASK_STUB_MESSAGES[self.kind],
        }
#
# ============================================================================
# Class 2.3: UnknownCustomHandler
# ============================================================================
#
class UnknownCustomHandler(NodeHandler):
    """Designer graphs may carry experimental labels; they complete as no-ops."""

    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        label = node.label.lower()
        logger.info(f"Custom node '{node.id}' with unknown label: {label}")
        return {"status": "completed", "nodeType": "custom", "label": label}
#
#
## End Script
