# ============================================================================
#  File: orchestrator.py
#  Version: 1.0
#  Purpose: Executes a workflow graph against one complaint, node by node
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
import asyncio
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from complaint_workflow.collaborators import WorkflowServices
from complaint_workflow.config_manager import AppSettings
from complaint_workflow.context import ExecutionContext, NodeExecutionStatus
from complaint_workflow.error_handling import HandlerFailure, NodeNotFound
from complaint_workflow.graph_model import (
    CustomNodeKind,
    Edge,
    Node,
    NodeType,
    WorkflowGraph,
)
from complaint_workflow.handlers import (
    EmailNotificationHandler,
    EndHandler,
    HumanTaskHandler,
    NodeHandler,
    SmsNotificationHandler,
    StartHandler,
    TaskStubHandler,
    UnknownCustomHandler,
    WhatsAppNotificationHandler,
)
from complaint_workflow.scheduler import compute_order
#
# ============================================================================
# SECTION 2: Handler Tables
# ============================================================================
# Function 2.1: build_handler_tables
# ============================================================================
#
def build_handler_tables(services: WorkflowServices, settings: AppSettings):
    """
    Instantiate the handler for every NodeType and every CustomNodeKind.

    Returns:
        (type_handlers, custom_handlers) dicts. CUSTOM itself has no entry in
        type_handlers; it is dispatched through custom_handlers.
    """
    type_handlers: Dict[NodeType, NodeHandler] = {
        NodeType.START: StartHandler("start", services, settings),
        NodeType.END: EndHandler("end", services, settings),
        NodeType.TASK: HumanTaskHandler("task", services, settings, task_type="task"),
        NodeType.DECISION: HumanTaskHandler("decision", services, settings, task_type="decision"),
    }
    custom_handlers: Dict[CustomNodeKind, NodeHandler] = {
        CustomNodeKind.EMAIL_NOTIFICATION: EmailNotificationHandler("email_notification", services, settings),
        CustomNodeKind.SMS_NOTIFICATION: SmsNotificationHandler("sms_notification", services, settings),
        CustomNodeKind.WHATSAPP_NOTIFICATION: WhatsAppNotificationHandler("whatsapp_notification", services, settings),
        CustomNodeKind.UNKNOWN: UnknownCustomHandler("custom", services, settings),
    }
    for kind in (
        CustomNodeKind.INITIAL_INSPECTION,
        CustomNodeKind.ASSESSMENT,
        CustomNodeKind.ENFORCEMENT_ACTION,
        CustomNodeKind.RESOLUTION,
    ):
        custom_handlers[kind] = TaskStubHandler(kind.value, services, settings, kind=kind)

    missing = set(CustomNodeKind) - set(custom_handlers)
    if missing:
        raise RuntimeError(f"No handler registered for custom node kinds: {sorted(k.value for k in missing)}")
    return type_handlers, custom_handlers
#
# ============================================================================
# SECTION 3: Orchestrator
# ============================================================================
# Class 3.1: WorkflowOrchestrator
# ============================================================================
# Runs one workflow graph for one complaint. Execution is strictly
# sequential in topological order; a failing node aborts the run and
# nothing that already happened is undone.
# ============================================================================
class WorkflowOrchestrator:
    #
    # =========================================================================
    # Method 3.1.1: __init__
    # =========================================================================
    #
    def __init__(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        context: ExecutionContext,
        *,
        services: WorkflowServices,
        settings: Optional[AppSettings] = None,
    ):
        """
        Build the graph and compute the execution order up front.

        Raises:
            DuplicateNodeId: Two nodes share an id
            NodeNotFound: An edge references a missing node
            CycleDetected: The graph is not acyclic
        """
        self.graph = WorkflowGraph(nodes, edges)
        self.context = context
        self.services = services
        self.settings = settings or AppSettings()

        self._execution_order: List[str] = compute_order(self.graph.nodes, self.graph.edges)
        self._status: Dict[str, NodeExecutionStatus] = {
            node_id: NodeExecutionStatus.PENDING for node_id in self.graph.node_ids
        }
        self._type_handlers, self._custom_handlers = build_handler_tables(services, self.settings)

        logger.debug(
            f"Workflow {context.execution_id} for complaint {context.complaint_id}: "
            f"execution order {self._execution_order}"
        )
    #
    # =========================================================================
    # Method 3.1.2: from_definition
    # =========================================================================
    #
    @classmethod
    def from_definition(
        cls,
        definition: Dict[str, Any],
        context: ExecutionContext,
        *,
        services: WorkflowServices,
        settings: Optional[AppSettings] = None,
    ) -> "WorkflowOrchestrator":
        """Build from designer JSON ({nodes: [...], edges: [...]})."""
        graph = WorkflowGraph.from_definition(definition)
        return cls(graph.nodes, graph.edges, context, services=services, settings=settings)

    @property
    def execution_order(self) -> List[str]:
        return list(self._execution_order)
    #
    # =========================================================================
    # Async Function 3.1.3: execute_workflow
    # =========================================================================
    #
    async def execute_workflow(self) -> Dict[str, Any]:
        """
        Load the complaint once, then run every node in order.

        Returns:
            Dict[str, Any]: The context's results map (node id -> result)

        Raises:
            HandlerFailure: A node failed; later nodes stay pending
        """
        complaint_id = self.context.complaint_id
        logger.info(
            f"Starting workflow execution {self.context.execution_id} for complaint {complaint_id}"
        )

        self.context.complaint = await self.services.repository.get_complaint(complaint_id)
        if self.context.complaint is None:
            logger.warning(f"Complaint {complaint_id} not found; nodes needing it will fail")

        try:
            for node_id in self._execution_order:
                await self.execute_node(node_id)
        except HandlerFailure:
            logger.error(f"Workflow execution failed for complaint {complaint_id}")
            raise

        logger.info(f"Workflow execution completed for complaint {complaint_id}")
        return self.context.results
    #
    # =========================================================================
    # Async Function 3.1.4: execute_node
    # =========================================================================
    #
    async def execute_node(self, node_id: str) -> Any:
        node = self.graph.get_node(node_id)
        if node is None:
            raise NodeNotFound(node_id)

        self._status[node_id] = NodeExecutionStatus.RUNNING
        logger.info(f"Executing node: {node_id} ({node.label})")

        try:
            result = await self._dispatch(node)
        except HandlerFailure:
            self._status[node_id] = NodeExecutionStatus.FAILED
            logger.exception(f"Node {node_id} failed")
            raise
        except Exception as e:
            self._status[node_id] = NodeExecutionStatus.FAILED
            logger.exception(f"Node {node_id} failed")
            raise HandlerFailure(node_id, str(e) or type(e).__name__) from e

        self.context.results[node_id] = result
        self._status[node_id] = NodeExecutionStatus.COMPLETED
        logger.debug(f"Node {node_id} completed with result: {result}")
        return result
    #
    # =========================================================================
    # Async Function 3.1.5: _dispatch
    # =========================================================================
    #
    async def _dispatch(self, node: Node) -> Any:
        node_type = node.node_type
        if node_type is None:
            logger.info(f"Unknown node type: {node.type}, skipping execution")
            return {"status": "skipped", "reason": "unknown_node_type"}

        if node_type is NodeType.CUSTOM:
            handler = self._custom_handlers[self.graph.custom_kind(node.id)]
        else:
            handler = self._type_handlers[node_type]

        timeout = self.settings.orchestrator.handler_timeout_seconds
        if timeout is None:
            return await handler.run(node, self.context)

        try:
            async with asyncio.timeout(timeout):
                return await handler.run(node, self.context)
        except TimeoutError:
            raise HandlerFailure(node.id, f"handler timed out after {timeout}s")
    #
    # =========================================================================
    # Method 3.1.6: get_node_status
    # =========================================================================
    #
    def get_node_status(self, node_id: str) -> NodeExecutionStatus:
        if node_id not in self._status:
            raise NodeNotFound(node_id)
        return self._status[node_id]
    #
    # =========================================================================
    # Method 3.1.7: get_all_statuses
    # =========================================================================
    #
    def get_all_statuses(self) -> Dict[str, NodeExecutionStatus]:
        return dict(self._status)
#
#
## End Script
