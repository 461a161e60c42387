"""Workflow orchestration engine for environmental complaint processing."""

from .collaborators import (
    ComplaintRepository,
    EmailSender,
    InMemoryComplaintStore,
    SmsSender,
    WhatsAppSender,
    WorkflowServices,
)
from .config_manager import AppSettings, ConfigManager
from .context import ExecutionContext, NodeExecutionStatus
from .error_handling import (
    CycleDetected,
    DuplicateNodeId,
    HandlerFailure,
    InvalidWorkflowDefinition,
    NodeNotFound,
    WorkflowConfigurationError,
    WorkflowError,
)
from .graph_model import CustomNodeKind, Edge, Node, NodeType, WorkflowGraph, resolve_custom_kind
from .orchestrator import WorkflowOrchestrator
from .records import AuditEntry, ComplaintSnapshot, UserRecord
from .scheduler import compute_order
from .templating import build_template_variables, substitute_variables
from .workflow_service import WorkflowRun, WorkflowService

__all__ = [
    "AppSettings",
    "AuditEntry",
    "ComplaintRepository",
    "ComplaintSnapshot",
    "ConfigManager",
    "CustomNodeKind",
    "CycleDetected",
    "DuplicateNodeId",
    "Edge",
    "EmailSender",
    "ExecutionContext",
    "HandlerFailure",
    "InMemoryComplaintStore",
    "InvalidWorkflowDefinition",
    "Node",
    "NodeExecutionStatus",
    "NodeNotFound",
    "NodeType",
    "SmsSender",
    "UserRecord",
    "WhatsAppSender",
    "WorkflowConfigurationError",
    "WorkflowError",
    "WorkflowGraph",
    "WorkflowOrchestrator",
    "WorkflowRun",
    "WorkflowServices",
    "WorkflowService",
    "build_template_variables",
    "compute_order",
    "resolve_custom_kind",
    "substitute_variables",
]
