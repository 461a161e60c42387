# ============================================================================
#  File: handler_base.py
#  Version: 1.0
#  Purpose: Base class for all workflow node handlers
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from complaint_workflow.collaborators import WorkflowServices
from complaint_workflow.config_manager import AppSettings
from complaint_workflow.context import ExecutionContext
from complaint_workflow.graph_model import Node


#
# ============================================================================
# SECTION 2: NodeHandler Abstract Class
# ============================================================================
# Class 2.1: NodeHandler
# ============================================================================
#
class NodeHandler(ABC):
    """
    Behaviour invoked for one kind of node.

    Handlers are constructed once per orchestrator and shared by every node
    of their kind in that run. Returning a result marks the node completed;
    raising marks it failed and aborts the run.
    """

    #
    # ========================================================================
    # Function 2.1: __init__
    # ========================================================================
    #
    def __init__(
        self,
        name: str,
        services: WorkflowServices,
        settings: Optional[AppSettings] = None,
    ):
        """
        Args:
            name: Handler name used in log lines and telemetry
            services: Repository and sender collaborators
            settings: Application settings; defaults apply when omitted
        """
        self.name = name
        self.services = services
        self.settings = settings or AppSettings()

    #
    # ========================================================================
    # Async Function 2.2: run
    # ========================================================================
    #
    @abstractmethod
    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        """Execute the node against the context and return its result."""

    #
    # ========================================================================
    # Function 2.3: timestamp
    # ========================================================================
    #
    @staticmethod
    def timestamp() -> str:
        return datetime.now(timezone.utc).isoformat()
#
#
## End Script
