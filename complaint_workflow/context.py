# ============================================================================
#  File: context.py
#  Purpose: Per-run mutable state threaded through node handlers
# ============================================================================
# SECTION 1: Imports
# ============================================================================
#
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from complaint_workflow.records import ComplaintSnapshot
#
# ============================================================================
# SECTION 2: Status Enum
# ============================================================================
# Class 2.1: NodeExecutionStatus
# ============================================================================
#
class NodeExecutionStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
#
# ============================================================================
# SECTION 3: Execution Context
# ============================================================================
# Class 3.1: ExecutionContext
# ============================================================================
#
@dataclass
class ExecutionContext:
    """
    State owned by exactly one orchestration run.

    The caller builds it, the orchestrator loads `complaint` once and fills
    `results`, handlers may read and write `variables`, and the caller reads
    everything back afterwards. Never shared between runs.
    """

    complaint_id: int
    execution_id: str = None
    user_id: Optional[str] = None
    complaint: Optional[ComplaintSnapshot] = None
    variables: Dict[str, Any] = None
    results: Dict[str, Any] = None

    def __post_init__(self):
        if self.execution_id is None:
            self.execution_id = uuid.uuid4().hex
        if self.variables is None:
            self.variables = {}
        if self.results is None:
            self.results = {}

    # Keys in `variables` with engine-defined meaning
    PENDING_TASKS = "pending_tasks"
    SENT_NOTIFICATIONS = "sent_notifications"

    def add_pending_task(self, task: Dict[str, Any]) -> None:
        self.variables.setdefault(self.PENDING_TASKS, []).append(dict(task))

    @property
    def pending_tasks(self) -> List[Dict[str, Any]]:
        return list(self.variables.get(self.PENDING_TASKS, []))

    def sent_notifications(self) -> Set[str]:
        ledger = self.variables.get(self.SENT_NOTIFICATIONS)
        if not isinstance(ledger, set):
            ledger = set(ledger or ())
            self.variables[self.SENT_NOTIFICATIONS] = ledger
        return ledger

    def was_notification_sent(self, node_id: str) -> bool:
        return node_id in self.variables.get(self.SENT_NOTIFICATIONS, ())

    def mark_notification_sent(self, node_id: str) -> None:
        self.sent_notifications().add(node_id)
#
#
## End Script
