# ============================================================================
#  File: workflow_service.py
#  Version: 1.0
#  Purpose: Stored workflow templates, run registry, per-complaint
#  serialization and audit logging around the orchestrator
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
import asyncio
import contextlib
import copy
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from loguru import logger

from complaint_workflow.collaborators import WorkflowServices
from complaint_workflow.config_manager import ConfigManager
from complaint_workflow.config_validate import validate_workflow_definition
from complaint_workflow.context import ExecutionContext
from complaint_workflow.error_handling import (
    HandlerFailure,
    InvalidWorkflowDefinition,
    WorkflowConfigurationError,
)
from complaint_workflow.graph_model import CustomNodeKind, WorkflowGraph
from complaint_workflow.orchestrator import WorkflowOrchestrator
from complaint_workflow.records import AuditEntry
from complaint_workflow.scheduler import compute_order
from complaint_workflow.telemetry import configure_telemetry

NOTIFICATION_RESULT_LABELS = {
    "email_notification": "Email notification",
    "sms_notification": "SMS notification",
    "whatsapp_notification": "WhatsApp notification",
}
#
# ============================================================================
# SECTION 2: Run Record
# ============================================================================
# Class 2.1: WorkflowRun
# ============================================================================
#
@dataclass
class WorkflowRun:
    """Tracks one orchestration run as seen by the caller."""

    execution_id: str
    template_name: str
    complaint_id: int
    user_id: Optional[str] = None
    status: str = "pending"  # pending, running, completed, failed
    execution_order: List[str] = None
    node_statuses: Dict[str, str] = None
    results: Dict[str, Any] = None
    pending_tasks: List[Dict[str, Any]] = None
    start_time: datetime = None
    end_time: datetime = None
    error_log: List[str] = None

    def __post_init__(self):
        if self.execution_order is None:
            self.execution_order = []
        if self.node_statuses is None:
            self.node_statuses = {}
        if self.results is None:
            self.results = {}
        if self.pending_tasks is None:
            self.pending_tasks = []
        if self.start_time is None:
            self.start_time = datetime.now(timezone.utc)
        if self.error_log is None:
            self.error_log = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "template_name": self.template_name,
            "complaint_id": self.complaint_id,
            "user_id": self.user_id,
            "status": self.status,
            "execution_order": list(self.execution_order),
            "node_statuses": dict(self.node_statuses),
            "results": self.results,
            "pending_tasks": list(self.pending_tasks),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "error_log": list(self.error_log),
        }
#
# ============================================================================
# SECTION 3: Workflow Service
# ============================================================================
# Class 3.1: WorkflowService
# ============================================================================
# Entry point for callers: validates and stores templates, starts runs,
# serializes runs per complaint, and writes the audit trail. Runs are not
# atomic; a failed run keeps the side effects of its completed nodes.
# ============================================================================
class WorkflowService:
    #
    # =========================================================================
    # Method 3.1.1: __init__
    # =========================================================================
    #
    def __init__(self, config_manager: ConfigManager, services: WorkflowServices):
        self.config_manager = config_manager
        self.services = services
        self.runs: Dict[str, WorkflowRun] = {}
        self.workflow_templates: Dict[str, Dict[str, Any]] = {}
        self._complaint_locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Dict[int, int] = {}
        self._notification_ledgers: Dict[Tuple[int, str], Set[str]] = {}

        settings = self.config_manager.get().orchestrator
        self.checkpoint_dir: Optional[Path] = Path(settings.checkpoint_dir) if settings.checkpoint_dir else None
        if self.checkpoint_dir:
            self.checkpoint_dir.mkdir(parents=True, exist_ok=True)
        if settings.telemetry_csv:
            configure_telemetry(settings.telemetry_csv)

        self._load_workflow_templates()
    #
    # =========================================================================
    # Method 3.1.2: reload_config
    # =========================================================================
    #
    def reload_config(self):
        """Reloads settings and stored workflow templates."""
        logger.info("Configuration changed. Reloading workflow templates...")
        self.config_manager.reload()
        self._load_workflow_templates()
    #
    # =========================================================================
    # Method 3.1.3: _load_workflow_templates
    # =========================================================================
    #
    def _load_workflow_templates(self):
        """Loads stored templates, dropping any that fail validation."""
        self.workflow_templates = {}
        for name, definition in self.config_manager.get_workflow_templates().items():
            report = self.validate_template(definition)
            if not report["valid"]:
                logger.error(f"Workflow template '{name}' is invalid and was not loaded: {report['errors']}")
                continue
            for warning in report["warnings"]:
                logger.warning(f"Workflow template '{name}': {warning}")
            self.workflow_templates[name] = definition
            logger.info(f"Available workflow template: {name}")
    #
    # =========================================================================
    # Method 3.1.4: validate_template
    # =========================================================================
    #
    def validate_template(
        self, definition: Dict[str, Any], strict: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Check a definition the way it must hold before it is saved: schema,
        unique ids, edge endpoints and acyclicity.

        Unknown node types and custom labels that match no handler are
        warnings, or errors in strict mode. strict defaults to the
        strict_node_validation setting.

        Returns:
            Dict with valid, errors, warnings and execution_order
        """
        report = {"valid": False, "errors": [], "warnings": [], "execution_order": []}

        ok, error = validate_workflow_definition(definition)
        if not ok:
            report["errors"].append(error)
            return report

        try:
            graph = WorkflowGraph.from_definition(definition)
            report["execution_order"] = compute_order(graph.nodes, graph.edges)
        except WorkflowConfigurationError as e:
            report["errors"].append(str(e))
            return report

        for node in graph.nodes:
            if node.node_type is None:
                report["warnings"].append(f"Node '{node.id}' has unknown type '{node.type}'")
            elif graph.custom_kind(node.id) is CustomNodeKind.UNKNOWN:
                report["warnings"].append(
                    f"Custom node '{node.id}' label '{node.label}' matches no handler"
                )

        if strict is None:
            strict = self.config_manager.get().orchestrator.strict_node_validation
        if strict:
            report["errors"].extend(report["warnings"])
            report["warnings"] = []

        report["valid"] = not report["errors"]
        return report
    #
    # =========================================================================
    # Method 3.1.5: register_template
    # =========================================================================
    #
    def register_template(self, name: str, definition: Dict[str, Any]) -> List[str]:
        """
        Validate and store a template.

        Returns:
            The template's execution order

        Raises:
            InvalidWorkflowDefinition: The definition cannot be run
        """
        report = self.validate_template(definition)
        if not report["valid"]:
            raise InvalidWorkflowDefinition(
                f"template '{name}': {'; '.join(report['errors'])}", errors=report["errors"]
            )
        self.workflow_templates[name] = copy.deepcopy(definition)
        logger.info(f"Registered workflow template '{name}' ({len(report['execution_order'])} nodes)")
        return report["execution_order"]
    #
    # =========================================================================
    # Method 3.1.6: list_templates
    # =========================================================================
    #
    def list_templates(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": name,
                "display_name": definition.get("name", name),
                "description": definition.get("description", ""),
                "node_count": len(definition.get("nodes") or []),
                "edge_count": len(definition.get("edges") or []),
            }
            for name, definition in self.workflow_templates.items()
        ]
    #
    # =========================================================================
    # Method 3.1.7: _resolve_template
    # =========================================================================
    #
    def _resolve_template(
        self, template: Union[str, Dict[str, Any]]
    ) -> Tuple[str, Dict[str, Any]]:
        if isinstance(template, str):
            if template not in self.workflow_templates:
                raise InvalidWorkflowDefinition(
                    f"Workflow template '{template}' not found. Available: {list(self.workflow_templates.keys())}"
                )
            return template, copy.deepcopy(self.workflow_templates[template])
        return template.get("name", "inline"), copy.deepcopy(template)
    #
    # =========================================================================
    # Method 3.1.8: definition_fingerprint
    # =========================================================================
    #
    @staticmethod
    def definition_fingerprint(definition: Dict[str, Any]) -> str:
        """sha256 of the canonical JSON form; identifies a graph across runs."""
        encoded = json.dumps(definition, sort_keys=True, default=str).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()
    #
    # =========================================================================
    # Async Function 3.1.9: _run_guard
    # =========================================================================
    #
    @contextlib.asynccontextmanager
    async def _run_guard(self, complaint_id: int):
        """Holds the complaint's lock; the lock is dropped once nobody holds or waits on it."""
        if not self.config_manager.get().orchestrator.serialize_runs_per_complaint:
            yield
            return

        lock = self._complaint_locks.setdefault(complaint_id, asyncio.Lock())
        self._lock_users[complaint_id] = self._lock_users.get(complaint_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[complaint_id] -= 1
            if not self._lock_users[complaint_id]:
                del self._lock_users[complaint_id]
                del self._complaint_locks[complaint_id]
    #
    # =========================================================================
    # Async Function 3.1.10: run_workflow
    # =========================================================================
    #
    async def run_workflow(
        self,
        template: Union[str, Dict[str, Any]],
        complaint_id: int,
        user_id: Optional[str] = None,
    ) -> WorkflowRun:
        """
        Run a stored template (by name) or an inline definition for a complaint.

        Fatal errors are recorded on the run and audited, then re-raised.

        Returns:
            WorkflowRun: The finished run record
        """
        template_name, definition = self._resolve_template(template)
        settings = self.config_manager.get()

        async with self._run_guard(complaint_id):
            context = ExecutionContext(complaint_id=complaint_id, user_id=user_id)
            ledger: Optional[Set[str]] = None
            if settings.orchestrator.deduplicate_notifications:
                ledger_key = (complaint_id, self.definition_fingerprint(definition))
                ledger = self._notification_ledgers.setdefault(ledger_key, set())
                context.variables[ExecutionContext.SENT_NOTIFICATIONS] = set(ledger)

            run = WorkflowRun(
                execution_id=context.execution_id,
                template_name=template_name,
                complaint_id=complaint_id,
                user_id=user_id,
            )
            self.runs[run.execution_id] = run

            try:
                orchestrator = WorkflowOrchestrator.from_definition(
                    definition, context, services=self.services, settings=settings
                )
            except WorkflowConfigurationError as e:
                run.status = "failed"
                run.end_time = datetime.now(timezone.utc)
                run.error_log.append(str(e))
                await self._audit(run, "Workflow failed", str(e))
                self.create_run_checkpoint(run)
                raise

            run.execution_order = orchestrator.execution_order
            run.status = "running"
            await self._audit(run, "Workflow started", f"{template_name} ({run.execution_id})")

            try:
                await orchestrator.execute_workflow()
                run.status = "completed"
            except HandlerFailure as e:
                run.status = "failed"
                run.error_log.append(str(e))
                raise
            except Exception as e:
                # Repository errors while loading the complaint
                run.status = "failed"
                run.error_log.append(f"{type(e).__name__}: {e}")
                logger.exception(f"Workflow run {run.execution_id} aborted")
                raise
            finally:
                run.end_time = datetime.now(timezone.utc)
                run.node_statuses = {
                    node_id: status.value
                    for node_id, status in orchestrator.get_all_statuses().items()
                }
                run.results = dict(context.results)
                run.pending_tasks = context.pending_tasks
                if ledger is not None:
                    ledger.update(context.sent_notifications())

                await self._audit_notifications(run)
                if run.status == "completed":
                    await self._audit(run, "Workflow completed", template_name)
                else:
                    await self._audit(run, "Workflow failed", "; ".join(run.error_log))
                self.create_run_checkpoint(run)

        logger.info(f"Workflow '{template_name}' completed for complaint {complaint_id}")
        return run
    #
    # =========================================================================
    # Async Function 3.1.11: _audit
    # =========================================================================
    #
    async def _audit(self, run: WorkflowRun, action: str, new_value: Optional[str] = None):
        """Audit writes never abort a run."""
        entry = AuditEntry(
            action=action,
            complaint_id=run.complaint_id,
            user_id=run.user_id or "system",
            new_value=new_value,
        )
        try:
            await self.services.repository.create_audit_entry(entry)
        except Exception as e:
            logger.error(f"Failed to write audit entry '{action}' for run {run.execution_id}: {e}")
    #
    # =========================================================================
    # Async Function 3.1.12: _audit_notifications
    # =========================================================================
    #
    async def _audit_notifications(self, run: WorkflowRun):
        for node_id in run.execution_order:
            result = run.results.get(node_id)
            if not isinstance(result, dict):
                continue
            label = NOTIFICATION_RESULT_LABELS.get(result.get("type"))
            if label is None:
                continue
            outcome = "sent" if result.get("success") else "failed"
            detail = f"{label} to {result.get('recipient')}"
            if result.get("subject"):
                detail += f" - {result['subject']}"
            await self._audit(run, f"{label} {outcome}", detail)
    #
    # =========================================================================
    # Method 3.1.13: create_run_checkpoint
    # =========================================================================
    #
    def create_run_checkpoint(self, run: WorkflowRun):
        """Writes the run record as JSON when a checkpoint directory is configured."""
        if not self.checkpoint_dir:
            return
        checkpoint_file = self.checkpoint_dir / f"{run.execution_id}_run.json"
        try:
            with open(checkpoint_file, "w", encoding="utf-8") as f:
                json.dump(run.to_dict(), f, indent=2, ensure_ascii=False, default=str)
            logger.debug(f"Run checkpoint written to {checkpoint_file}")
        except OSError as e:
            logger.error(f"Failed to write run checkpoint for {run.execution_id}: {e}")
    #
    # =========================================================================
    # Method 3.1.14: get_run_status
    # =========================================================================
    #
    def get_run_status(self, execution_id: str) -> Optional[Dict[str, Any]]:
        run = self.runs.get(execution_id)
        if run is None:
            return None
        duration = None
        if run.end_time:
            duration = (run.end_time - run.start_time).total_seconds()
        return {
            "execution_id": run.execution_id,
            "template_name": run.template_name,
            "complaint_id": run.complaint_id,
            "status": run.status,
            "node_statuses": dict(run.node_statuses),
            "pending_tasks": len(run.pending_tasks),
            "duration_seconds": duration,
            "errors": list(run.error_log),
        }
    #
    # =========================================================================
    # Method 3.1.15: cleanup_completed_runs
    # =========================================================================
    #
    def cleanup_completed_runs(self, max_age_hours: int = 24) -> int:
        """Forget finished runs older than max_age_hours. Returns how many were removed."""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=max_age_hours)
        stale = [
            execution_id
            for execution_id, run in self.runs.items()
            if run.status in ("completed", "failed") and run.end_time and run.end_time < cutoff
        ]
        for execution_id in stale:
            del self.runs[execution_id]
        if stale:
            logger.info(f"Cleaned up {len(stale)} finished workflow runs")
        return len(stale)
#
#
## End Script
