"""Tests for template validation, run bookkeeping, and per-complaint behaviour."""

import asyncio
import copy
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import yaml

from complaint_workflow.config_manager import ConfigManager
from complaint_workflow.error_handling import CycleDetected, HandlerFailure, InvalidWorkflowDefinition
from complaint_workflow.workflow_service import WorkflowService

COMPLAINT_PK = 7


LENIENT_ISSUES = {
    "nodes": [
        {"id": "s", "type": "start"},
        {"id": "h", "type": "webhook"},
        {"id": "c", "type": "custom", "data": {"label": "Bake a cake"}},
    ],
    "edges": [{"source": "s", "target": "h"}, {"source": "h", "target": "c"}],
}


class TestValidateTemplate:

    def test_lenient_mode_reports_warnings(self, write_settings, services):
        service = WorkflowService(write_settings(), services)

        report = service.validate_template(LENIENT_ISSUES)

        assert report["valid"] is True
        assert report["errors"] == []
        assert len(report["warnings"]) == 2
        assert report["execution_order"] == ["s", "h", "c"]

    def test_strict_mode_turns_warnings_into_errors(self, write_settings, services):
        service = WorkflowService(write_settings(orchestrator={"strict_node_validation": True}), services)

        report = service.validate_template(LENIENT_ISSUES)

        assert report["valid"] is False
        assert len(report["errors"]) == 2
        assert report["warnings"] == []

    def test_schema_violation(self, write_settings, services):
        service = WorkflowService(write_settings(), services)

        report = service.validate_template({"nodes": [], "edges": []})

        assert report["valid"] is False
        assert "Workflow definition error" in report["errors"][0]

    def test_cycle_reported(self, write_settings, services):
        service = WorkflowService(write_settings(), services)

        report = service.validate_template({
            "nodes": [{"id": "a", "type": "task"}, {"id": "b", "type": "task"}],
            "edges": [{"source": "a", "target": "b"}, {"source": "b", "target": "a"}],
        })

        assert report["valid"] is False
        assert "E101" in report["errors"][0]

    def test_explicit_strict_leaves_settings_untouched(self, write_settings, services):
        manager = write_settings()
        service = WorkflowService(manager, services)

        report = service.validate_template(LENIENT_ISSUES, strict=True)

        assert report["valid"] is False
        assert manager.get().orchestrator.strict_node_validation is False
        assert service.validate_template(LENIENT_ISSUES)["valid"] is True

    def test_explicit_lenient_overrides_strict_setting(self, write_settings, services):
        service = WorkflowService(write_settings(orchestrator={"strict_node_validation": True}), services)

        report = service.validate_template(LENIENT_ISSUES, strict=False)

        assert report["valid"] is True
        assert len(report["warnings"]) == 2


class TestTemplates:

    def test_register_rejects_cycle(self, write_settings, services):
        service = WorkflowService(write_settings(), services)

        with pytest.raises(InvalidWorkflowDefinition) as exc_info:
            service.register_template("loop", {
                "nodes": [{"id": "a", "type": "task"}],
                "edges": [{"source": "a", "target": "a"}],
            })

        assert exc_info.value.errors
        assert "loop" not in service.workflow_templates

    def test_register_returns_order(self, write_settings, services, linear_definition):
        service = WorkflowService(write_settings(), services)

        assert service.register_template("linear", linear_definition) == ["1", "2", "3", "4"]
        assert [t["name"] for t in service.list_templates()] == ["linear"]

    def test_stored_templates_loaded_and_invalid_dropped(self, write_settings, services, linear_definition):
        manager = write_settings(workflows={
            "good": dict(linear_definition, name="Good One", description="Linear"),
            "bad": {"nodes": [{"id": "a", "type": "task"}], "edges": [{"source": "a", "target": "x"}]},
        })
        service = WorkflowService(manager, services)

        templates = service.list_templates()

        assert [t["name"] for t in templates] == ["good"]
        assert templates[0]["display_name"] == "Good One"
        assert templates[0]["node_count"] == 4

    def test_reload_config_picks_up_edited_templates(self, tmp_path, write_settings, services, linear_definition):
        service = WorkflowService(write_settings(), services)
        assert service.list_templates() == []

        (tmp_path / "workflows.yaml").write_text(yaml.safe_dump({"linear": linear_definition}), encoding="utf-8")
        service.reload_config()

        assert [t["name"] for t in service.list_templates()] == ["linear"]

    @pytest.mark.asyncio
    async def test_unknown_template_name(self, write_settings, services):
        service = WorkflowService(write_settings(), services)

        with pytest.raises(InvalidWorkflowDefinition):
            await service.run_workflow("does_not_exist", COMPLAINT_PK)


class TestRunWorkflow:

    @pytest.mark.asyncio
    async def test_successful_run_is_audited(self, write_settings, services, store, linear_definition):
        service = WorkflowService(write_settings(), services)

        run = await service.run_workflow(linear_definition, COMPLAINT_PK, user_id="u-admin")

        assert run.status == "completed"
        assert run.template_name == "inline"
        assert run.execution_order == ["1", "2", "3", "4"]
        assert set(run.node_statuses.values()) == {"completed"}
        assert [task["nodeId"] for task in run.pending_tasks] == ["3"]
        assert [entry.action for entry in store.audit_log] == [
            "Workflow started",
            "Email notification sent",
            "Workflow completed",
        ]
        assert all(entry.user_id == "u-admin" for entry in store.audit_log)
        assert "jordan.lee@example.com" in store.audit_log[1].new_value

        status = service.get_run_status(run.execution_id)
        assert status["status"] == "completed"
        assert status["pending_tasks"] == 1
        assert status["duration_seconds"] is not None

    @pytest.mark.asyncio
    async def test_failed_run_recorded_and_reraised(self, write_settings, services, store, linear_definition):
        service = WorkflowService(write_settings(), services)

        with pytest.raises(HandlerFailure):
            await service.run_workflow(linear_definition, 999)

        (run,) = service.runs.values()
        assert run.status == "failed"
        assert run.node_statuses == {"1": "completed", "2": "failed", "3": "pending", "4": "pending"}
        assert run.error_log
        assert store.audit_log[-1].action == "Workflow failed"
        assert store.audit_log[-1].user_id == "system"

    @pytest.mark.asyncio
    async def test_invalid_inline_definition_recorded(self, write_settings, services, store):
        service = WorkflowService(write_settings(), services)

        with pytest.raises(CycleDetected):
            await service.run_workflow(
                {"nodes": [{"id": "a", "type": "task"}], "edges": [{"source": "a", "target": "a"}]},
                COMPLAINT_PK,
            )

        (run,) = service.runs.values()
        assert run.status == "failed"
        assert [entry.action for entry in store.audit_log] == ["Workflow failed"]

    @pytest.mark.asyncio
    async def test_audit_failure_does_not_abort_run(self, write_settings, services, store, linear_definition):
        store.create_audit_entry = AsyncMock(side_effect=RuntimeError("audit table locked"))
        service = WorkflowService(write_settings(), services)

        run = await service.run_workflow(linear_definition, COMPLAINT_PK)

        assert run.status == "completed"

    @pytest.mark.asyncio
    async def test_rerun_does_not_resend_notifications(self, write_settings, services, senders, linear_definition):
        service = WorkflowService(write_settings(), services)

        await service.run_workflow(linear_definition, COMPLAINT_PK)
        second = await service.run_workflow(linear_definition, COMPLAINT_PK)

        senders[0].send_email.assert_awaited_once()
        assert second.results["2"] == {"status": "skipped", "reason": "already_sent"}

    @pytest.mark.asyncio
    async def test_rerun_resends_when_deduplication_disabled(
        self, write_settings, services, senders, linear_definition
    ):
        service = WorkflowService(write_settings(orchestrator={"deduplicate_notifications": False}), services)

        await service.run_workflow(linear_definition, COMPLAINT_PK)
        await service.run_workflow(linear_definition, COMPLAINT_PK)

        assert senders[0].send_email.await_count == 2

    @pytest.mark.asyncio
    async def test_other_graph_for_same_complaint_still_sends(
        self, write_settings, services, senders, linear_definition
    ):
        # Same node id "2", different recipient
        other = copy.deepcopy(linear_definition)
        other["nodes"][1]["data"]["config"] = {"recipientType": "assigned_staff"}
        service = WorkflowService(write_settings(), services)

        await service.run_workflow(linear_definition, COMPLAINT_PK)
        second = await service.run_workflow(other, COMPLAINT_PK)

        assert senders[0].send_email.await_count == 2
        assert second.results["2"]["success"] is True
        assert second.results["2"]["recipient"] == "inspector@orcaa.org"

    def test_fingerprint_ignores_key_order(self, linear_definition):
        reordered = dict(reversed(list(linear_definition.items())))
        other = copy.deepcopy(linear_definition)
        other["edges"].pop()

        fingerprint = WorkflowService.definition_fingerprint(linear_definition)
        assert WorkflowService.definition_fingerprint(reordered) == fingerprint
        assert WorkflowService.definition_fingerprint(other) != fingerprint

    @pytest.mark.asyncio
    async def test_failed_send_is_retried_on_rerun(self, write_settings, services, senders, linear_definition):
        senders[0].send_email = AsyncMock(side_effect=[False, True])
        service = WorkflowService(write_settings(), services)

        first = await service.run_workflow(linear_definition, COMPLAINT_PK)
        second = await service.run_workflow(linear_definition, COMPLAINT_PK)

        assert first.results["2"]["success"] is False
        assert second.results["2"]["success"] is True


class TestConcurrency:

    @staticmethod
    def _tracking_sender(senders):
        state = {"active": 0, "peak": 0}

        async def send(*args, **kwargs):
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
            await asyncio.sleep(0.05)
            state["active"] -= 1
            return True

        senders[0].send_email = AsyncMock(side_effect=send)
        return state

    @pytest.mark.asyncio
    async def test_runs_for_same_complaint_are_serialized(self, write_settings, services, senders, linear_definition):
        state = self._tracking_sender(senders)
        service = WorkflowService(write_settings(), services)

        first, second = await asyncio.gather(
            service.run_workflow(linear_definition, COMPLAINT_PK),
            service.run_workflow(linear_definition, COMPLAINT_PK),
        )

        assert state["peak"] == 1
        assert senders[0].send_email.await_count == 1
        assert first.status == second.status == "completed"

    @pytest.mark.asyncio
    async def test_unserialized_runs_overlap(self, write_settings, services, senders, linear_definition):
        state = self._tracking_sender(senders)
        service = WorkflowService(write_settings(orchestrator={"serialize_runs_per_complaint": False}), services)

        await asyncio.gather(
            service.run_workflow(linear_definition, COMPLAINT_PK),
            service.run_workflow(linear_definition, COMPLAINT_PK),
        )

        assert state["peak"] == 2

    @pytest.mark.asyncio
    async def test_idle_complaint_locks_are_discarded(self, write_settings, services, senders, linear_definition):
        service = WorkflowService(write_settings(), services)
        held = []

        async def send(*args, **kwargs):
            held.append(COMPLAINT_PK in service._complaint_locks)
            return True

        senders[0].send_email = AsyncMock(side_effect=send)

        await asyncio.gather(
            service.run_workflow(linear_definition, COMPLAINT_PK),
            service.run_workflow(linear_definition, COMPLAINT_PK),
        )
        with pytest.raises(HandlerFailure):
            await service.run_workflow(linear_definition, 999)

        assert held == [True]
        assert service._complaint_locks == {}
        assert service._lock_users == {}


class TestRunBookkeeping:

    @pytest.mark.asyncio
    async def test_checkpoint_written(self, tmp_path, write_settings, services, linear_definition):
        checkpoint_dir = tmp_path / "runs"
        service = WorkflowService(write_settings(orchestrator={"checkpoint_dir": str(checkpoint_dir)}), services)

        run = await service.run_workflow(linear_definition, COMPLAINT_PK)

        data = json.loads((checkpoint_dir / f"{run.execution_id}_run.json").read_text(encoding="utf-8"))
        assert data["status"] == "completed"
        assert data["execution_order"] == ["1", "2", "3", "4"]

    @pytest.mark.asyncio
    async def test_cleanup_removes_old_finished_runs(self, write_settings, services, linear_definition):
        service = WorkflowService(write_settings(), services)
        old = await service.run_workflow(linear_definition, COMPLAINT_PK)
        recent = await service.run_workflow(linear_definition, COMPLAINT_PK)
        old.end_time = datetime.now(timezone.utc) - timedelta(hours=48)

        removed = service.cleanup_completed_runs(max_age_hours=24)

        assert removed == 1
        assert service.get_run_status(old.execution_id) is None
        assert service.get_run_status(recent.execution_id) is not None


class TestShippedTemplates:

    @pytest.mark.asyncio
    async def test_standard_air_quality_template(self, services, senders, store):
        service = WorkflowService(ConfigManager(), services)

        run = await service.run_workflow("standard_air_quality", COMPLAINT_PK)

        assert run.execution_order == ["1", "2", "3", "4", "5", "6", "7", "8"]
        assert run.results["2"]["subject"] == "Complaint AQ-2024-007 received"
        assert run.results["4"]["recipient"] == "inspector@orcaa.org"
        assert run.results["5"]["status"] == "decision_created"
        assert [task["nodeId"] for task in run.pending_tasks] == ["3", "5", "6", "7"]
        assert senders[0].send_email.await_count == 2
