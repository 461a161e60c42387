"""Shared fixtures for workflow engine tests."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
import yaml

from complaint_workflow.collaborators import InMemoryComplaintStore, WorkflowServices
from complaint_workflow.config_manager import ConfigManager
from complaint_workflow.context import ExecutionContext
from complaint_workflow.records import ComplaintSnapshot, UserRecord


COMPLAINT_PK = 7


@pytest.fixture
def complaint():
    """A complaint with complainant contact details and an assigned inspector."""
    return ComplaintSnapshot(
        id=COMPLAINT_PK,
        complaint_id="AQ-2024-007",
        status="inspection",
        priority="high",
        problem_types=["smoke", "odor"],
        complainant_first_name="Jordan",
        complainant_last_name="Lee",
        complainant_email="jordan.lee@example.com",
        complainant_phone="+13605550100",
        source_address="123 Mill Rd",
        other_description="Black smoke every evening",
        assigned_to="u-inspector",
        created_at=datetime(2024, 3, 5, 9, 30, tzinfo=timezone.utc),
        updated_at=datetime(2024, 3, 6, 14, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def users():
    return [
        UserRecord(
            id="u-inspector",
            email="inspector@orcaa.org",
            first_name="Sam",
            last_name="Field",
            roles=["field_staff"],
            mobile_number="+13605550111",
            whatsapp_number="+13605550112",
        ),
        UserRecord(
            id="u-inactive",
            email="retired@orcaa.org",
            first_name="Pat",
            last_name="Gone",
            roles=["supervisor"],
            is_active=False,
        ),
        UserRecord(
            id="u-supervisor",
            email="supervisor@orcaa.org",
            first_name="Alex",
            last_name="Boss",
            roles=["supervisor"],
            phone="+13605550122",
            enable_sms_notifications=False,
        ),
    ]


@pytest.fixture
def store(complaint, users):
    return InMemoryComplaintStore(
        complaints=[complaint],
        users=users,
        role_actions={
            "initial_inspection": ["field_staff"],
            "assessment": ["supervisor"],
        },
    )


@pytest.fixture
def senders():
    """Sender mocks that report successful delivery."""
    email_sender = AsyncMock()
    email_sender.send_email = AsyncMock(return_value=True)
    sms_sender = AsyncMock()
    sms_sender.send_sms = AsyncMock(return_value=True)
    whatsapp_sender = AsyncMock()
    whatsapp_sender.send_whatsapp = AsyncMock(return_value=True)
    return email_sender, sms_sender, whatsapp_sender


@pytest.fixture
def services(store, senders):
    email_sender, sms_sender, whatsapp_sender = senders
    return WorkflowServices(
        repository=store,
        email_sender=email_sender,
        sms_sender=sms_sender,
        whatsapp_sender=whatsapp_sender,
    )


@pytest.fixture
def make_context():
    def _make(complaint_id=COMPLAINT_PK, **kwargs):
        return ExecutionContext(complaint_id=complaint_id, **kwargs)
    return _make


@pytest.fixture
def linear_definition():
    """start -> email -> task -> end, declared out of order."""
    return {
        "nodes": [
            {"id": "4", "type": "end", "data": {"label": "End"}},
            {"id": "2", "type": "custom", "data": {
                "label": "Email Notification",
                "config": {"recipientType": "complainant"},
            }},
            {"id": "1", "type": "start", "data": {"label": "Start"}},
            {"id": "3", "type": "task", "data": {"label": "Site visit"}},
        ],
        "edges": [
            {"id": "e1", "source": "1", "target": "2"},
            {"id": "e2", "source": "2", "target": "3"},
            {"id": "e3", "source": "3", "target": "4"},
        ],
    }


@pytest.fixture
def write_settings(tmp_path):
    """Write app settings (and optionally templates) to tmp files; returns a ConfigManager factory."""
    def _write(orchestrator=None, notifications=None, workflows=None):
        settings = {
            "orchestrator": orchestrator or {},
            "notifications": notifications or {},
        }
        config_path = tmp_path / "app_settings.json"
        config_path.write_text(json.dumps(settings), encoding="utf-8")
        workflows_path = tmp_path / "workflows.yaml"
        workflows_path.write_text(yaml.safe_dump(workflows or {}), encoding="utf-8")
        return ConfigManager(
            config_path=str(config_path),
            workflows_path=str(workflows_path),
            templates_dir=str(tmp_path),
        )
    return _write
