"""Tests for settings loading and JSON-schema validation."""

import json

import pytest

from complaint_workflow.config_manager import ConfigManager
from complaint_workflow.config_validate import (
    get_validation_errors,
    validate_config,
    validate_workflow_definition,
)
from complaint_workflow.error_handling import ConfigurationError


class TestConfigManager:

    def test_defaults_fill_missing_sections(self, write_settings):
        settings = write_settings(notifications={"organization_name": "Test Agency"}).get()

        assert settings.notifications.organization_name == "Test Agency"
        assert settings.notifications.staff_display_name == "ORCAA Staff"
        assert settings.orchestrator.handler_timeout_seconds is None
        assert settings.orchestrator.serialize_runs_per_complaint is True

    def test_missing_settings_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager(config_path=str(tmp_path / "nope.json"))

    def test_invalid_settings_rejected(self, tmp_path):
        path = tmp_path / "app_settings.json"
        path.write_text(json.dumps({"orchestrator": {"handler_timeout_seconds": "soon"}}), encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(config_path=str(path), workflows_path=str(tmp_path / "none.yaml"))

        assert "E002" in str(exc_info.value)

    def test_missing_workflows_file_is_not_fatal(self, tmp_path):
        path = tmp_path / "app_settings.json"
        path.write_text("{}", encoding="utf-8")

        manager = ConfigManager(config_path=str(path), workflows_path=str(tmp_path / "none.yaml"))

        assert manager.get_workflow_templates() == {}

    def test_save_round_trip(self, write_settings):
        manager = write_settings()

        assert manager.save({"orchestrator": {"handler_timeout_seconds": 2.5}}) is True
        assert manager.get().orchestrator.handler_timeout_seconds == 2.5

        manager.reload()
        assert manager.get().orchestrator.handler_timeout_seconds == 2.5

    def test_save_rejects_invalid(self, write_settings):
        manager = write_settings()

        assert manager.save({"orchestrator": {"strict_node_validation": "maybe"}}) is False
        assert manager.get().orchestrator.strict_node_validation is False

    def test_template_content(self, tmp_path, write_settings):
        manager = write_settings()
        (tmp_path / "wrapper.html").write_text("<p>{{updateDescription}}</p>", encoding="utf-8")

        assert manager.get_template_content("wrapper.html") == "<p>{{updateDescription}}</p>"
        assert manager.get_template_content("missing.html") is None


class TestShippedConfiguration:

    def test_shipped_settings_match_schema(self):
        ok, error = validate_config()

        assert ok, error

    def test_shipped_templates_are_valid(self):
        manager = ConfigManager()

        templates = manager.get_workflow_templates()
        assert {"complaint_acknowledgement", "standard_air_quality"} <= set(templates)
        for definition in templates.values():
            ok, error = validate_workflow_definition(definition)
            assert ok, error

    def test_decision_label_keeps_question_mark(self):
        nodes = ConfigManager().get_workflow_templates()["standard_air_quality"]["nodes"]

        decision = next(node for node in nodes if node["type"] == "decision")
        assert decision["data"]["label"] == "Violation Found?"


class TestWorkflowSchema:

    def test_node_without_id(self):
        ok, error = validate_workflow_definition({"nodes": [{"type": "start"}], "edges": []})

        assert not ok
        assert "nodes.0" in error

    def test_edge_without_target(self):
        errors = get_validation_errors({"nodes": [{"id": "a", "type": "start"}], "edges": [{"source": "a"}]})

        assert len(errors) == 1
        assert errors[0]["path"] == ["edges", 0]

    def test_non_dict_definition(self):
        errors = get_validation_errors(["nodes"])

        assert errors[0]["message"].startswith("Expected dict")
