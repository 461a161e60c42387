"""
╔═════════════════════════════════════════════════════════════════════════════╗
║                  CONFIGURATION MANAGER SCRIPT - ver. 02.00                  ║
║ Purpose: Settings and workflow template loading for the workflow engine     ║
║ File:    config_manager.py                                                  ║
╠═════════════════════════════════════════════════════════════════════════════╣
║ Section 1: Initial Settings and Imports                                     ║
║ Purpose:   Configure initial settings, imports, and script variables        ║
╚═════════════════════════════════════════════════════════════════════════════╝
"""
import os
import json
import threading
from typing import Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from complaint_workflow.config import (
    DEFAULT_ROLE_ACTION_ID,
    ORGANIZATION_NAME,
    PROVIDER_REQUEST_TIMEOUT,
    STAFF_DISPLAY_NAME,
)
from complaint_workflow.error_handling import ConfigurationError

# --- PATH CORRECTION ---
# __file__ -> .../<project>/complaint_workflow/config_manager.py
# two dirnames up -> .../<project>
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

CONFIG_DIR = os.path.join(PROJECT_ROOT, "config")
CONFIG_PATH = os.path.join(CONFIG_DIR, "app_settings.json")
WORKFLOWS_PATH = os.path.join(CONFIG_DIR, "workflows.yaml")
TEMPLATES_DIR = os.path.join(CONFIG_DIR, "templates")


_config_lock = threading.Lock()
#
"""
╔═════════════════════════════════════════════════════════════════════════════╗
║ Section 2: Pydantic Configuration Models                                    ║
║ Purpose:   Define the data structure and validation for app settings        ║
╠═════════════════════════════════════════════════════════════════════════════╣
║ Class 2.1: OrchestratorSettings                                             ║
║ Purpose:   Execution behaviour of workflow runs                             ║
╚═════════════════════════════════════════════════════════════════════════════╝
"""
class OrchestratorSettings(BaseModel):
    handler_timeout_seconds: Optional[float] = None
    serialize_runs_per_complaint: bool = True
    deduplicate_notifications: bool = True
    strict_node_validation: bool = False
    checkpoint_dir: str = ''
    telemetry_csv: str = ''
# End class
"""
╔═════════════════════════════════════════════════════════════════════════════╗
║ Class 2.2: NotificationSettings                                             ║
║ Purpose:   Sender identity and provider request settings                    ║
╚═════════════════════════════════════════════════════════════════════════════╝
"""
class NotificationSettings(BaseModel):
    organization_name: str = ORGANIZATION_NAME
    staff_display_name: str = STAFF_DISPLAY_NAME
    email_from_address: str = ''
    email_from_name: str = ORGANIZATION_NAME
    email_template_file: str = 'email_template.html'
    default_role_action_id: str = DEFAULT_ROLE_ACTION_ID
    request_timeout_seconds: float = PROVIDER_REQUEST_TIMEOUT
# End class
"""
╔═════════════════════════════════════════════════════════════════════════════╗
║ Class 2.3: AppSettings                                                      ║
║ Purpose:   Root settings model                                              ║
╚═════════════════════════════════════════════════════════════════════════════╝
"""
class AppSettings(BaseModel):
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
# End class
#
"""
╔═════════════════════════════════════════════════════════════════════════════╗
║ Class 2.4: ConfigManager                                                    ║
║ Purpose:   Manages loading, validation, and saving of the app config        ║
╚═════════════════════════════════════════════════════════════════════════════╝
"""
class ConfigManager:
    """
    Loads the application settings (JSON, validated by pydantic) and the
    stored workflow templates (YAML). Thread-safe.
    """
    def __init__(
        self,
        config_path: Optional[str] = None,
        workflows_path: Optional[str] = None,
        templates_dir: Optional[str] = None,
    ):
        self.config_path = config_path or CONFIG_PATH
        self.workflows_path = workflows_path or WORKFLOWS_PATH
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self._settings: Optional[AppSettings] = None
        self._workflows: Dict[str, Any] = {}
        self.reload()
    # End function

    # =========================================================================
    # Function 2.4.1: reload
    # =========================================================================
    def reload(self):
        """Reloads and re-validates settings and workflow templates."""
        with _config_lock:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    main_data = json.load(f)
                self._settings = AppSettings(**main_data)
            except FileNotFoundError:
                raise ConfigurationError(f"Main configuration file not found at {self.config_path}")
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {self.config_path}: {e}")
            except ValidationError as e:
                raise ConfigurationError(f"Configuration validation error: {e}")

            try:
                with open(self.workflows_path, 'r', encoding='utf-8') as f:
                    self._workflows = yaml.safe_load(f) or {}
            except FileNotFoundError:
                logger.warning(
                    f"Workflow template file not found at {self.workflows_path}. No stored templates available."
                )
                self._workflows = {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse workflow templates from {self.workflows_path}: {e}")

            if not isinstance(self._workflows, dict):
                raise ConfigurationError(
                    f"Workflow template file {self.workflows_path} must contain a mapping of template names"
                )
            logger.info(f"Loaded settings and {len(self._workflows)} workflow templates")
    # End function

    # =========================================================================
    # Function 2.4.2: get
    # =========================================================================
    def get(self) -> AppSettings:
        """Returns the current, validated settings object."""
        with _config_lock:
            if self._settings is None:
                raise ConfigurationError("Settings are unavailable.")
            return self._settings
    # End function

    # =========================================================================
    # Function 2.4.3: get_workflow_templates
    # =========================================================================
    def get_workflow_templates(self) -> Dict[str, Any]:
        with _config_lock:
            return dict(self._workflows)

    # =========================================================================
    # Function 2.4.4: get_template_content
    # =========================================================================
    def get_template_content(self, template_name: str) -> Optional[str]:
        """
        Retrieves the content of a message template file from config/templates.
        """
        template_path = os.path.join(self.templates_dir, template_name)
        if not os.path.exists(template_path):
            logger.warning(f"Template file not found: {template_path}")
            return None
        try:
            with open(template_path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read template {template_path}: {e}")
            return None
    # End function

    # =========================================================================
    # Function 2.4.5: save
    # =========================================================================
    def save(self, new_settings: dict) -> bool:
        """
        Validates and saves a new settings dictionary to the JSON file.

        Args:
            new_settings (dict): Dictionary containing the new settings to be saved

        Returns:
            bool: True if save was successful, False otherwise
        """
        with _config_lock:
            try:
                validated_settings = AppSettings(**new_settings)
            except ValidationError as e:
                logger.error(f"Rejected settings update: {e}")
                return False

            try:
                os.makedirs(os.path.dirname(self.config_path), exist_ok=True)
                with open(self.config_path, 'w', encoding='utf-8') as f:
                    json.dump(validated_settings.model_dump(), f, indent=4)
            except OSError as e:
                logger.error(f"Failed to save settings: {e}")
                return False

            self._settings = validated_settings
            return True
#
#
## End of script
