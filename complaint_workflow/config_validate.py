# ============================================================================
#  File: config_validate.py
#  Version: 2.0
#  Purpose: JSON-schema validation for settings and workflow definitions
# ============================================================================
# SECTION 1: Imports and Globals
# ============================================================================

import os
import json
import jsonschema
from typing import Any, Optional, Tuple

from complaint_workflow.config_manager import CONFIG_DIR, CONFIG_PATH

SCHEMA_PATH = os.path.join(CONFIG_DIR, "config_schema.json")
WORKFLOW_SCHEMA_PATH = os.path.join(CONFIG_DIR, "workflow_schema.json")

# ============================================================================
# SECTION 2: Functions
# ============================================================================
# Function 2.1: _load_json
# ============================================================================
def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

# ============================================================================
# Function 2.2: validate_config
# ============================================================================
def validate_config(
    config_path: str = CONFIG_PATH, schema_path: str = SCHEMA_PATH
) -> Tuple[bool, Optional[str]]:
    """
    Validates the application settings file against its JSON schema.

    Args:
        config_path: Path to the settings file
        schema_path: Path to the JSON schema file

    Returns:
        Tuple of (is_valid: bool, error_message: Optional[str])
    """
    try:
        config = _load_json(config_path)
        schema = _load_json(schema_path)
        jsonschema.validate(instance=config, schema=schema)
        return True, None

    except FileNotFoundError as e:
        return False, f"Configuration file not found: {e}"
    except json.JSONDecodeError as e:
        return False, f"Invalid JSON format: {e}"
    except jsonschema.ValidationError as e:
        return False, f"Configuration validation error: {e.message}"
    except jsonschema.SchemaError as e:
        return False, f"Schema validation error: {e.message}"

# ============================================================================
# Function 2.3: validate_workflow_definition
# ============================================================================
def validate_workflow_definition(
    definition: Any, schema_path: str = WORKFLOW_SCHEMA_PATH
) -> Tuple[bool, Optional[str]]:
    """
    Validates a workflow designer definition ({nodes, edges}) against the
    workflow JSON schema. Structure only: cycles and dangling edges are
    checked by the scheduler.

    Returns:
        Tuple of (is_valid: bool, error_message: Optional[str])
    """
    try:
        schema = _load_json(schema_path)
        jsonschema.validate(instance=definition, schema=schema)
        return True, None

    except FileNotFoundError as e:
        return False, f"Schema file not found: {e}"
    except json.JSONDecodeError as e:
        return False, f"Invalid schema JSON format: {e}"
    except jsonschema.ValidationError as e:
        location = ".".join(str(p) for p in e.path)
        if location:
            return False, f"Workflow definition error at {location}: {e.message}"
        return False, f"Workflow definition error: {e.message}"
    except jsonschema.SchemaError as e:
        return False, f"Schema validation error: {e.message}"

# ============================================================================
# Function 2.4: get_validation_errors
# ============================================================================
def get_validation_errors(data: Any, schema_path: str = WORKFLOW_SCHEMA_PATH) -> list[dict]:
    """
    Get detailed validation errors for a workflow definition.

    Args:
        data: Definition to validate
        schema_path: Path to the JSON schema file (default: config/workflow_schema.json)

    Returns:
        list[dict]: List of error dictionaries, each containing:
            - path (list): Path to the invalid field (e.g., ['nodes', 0, 'id'])
            - message (str): Description of the validation error
            - invalid_value (any): The problematic value that failed validation

    Example:
        >>> errors = get_validation_errors({"nodes": [], "edges": []})
        >>> if errors:
        ...     for error in errors:
        ...         print(f"Error at {error['path']}: {error['message']}")
    """
    if not isinstance(data, dict):
        return [{
            "path": [],
            "message": f"Expected dict for workflow definition, got {type(data).__name__}",
            "invalid_value": data
        }]

    if not os.path.isfile(schema_path):
        return [{
            "path": [],
            "message": f"Schema file not found: {os.path.abspath(schema_path)}",
            "invalid_value": None
        }]

    try:
        schema = _load_json(schema_path)
    except (json.JSONDecodeError, OSError) as e:
        return [{
            "path": [],
            "message": f"Error reading schema file: {e}",
            "invalid_value": None
        }]

    try:
        validator = jsonschema.Draft7Validator(schema)
        return [
            {
                "path": list(error.path),
                "message": error.message,
                "invalid_value": error.instance,
            }
            for error in validator.iter_errors(data)
        ]
    except jsonschema.SchemaError as e:
        return [{
            "path": [],
            "message": f"Invalid schema: {e}",
            "invalid_value": None
        }]
#
#
## END config_validate.py
