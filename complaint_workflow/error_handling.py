# ============================================================================
#  File:    error_handling.py
#  Purpose: Workflow error codes, standardized messages, and exception types
# ============================================================================
# SECTION 1: Imports and Globals
# ============================================================================

from typing import Iterable, Optional

# ============================================================================
# SECTION 2: Error Codes and Messages
# ============================================================================
ERROR_CODES = {
    'E001': 'Invalid input',
    'E002': 'Configuration could not be loaded',
    'E100': 'Workflow definition is invalid',
    'E101': 'Cycle detected in workflow graph - workflows must be acyclic',
    'E102': 'Node not found',
    'E103': 'Duplicate node id',
    'E104': 'Workflow definition failed schema validation',
    'E201': 'Node handler failed',
    'E301': 'No recipient available',
    'E302': 'Notification dispatch failed',
    'E999': 'Unknown error'
}

# ============================================================================
# Function 2.1: get_error_message
# ============================================================================
def get_error_message(code, detail=None):
    """Formats a standardized error message from an error code."""
    message = ERROR_CODES.get(code, ERROR_CODES['E999'])
    if detail:
        return f"[{code}] {message}: {str(detail)}"
    return f"[{code}] {message}"

# ============================================================================
# SECTION 3: Exception Hierarchy
# ============================================================================
# Class 3.1: WorkflowError
# ============================================================================
class WorkflowError(Exception):
    """Base class for every error raised by the workflow engine."""

    code = 'E999'

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(get_error_message(self.code, detail))

# ============================================================================
# Class 3.2: ConfigurationError
# ============================================================================
class ConfigurationError(WorkflowError):
    code = 'E002'

# ============================================================================
# Class 3.3: WorkflowConfigurationError
# ============================================================================
class WorkflowConfigurationError(WorkflowError):
    """A workflow definition that can never run. Fatal before execution."""

    code = 'E100'

# ============================================================================
# Class 3.4: CycleDetected
# ============================================================================
class CycleDetected(WorkflowConfigurationError):
    code = 'E101'

    def __init__(self, node_ids: Iterable[str]):
        self.node_ids = tuple(node_ids)
        super().__init__(f"unreached nodes: {', '.join(self.node_ids)}")

# ============================================================================
# Class 3.5: NodeNotFound
# ============================================================================
class NodeNotFound(WorkflowConfigurationError):
    code = 'E102'

    def __init__(self, node_id: str, referenced_by: Optional[str] = None):
        self.node_id = node_id
        self.referenced_by = referenced_by
        if referenced_by:
            super().__init__(f"'{node_id}' (referenced by edge '{referenced_by}')")
        else:
            super().__init__(f"'{node_id}'")

# ============================================================================
# Class 3.6: DuplicateNodeId
# ============================================================================
class DuplicateNodeId(WorkflowConfigurationError):
    code = 'E103'

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"'{node_id}'")

# ============================================================================
# Class 3.7: InvalidWorkflowDefinition
# ============================================================================
class InvalidWorkflowDefinition(WorkflowConfigurationError):
    code = 'E104'

    def __init__(self, detail: str, errors: Optional[list] = None):
        self.errors = list(errors or [])
        super().__init__(detail)

# ============================================================================
# Class 3.8: HandlerFailure
# ============================================================================
class HandlerFailure(WorkflowError):
    """A node handler raised. Aborts the rest of the run; nothing is rolled back."""

    code = 'E201'

    def __init__(self, node_id: str, detail: Optional[str] = None):
        self.node_id = node_id
        super().__init__(f"node '{node_id}': {detail}" if detail else f"node '{node_id}'")

# ============================================================================
# Class 3.9: RecipientUnavailable
# ============================================================================
class RecipientUnavailable(WorkflowError):
    """Raised by recipient resolution; notification handlers absorb it."""

    code = 'E301'

# ============================================================================
# Class 3.10: DispatchFailure
# ============================================================================
class DispatchFailure(WorkflowError):
    """Raised when a sender reports failure; notification handlers absorb it."""

    code = 'E302'
#
#
## End Script
