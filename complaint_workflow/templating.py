# ============================================================================
#  File: templating.py
#  Purpose: {{variable}} substitution for notification subjects and bodies
# ============================================================================
# SECTION 1: Imports and Globals
# ============================================================================
#
import re
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from complaint_workflow.config import STAFF_DISPLAY_NAME
from complaint_workflow.records import ComplaintSnapshot

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"
#
# ============================================================================
# SECTION 2: Substitution
# ============================================================================
# Function 2.1: substitute_variables
# ============================================================================
#
def substitute_variables(template: Optional[str], data: Mapping[str, Any]) -> str:
    """
    Replace each {{name}} token whose name is a key of `data`.

    None values become an empty string; tokens with no matching key are left
    as written. Flat keys only: no nesting, conditionals or loops.
    """
    if not template:
        return ""

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in data:
            return match.group(0)
        value = data[name]
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_replace, template)
#
# ============================================================================
# Function 2.2: format_date
# ============================================================================
#
def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y")
#
# ============================================================================
# Function 2.3: format_problem_types
# ============================================================================
#
def format_problem_types(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)
#
# ============================================================================
# Function 2.4: build_template_variables
# ============================================================================
#
def build_template_variables(
    complaint: ComplaintSnapshot,
    extra: Optional[Mapping[str, Any]] = None,
    staff_display_name: str = STAFF_DISPLAY_NAME,
) -> Dict[str, Any]:
    """
    Flatten a complaint into the variables templates may reference.

    Scalar entries of `extra` (usually the run's scratch variables) are
    included too, but complaint fields win on a name clash.
    """
    variables: Dict[str, Any] = {}
    for key, value in (extra or {}).items():
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            variables[key] = value

    date_received = format_date(complaint.created_at)
    description = complaint.other_description or ""
    variables.update({
        "complaintId": complaint.complaint_id,
        "status": complaint.status,
        "priority": complaint.priority,
        "problemType": format_problem_types(complaint.problem_types),
        "dateReceived": date_received,
        "submissionDate": date_received,
        "lastUpdated": format_date(complaint.updated_at),
        "location": complaint.source_address or NOT_SPECIFIED,
        "description": description,
        "complaintDescription": description,
        "complainantName": complaint.complainant_name,
        "complainantPhone": complaint.complainant_phone or NOT_PROVIDED,
        "complainantEmail": complaint.complainant_email or NOT_PROVIDED,
        "assignedStaff": staff_display_name,
    })
    return variables
#
#
## End Script
