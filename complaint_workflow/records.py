# ============================================================================
#  File: records.py
#  Purpose: Read-side records exchanged with the persistence collaborator
# ============================================================================
# SECTION 1: Imports
# ============================================================================
#
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
#
# ============================================================================
# SECTION 2: Records
# ============================================================================
# Class 2.1: ComplaintSnapshot
# ============================================================================
#
@dataclass(frozen=True)
class ComplaintSnapshot:
    """The complaint row as seen by a workflow run. Loaded once per run."""

    id: int
    complaint_id: str
    status: str = "initiated"
    priority: str = "normal"
    complaint_type: str = "AIR_QUALITY"
    problem_types: Any = None
    complainant_first_name: Optional[str] = None
    complainant_last_name: Optional[str] = None
    complainant_email: Optional[str] = None
    complainant_phone: Optional[str] = None
    source_address: Optional[str] = None
    other_description: Optional[str] = None
    assigned_to: Optional[str] = None
    is_anonymous: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def complainant_name(self) -> str:
        return f"{self.complainant_first_name or ''} {self.complainant_last_name or ''}".strip()
#
# ============================================================================
# Class 2.2: UserRecord
# ============================================================================
#
@dataclass(frozen=True)
class UserRecord:
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    roles: List[str] = field(default_factory=list)
    phone: Optional[str] = None
    mobile_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    enable_sms_notifications: bool = True
    enable_whatsapp_notifications: bool = True
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
#
# ============================================================================
# Class 2.3: AuditEntry
# ============================================================================
#
@dataclass
class AuditEntry:
    action: str
    complaint_id: Optional[int] = None
    user_id: Optional[str] = None
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    reason: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "complaintId": self.complaint_id,
            "userId": self.user_id,
            "previousValue": self.previous_value,
            "newValue": self.new_value,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }
#
#
## End Script
