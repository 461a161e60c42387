# ============================================================================
#  File: collaborators.py
#  Version: 1.0
#  Purpose: Contracts for persistence and notification collaborators
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from loguru import logger

from complaint_workflow.records import AuditEntry, ComplaintSnapshot, UserRecord
#
# ============================================================================
# SECTION 2: Abstract Collaborators
# ============================================================================
# Class 2.1: ComplaintRepository
# ============================================================================
#
class ComplaintRepository(ABC):
    """Read access to complaints, users and role permissions, plus audit writes."""

    @abstractmethod
    async def get_complaint(self, complaint_id: int) -> Optional[ComplaintSnapshot]:
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_roles_for_action(self, action_id: str) -> List[str]:
        ...

    @abstractmethod
    async def get_all_users(self) -> List[UserRecord]:
        ...

    @abstractmethod
    async def create_audit_entry(self, entry: AuditEntry) -> None:
        ...
#
# ============================================================================
# Class 2.2: EmailSender
# ============================================================================
#
class EmailSender(ABC):
    @abstractmethod
    async def send_email(
        self,
        recipient: str,
        subject: str,
        body: str,
        recipient_name: Optional[str] = None,
    ) -> bool:
        """Returns True when the provider accepted the message."""
#
# ============================================================================
# Class 2.3: SmsSender
# ============================================================================
#
class SmsSender(ABC):
    @abstractmethod
    async def send_sms(self, to: str, message: str) -> bool:
        ...
#
# ============================================================================
# Class 2.4: WhatsAppSender
# ============================================================================
#
class WhatsAppSender(ABC):
    @abstractmethod
    async def send_whatsapp(self, to: str, message: str) -> bool:
        ...
#
# ============================================================================
# Class 2.5: WorkflowServices
# ============================================================================
#
@dataclass
class WorkflowServices:
    """Bundle of collaborators handed to node handlers."""

    repository: ComplaintRepository
    email_sender: EmailSender
    sms_sender: SmsSender
    whatsapp_sender: WhatsAppSender
#
# ============================================================================
# SECTION 3: In-Memory Repository
# ============================================================================
# Class 3.1: InMemoryComplaintStore
# ============================================================================
#
class InMemoryComplaintStore(ComplaintRepository):
    """
    Dictionary-backed repository used by the CLI dry runs and the test suite.
    Role permissions are given as action id -> role names.
    """

    def __init__(
        self,
        complaints: Iterable[ComplaintSnapshot] = (),
        users: Iterable[UserRecord] = (),
        role_actions: Optional[Dict[str, List[str]]] = None,
    ):
        self.complaints: Dict[int, ComplaintSnapshot] = {c.id: c for c in complaints}
        self.users: Dict[str, UserRecord] = {u.id: u for u in users}
        self.role_actions: Dict[str, List[str]] = dict(role_actions or {})
        self.audit_log: List[AuditEntry] = []

    async def get_complaint(self, complaint_id: int) -> Optional[ComplaintSnapshot]:
        return self.complaints.get(complaint_id)

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.email and user.email.lower() == email.lower():
                return user
        return None

    async def get_roles_for_action(self, action_id: str) -> List[str]:
        return list(self.role_actions.get(action_id, []))

    async def get_all_users(self) -> List[UserRecord]:
        return list(self.users.values())

    async def create_audit_entry(self, entry: AuditEntry) -> None:
        logger.debug(f"Audit: {entry.action} (complaint {entry.complaint_id})")
        self.audit_log.append(entry)
#
#
## End Script
