# ============================================================================
#  File: recipients.py
#  Version: 1.0
#  Purpose: Turn a node's recipientType into a concrete address or number
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from loguru import logger

from complaint_workflow.collaborators import ComplaintRepository
from complaint_workflow.config import DEFAULT_ROLE_ACTION_ID
from complaint_workflow.error_handling import RecipientUnavailable
from complaint_workflow.records import ComplaintSnapshot, UserRecord
#
# ============================================================================
# SECTION 2: Data Classes and Enums
# ============================================================================
# Class 2.1: Channel
# ============================================================================
#
class Channel(Enum):
    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"
#
# ============================================================================
# Class 2.2: RecipientType
# ============================================================================
#
class RecipientType(Enum):
    COMPLAINANT = "complainant"
    ASSIGNED_STAFF = "assigned_staff"
    ROLE_BASED = "role_based"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RecipientType":
        """Missing or unrecognised values fall back to the complainant."""
        try:
            return cls(value)
        except ValueError:
            return cls.COMPLAINANT
#
# ============================================================================
# Class 2.3: Recipient
# ============================================================================
#
@dataclass(frozen=True)
class Recipient:
    address: str
    name: str
    user_id: Optional[str] = None
#
# ============================================================================
# SECTION 3: Resolution
# ============================================================================
# Function 3.1: user_address
# ============================================================================
#
def user_address(user: UserRecord, channel: Channel) -> Optional[str]:
    """Address of a staff user on a channel, honouring their opt-outs."""
    if channel is Channel.EMAIL:
        return user.email
    if channel is Channel.SMS:
        if not user.enable_sms_notifications:
            return None
        return user.mobile_number or user.phone
    if not user.enable_whatsapp_notifications:
        return None
    return user.whatsapp_number or user.mobile_number or user.phone
#
# ============================================================================
# Class 3.2: RecipientResolver
# ============================================================================
#
class RecipientResolver:
    """
    Resolves recipients through the repository collaborator.

    `resolve` raises RecipientUnavailable when nothing usable is found;
    notification handlers turn that into a skipped result.
    """

    def __init__(
        self,
        repository: ComplaintRepository,
        default_action_id: str = DEFAULT_ROLE_ACTION_ID,
    ):
        self.repository = repository
        self.default_action_id = default_action_id

    # ========================================================================
    # Async Method 3.2.1: resolve
    # ========================================================================
    async def resolve(
        self,
        config: Dict[str, Any],
        complaint: ComplaintSnapshot,
        channel: Channel,
    ) -> Recipient:
        recipient_type = RecipientType.parse(config.get("recipientType"))

        if recipient_type is RecipientType.ASSIGNED_STAFF:
            recipient = await self._assigned_staff(complaint, channel)
        elif recipient_type is RecipientType.ROLE_BASED:
            action_id = config.get("actionId") or self.default_action_id
            recipient = await self._role_based(action_id, channel)
        elif recipient_type is RecipientType.CUSTOM:
            recipient = self._custom(config, channel)
        else:
            recipient = self._complainant(complaint, channel)

        if recipient is None or not recipient.address:
            raise RecipientUnavailable(
                f"{recipient_type.value} has no {channel.value} address for complaint {complaint.complaint_id}"
            )
        return recipient

    # ========================================================================
    # Method 3.2.2: _complainant
    # ========================================================================
    @staticmethod
    def _complainant(complaint: ComplaintSnapshot, channel: Channel) -> Optional[Recipient]:
        address = complaint.complainant_email if channel is Channel.EMAIL else complaint.complainant_phone
        if not address:
            return None
        return Recipient(address=address, name=complaint.complainant_name)

    # ========================================================================
    # Async Method 3.2.3: _assigned_staff
    # ========================================================================
    async def _assigned_staff(
        self, complaint: ComplaintSnapshot, channel: Channel
    ) -> Optional[Recipient]:
        if not complaint.assigned_to:
            return None
        user = await self.repository.get_user(complaint.assigned_to)
        if user is None:
            logger.warning(f"Assigned user '{complaint.assigned_to}' not found")
            return None
        address = user_address(user, channel)
        if not address:
            return None
        return Recipient(address=address, name=user.full_name, user_id=user.id)

    # ========================================================================
    # Async Method 3.2.4: users_with_action_permission
    # ========================================================================
    async def users_with_action_permission(self, action_id: str) -> List[UserRecord]:
        """Active users holding any role permitted for `action_id`, in repository order."""
        try:
            roles = await self.repository.get_roles_for_action(action_id)
            if not roles:
                logger.info(f"No roles found with permission for action: {action_id}")
                return []
            all_users = await self.repository.get_all_users()
        except Exception as e:
            logger.error(f"Error getting users with action permission '{action_id}': {e}")
            return []

        permitted = set(roles)
        users = [
            user for user in all_users
            if user.is_active and any(role in permitted for role in (user.roles or []))
        ]
        logger.info(f"Found {len(users)} users with permission for action: {action_id}")
        return users

    # ========================================================================
    # Async Method 3.2.5: _role_based
    # ========================================================================
    async def _role_based(self, action_id: str, channel: Channel) -> Optional[Recipient]:
        users = await self.users_with_action_permission(action_id)
        if not users:
            return None
        # First permitted user is the primary recipient
        primary = users[0]
        address = user_address(primary, channel)
        if not address:
            return None
        return Recipient(address=address, name=primary.full_name, user_id=primary.id)

    # ========================================================================
    # Method 3.2.6: _custom
    # ========================================================================
    @staticmethod
    def _custom(config: Dict[str, Any], channel: Channel) -> Recipient:
        key = "customEmail" if channel is Channel.EMAIL else "customPhone"
        return Recipient(
            address=config.get(key) or "",
            name=config.get("customName") or "Recipient",
        )
#
#
## End Script
