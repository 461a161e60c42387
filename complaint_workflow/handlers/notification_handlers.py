# ============================================================================
#  File: notification_handlers.py
#  Version: 1.0
#  Purpose: Email, SMS and WhatsApp notification nodes
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
#
from abc import abstractmethod
from typing import Any, Dict, Optional

from loguru import logger

from complaint_workflow.collaborators import WorkflowServices
from complaint_workflow.config import (
    DEFAULT_EMAIL_BODY,
    DEFAULT_EMAIL_SUBJECT,
    DEFAULT_MESSAGE_TEMPLATE,
    EMAIL_SUBJECTS,
    STATUS_EMAIL_TYPES,
)
from complaint_workflow.config_manager import AppSettings
from complaint_workflow.context import ExecutionContext
from complaint_workflow.error_handling import (
    DispatchFailure,
    HandlerFailure,
    RecipientUnavailable,
)
from complaint_workflow.graph_model import Node
from complaint_workflow.handlers.handler_base import NodeHandler
from complaint_workflow.handlers.recipients import Channel, Recipient, RecipientResolver
from complaint_workflow.records import ComplaintSnapshot
from complaint_workflow.telemetry import record_telemetry
from complaint_workflow.templating import build_template_variables, substitute_variables


#
# ============================================================================
# SECTION 2: Helpers
# ============================================================================
# Function 2.1: determine_email_type
# ============================================================================
#
def determine_email_type(config: Dict[str, Any], complaint: ComplaintSnapshot) -> str:
    """Explicit templateType wins; otherwise derive it from the complaint status."""
    if config.get("templateType"):
        return config["templateType"]
    return STATUS_EMAIL_TYPES.get(complaint.status, "status_update")


#
# ============================================================================
# SECTION 3: NotificationHandler Base
# ============================================================================
# Class 3.1: NotificationHandler
# ============================================================================
#
class NotificationHandler(NodeHandler):
    """
    Shared flow of every notification node.

    Missing complaint data is fatal. A missing recipient or a failed send is
    not: both are recorded in the node result and the run continues. A
    notification already in the context's sent ledger is not sent again.
    """

    channel: Channel
    result_type: str
    skip_reason: str
    # Composed fields that are sent but kept out of the node result
    unreported_fields: tuple = ()

    def __init__(
        self,
        name: str,
        services: WorkflowServices,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(name, services, settings)
        self.resolver = RecipientResolver(
            services.repository,
            default_action_id=self.settings.notifications.default_role_action_id,
        )

    #
    # ========================================================================
    # Async Method 3.1.1: run
    # ========================================================================
    #
    async def run(self, node: Node, context: ExecutionContext) -> Dict[str, Any]:
        complaint = context.complaint
        if complaint is None:
            raise HandlerFailure(
                node.id, f"Complaint data not available for {self.result_type}"
            )

        if context.was_notification_sent(node.id):
            logger.info(f"[{self.name}] Node '{node.id}' already sent for this complaint, skipping")
            return {"status": "skipped", "reason": "already_sent"}

        try:
            recipient = await self.resolver.resolve(node.config, complaint, self.channel)
        except RecipientUnavailable as e:
            logger.info(f"[{self.name}] No recipient, skipping notification: {e}")
            return {"status": "skipped", "reason": self.skip_reason}

        variables = build_template_variables(
            complaint,
            extra=context.variables,
            staff_display_name=self.settings.notifications.staff_display_name,
        )
        variables["recipientName"] = recipient.name
        content = self.compose(node.config, complaint, variables)

        error: Optional[str] = None
        try:
            delivered = await self.dispatch(recipient, content)
            if not delivered:
                raise DispatchFailure(f"{self.channel.value} provider rejected message to {recipient.address}")
        except DispatchFailure as e:
            error = str(e)
        except Exception as e:
            logger.exception(f"[{self.name}] Sender raised for node '{node.id}'")
            error = str(DispatchFailure(str(e)))

        success = error is None
        if success:
            context.mark_notification_sent(node.id)
        else:
            logger.warning(f"[{self.name}] Notification for node '{node.id}' not delivered: {error}")

        result = {
            "type": self.result_type,
            "success": success,
            "recipient": recipient.address,
            **{k: v for k, v in content.items() if k not in self.unreported_fields},
            "timestamp": self.timestamp(),
        }
        if error:
            result["error"] = error
        return result

    @abstractmethod
    def compose(
        self,
        config: Dict[str, Any],
        complaint: ComplaintSnapshot,
        variables: Dict[str, Any],
    ) -> Dict[str, str]:
        """Build the message fields that are both sent and reported in the result."""

    @abstractmethod
    async def dispatch(self, recipient: Recipient, content: Dict[str, str]) -> bool:
        ...


#
# ============================================================================
# SECTION 4: Channel Handlers
# ============================================================================
# Class 4.1: EmailNotificationHandler
# ============================================================================
#
class EmailNotificationHandler(NotificationHandler):
    channel = Channel.EMAIL
    result_type = "email_notification"
    skip_reason = "no_recipient_email"
    unreported_fields = ("body",)

    def compose(self, config, complaint, variables):
        email_type = determine_email_type(config, complaint)
        subject_template = (
            config.get("emailSubject")
            or EMAIL_SUBJECTS.get(email_type, DEFAULT_EMAIL_SUBJECT)
        )
        body_template = config.get("emailTemplate") or DEFAULT_EMAIL_BODY
        return {
            "subject": substitute_variables(subject_template, variables),
            "body": substitute_variables(body_template, variables),
        }

    @record_telemetry("EmailNotificationHandler", "dispatch")
    async def dispatch(self, recipient, content):
        logger.info(f"[{self.name}] Sending email to {recipient.address}: {content['subject']}")
        return await self.services.email_sender.send_email(
            recipient.address, content["subject"], content["body"], recipient.name
        )
#
# ============================================================================
# Class 4.2: SmsNotificationHandler
# ============================================================================
#
class SmsNotificationHandler(NotificationHandler):
    channel = Channel.SMS
    result_type = "sms_notification"
    skip_reason = "no_phone_number"

    def compose(self, config, complaint, variables):
        template = config.get("messageTemplate") or DEFAULT_MESSAGE_TEMPLATE
        return {"message": substitute_variables(template, variables)}

    @record_telemetry("SmsNotificationHandler", "dispatch")
    async def dispatch(self, recipient, content):
        logger.info(f"[{self.name}] Sending SMS to {recipient.address}")
        return await self.services.sms_sender.send_sms(recipient.address, content["message"])
#
# ============================================================================
# Class 4.3: WhatsAppNotificationHandler
# ============================================================================
#
class WhatsAppNotificationHandler(NotificationHandler):
    channel = Channel.WHATSAPP
    result_type = "whatsapp_notification"
    skip_reason = "no_phone_number"

    def compose(self, config, complaint, variables):
        template = config.get("messageTemplate") or DEFAULT_MESSAGE_TEMPLATE
        return {"message": substitute_variables(template, variables)}

    @record_telemetry("WhatsAppNotificationHandler", "dispatch")
    async def dispatch(self, recipient, content):
        logger.info(f"[{self.name}] Sending WhatsApp message to {recipient.address}")
        return await self.services.whatsapp_sender.send_whatsapp(
            recipient.address, content["message"]
        )
#
#
## End Script
