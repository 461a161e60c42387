# ============================================================================
# File: notifications.py
# Purpose: SendGrid email and Twilio SMS/WhatsApp dispatch adapters
# ============================================================================
# SECTION 1: Global Variable Definitions
# ============================================================================
import asyncio
import html
from typing import Any, Dict, Optional

import requests
from loguru import logger

from complaint_workflow.collaborators import (
    ComplaintRepository,
    EmailSender,
    SmsSender,
    WhatsAppSender,
    WorkflowServices,
)
from complaint_workflow.config import SENDGRID_API_URL, TWILIO_API_BASE
from complaint_workflow.config_manager import ConfigManager, NotificationSettings
from complaint_workflow.secure_secrets import load_secrets
from complaint_workflow.templating import substitute_variables

DEFAULT_EMAIL_HTML = """
<html>
  <body>
    <h2>{{organizationName}} Complaint Management System</h2>
    <p>Dear {{recipientName}},</p>
    <p>{{updateDescription}}</p>
    <p>Thank you,<br>{{staffName}}</p>
  </body>
</html>
"""

# ============================================================================
# SECTION 2: Email
# ============================================================================
# Class 2.1: SendGridEmailService
# ============================================================================
class SendGridEmailService(EmailSender):
    """
    Sends HTML email through SendGrid's v3 mail API.

    The node's body text is placed inside the configured HTML wrapper.
    Without an API key nothing is sent and send_email returns False.
    """

    def __init__(
        self,
        api_key: Optional[str],
        settings: NotificationSettings,
        html_template: Optional[str] = None,
        api_url: str = SENDGRID_API_URL,
    ):
        self.api_key = api_key
        self.settings = settings
        self.html_template = html_template or DEFAULT_EMAIL_HTML
        self.api_url = api_url

    # ========================================================================
    # Method 2.1.1: render_body
    # ========================================================================
    def render_body(self, subject: str, body: str, recipient_name: Optional[str]) -> str:
        return substitute_variables(self.html_template, {
            "organizationName": html.escape(self.settings.organization_name),
            "recipientName": html.escape(recipient_name or "Recipient"),
            "subject": html.escape(subject),
            "updateDescription": html.escape(body),
            "staffName": html.escape(self.settings.staff_display_name),
        })

    # ========================================================================
    # Method 2.1.2: build_payload
    # ========================================================================
    def build_payload(
        self, recipient: str, subject: str, body: str, recipient_name: Optional[str]
    ) -> Dict[str, Any]:
        to_entry = {"email": recipient}
        if recipient_name:
            to_entry["name"] = recipient_name
        return {
            "personalizations": [{"to": [to_entry]}],
            "from": {
                "email": self.settings.email_from_address,
                "name": self.settings.email_from_name,
            },
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": body},
                {"type": "text/html", "value": self.render_body(subject, body, recipient_name)},
            ],
        }

    # ========================================================================
    # Method 2.1.3: _post
    # ========================================================================
    def _post(self, payload: Dict[str, Any]) -> bool:
        resp = requests.post(
            self.api_url,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.settings.request_timeout_seconds,
        )
        resp.raise_for_status()
        return True

    # ========================================================================
    # Async Method 2.1.4: send_email
    # ========================================================================
    async def send_email(
        self,
        recipient: str,
        subject: str,
        body: str,
        recipient_name: Optional[str] = None,
    ) -> bool:
        if not self.api_key or not self.settings.email_from_address:
            logger.warning("SendGrid not configured. Email notification not sent.")
            return False

        payload = self.build_payload(recipient, subject, body, recipient_name)
        try:
            await asyncio.to_thread(self._post, payload)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error sending email to {recipient}: {e}")
            return False

        logger.info(f"Email sent to {recipient}: {subject}")
        return True

# ============================================================================
# SECTION 3: SMS / WhatsApp
# ============================================================================
# Class 3.1: TwilioMessagingService
# ============================================================================
class TwilioMessagingService(SmsSender, WhatsAppSender):
    """Twilio Messages API client for both SMS and WhatsApp."""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        timeout: float = 10,
        api_base: str = TWILIO_API_BASE,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.api_base = api_base

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def _create_message(self, to: str, from_: str, body: str) -> bool:
        url = f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"
        resp = requests.post(
            url,
            data={"To": to, "From": from_, "Body": body},
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return True

    async def _send(self, channel: str, to: str, from_: str, message: str) -> bool:
        if not self.configured:
            logger.warning(f"Twilio not configured. {channel} notification not sent.")
            return False
        try:
            await asyncio.to_thread(self._create_message, to, from_, message)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error sending {channel} to {to}: {e}")
            return False

        logger.info(f"{channel} sent to {to}")
        return True

    async def send_sms(self, to: str, message: str) -> bool:
        return await self._send("SMS", to, self.from_number, message)

    async def send_whatsapp(self, to: str, message: str) -> bool:
        return await self._send(
            "WhatsApp", f"whatsapp:{to}", f"whatsapp:{self.from_number}", message
        )

# ============================================================================
# SECTION 4: Wiring
# ============================================================================
# Function 4.1: build_default_services
# ============================================================================
def build_default_services(
    repository: ComplaintRepository, config_manager: ConfigManager
) -> WorkflowServices:
    """Wire SendGrid and Twilio adapters from secrets and settings."""
    secrets = load_secrets()
    settings = config_manager.get().notifications
    html_template = config_manager.get_template_content(settings.email_template_file)

    twilio = TwilioMessagingService(
        account_sid=secrets.get("twilio_account_sid"),
        auth_token=secrets.get("twilio_auth_token"),
        from_number=secrets.get("twilio_from_number"),
        timeout=settings.request_timeout_seconds,
    )
    return WorkflowServices(
        repository=repository,
        email_sender=SendGridEmailService(
            api_key=secrets.get("sendgrid_api_key"),
            settings=settings,
            html_template=html_template,
        ),
        sms_sender=twilio,
        whatsapp_sender=twilio,
    )
#
#
## End Script
