# ============================================================================
# FILENAME: config.py
# PURPOSE: Static configuration for the complaint workflow engine
# ============================================================================
# SECTION 1: Organisation & Message Defaults
# ============================================================================
#
ORGANIZATION_NAME = "ORCAA"

STAFF_DISPLAY_NAME = "ORCAA Staff"

# Action used to resolve role_based recipients when a node does not name one
DEFAULT_ROLE_ACTION_ID = "initial_inspection"

DEFAULT_EMAIL_BODY = (
    "Your complaint {{complaintId}} has been received and is being processed."
)

DEFAULT_MESSAGE_TEMPLATE = (
    "ORCAA Alert: Your complaint {{complaintId}} has been received. Status: {{status}}"
)

# Subject lines keyed by email type
EMAIL_SUBJECTS = {
    "complaint_received": "ORCAA Complaint Received - {{complaintId}}",
    "status_update": "ORCAA Complaint Update - {{complaintId}} - {{status}}",
    "action_required": "ORCAA Action Required - {{complaintId}}",
    "complaint_resolved": "ORCAA Complaint Resolved - {{complaintId}}",
    "assignment_notification": "ORCAA Task Assignment - {{complaintId}}",
}

DEFAULT_EMAIL_SUBJECT = "ORCAA Complaint Notification - {{complaintId}}"

# Complaint status -> email type, used when a node has no templateType
STATUS_EMAIL_TYPES = {
    "initiated": "complaint_received",
    "in_progress": "status_update",
    "resolved": "complaint_resolved",
    "closed": "complaint_resolved",
}
#
# ============================================================================
# SECTION 2: Provider Endpoints & Timeouts
# ============================================================================
#
SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"

# Timeout for provider HTTP requests in seconds
PROVIDER_REQUEST_TIMEOUT = 10
#
# ============================================================================
# SECTION 3: Logging Configuration
# ============================================================================
#
LOG_CONFIG = {
    "handlers": {
        "file": {
            "level": "DEBUG",
            "rotation": "10 MB",
            "retention": "30 days",
            "compression": "zip",
        },
        "console": {
            "level": "INFO",
        }
    },
    "formatters": {
        "default": {
            "format": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
        }
    }
}

#
#
## END config.py
