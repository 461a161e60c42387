# ============================================================================
#  File: secure_secrets.py
#  Version: 2.0
#  Purpose: Load notification provider credentials from .env / environment.
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================
import os
from typing import Dict, Optional
from dotenv import load_dotenv
from loguru import logger

PROVIDER_SECRETS = {
    "sendgrid_api_key": "SENDGRID_API_KEY",
    "twilio_account_sid": "TWILIO_ACCOUNT_SID",
    "twilio_auth_token": "TWILIO_AUTH_TOKEN",
    "twilio_from_number": "TWILIO_FROM_NUMBER",
}

# ============================================================================
# SECTION 2: Functions
# ============================================================================
# Function 2.1: load_secrets
# ============================================================================
def load_secrets() -> Dict[str, Optional[str]]:
    """
    Loads provider secrets from a .env file and the environment.

    Existing environment variables take precedence over the .env file.

    Returns:
        A dictionary containing the loaded secrets (None where unset).
    """
    load_dotenv(override=False)

    secrets = {name: os.getenv(env_var) for name, env_var in PROVIDER_SECRETS.items()}

    for name, env_var in PROVIDER_SECRETS.items():
        if not secrets.get(name):
            logger.warning(
                f"{env_var} not found in environment variables or .env file"
            )

    return secrets
#
#
## End of Script
