"""
AWS session and credential utilities.
Profile and region resolution is delegated to boto3.
"""

from .session import (
    get_current_profile,
    create_session,
    create_client_config,
    create_ec2_client,
    validate_credentials,
)
