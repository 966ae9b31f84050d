"""
AWS session handling

This module builds boto3 sessions and EC2 clients for a profile and region,
and checks that the resolved credentials actually work before any resource
is created. Profile and region resolution is left to boto3's standard chain.
"""

import logging
import os
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from ..errors import AuthenticationFailure

module_logger = logging.getLogger(__name__)

__all__ = [
    'get_current_profile',
    'create_session',
    'create_client_config',
    'create_ec2_client',
    'validate_credentials',
]

def get_current_profile() -> Optional[str]:
    """
    Get the name of the AWS profile boto3 will use when none is given.

    Returns:
        Name of the active profile or None if using default credentials
    """
    return os.environ.get("AWS_PROFILE") or os.environ.get("AWS_DEFAULT_PROFILE")

def create_session(profile: Optional[str], region: str) -> boto3.Session:
    """
    Create a boto3 session for a profile and region.

    Args:
        profile: AWS profile name, or None for the default chain
        region: AWS region name

    Returns:
        boto3.Session: The configured session

    Raises:
        AuthenticationFailure: If the profile does not exist
    """
    try:
        return boto3.Session(profile_name=profile, region_name=region)
    except ProfileNotFound as e:
        raise AuthenticationFailure("session", f"AWS profile '{profile}' not found", e) from e
    except BotoCoreError as e:
        raise AuthenticationFailure("session", f"Could not create AWS session: {e}", e) from e

def create_client_config(call_timeout: float) -> Config:
    """
    Client configuration with an explicit per-call timeout.

    botocore's own retries are turned off; RetryPolicy decides what to retry.
    """
    return Config(
        connect_timeout=call_timeout,
        read_timeout=call_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )

def create_ec2_client(session: boto3.Session, call_timeout: float):
    """Create an EC2 client from a session."""
    return session.client("ec2", config=create_client_config(call_timeout))

def validate_credentials(session: boto3.Session, call_timeout: float) -> str:
    """
    Validate the session's credentials with STS.

    Args:
        session: The boto3 session to check
        call_timeout: Per-call timeout in seconds

    Returns:
        str: The AWS account ID the credentials belong to

    Raises:
        AuthenticationFailure: If no credentials are found or STS rejects them
    """
    try:
        sts = session.client("sts", config=create_client_config(call_timeout))
        identity = sts.get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        raise AuthenticationFailure("session", f"Credential validation failed: {e}", e) from e

    account_id = identity.get("Account")
    module_logger.info(f"Authenticated as {identity.get('Arn')} (account {account_id})")
    return account_id
