"""
Provisioning configuration.

The CLI builds a ProvisionRequest from its flags and hands it to the
provisioner by value. Nothing here is mutable at module level.
"""

import ipaddress
from dataclasses import dataclass, replace
from typing import Optional

PRODUCT_NAME = "cloudo"

DEFAULT_REGION = "eu-central-1"
DEFAULT_PROFILE = None  # boto3 default credential chain
DEFAULT_VPC_CIDR = "10.0.0.0/24"
DEFAULT_INSTANCE_COUNT = 1
DEFAULT_CALL_TIMEOUT = 30.0  # seconds
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.5  # seconds
ANYWHERE_CIDR = "0.0.0.0/0"

MAX_INSTANCE_COUNT = 255

def validate_cidr(cidr: str) -> str:
    """
    Check that a string is an IPv4 network in CIDR notation.

    Args:
        cidr: The CIDR block, e.g. "10.0.0.0/24"

    Returns:
        str: The CIDR block, unchanged

    Raises:
        ValueError: If the block is malformed or has host bits set
    """
    try:
        network = ipaddress.ip_network(cidr, strict=True)
    except ValueError as e:
        raise ValueError(f"Invalid CIDR block '{cidr}': {e}") from e
    if network.version != 4:
        raise ValueError(f"Invalid CIDR block '{cidr}': only IPv4 is supported")
    return cidr

@dataclass(frozen=True)
class ProvisionRequest:
    """Everything a single provisioning run needs to know."""

    vpc_cidr: str = DEFAULT_VPC_CIDR
    instance_count: int = DEFAULT_INSTANCE_COUNT
    region: str = DEFAULT_REGION
    profile: Optional[str] = DEFAULT_PROFILE
    call_timeout: float = DEFAULT_CALL_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY
    teardown_on_failure: bool = False
    ssh_cidr: str = ANYWHERE_CIDR

    def validate(self) -> "ProvisionRequest":
        """
        Validate every field, raising ValueError on the first bad one.

        Returns:
            ProvisionRequest: self, so calls can be chained
        """
        validate_cidr(self.vpc_cidr)
        validate_cidr(self.ssh_cidr)
        if not 0 <= self.instance_count <= MAX_INSTANCE_COUNT:
            raise ValueError(
                f"Instance count must be between 0 and {MAX_INSTANCE_COUNT}, got {self.instance_count}"
            )
        if not self.region:
            raise ValueError("Region must not be empty")
        if self.call_timeout <= 0:
            raise ValueError(f"Call timeout must be positive, got {self.call_timeout}")
        if self.max_retries < 0:
            raise ValueError(f"Max retries must not be negative, got {self.max_retries}")
        if self.retry_base_delay < 0:
            raise ValueError(f"Retry delay must not be negative, got {self.retry_base_delay}")
        return self

    def with_overrides(self, **changes) -> "ProvisionRequest":
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes).validate()
