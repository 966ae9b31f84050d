"""
Error types raised by the provisioning pipeline.

Every failure is terminal for a run. The provisioner wraps the underlying
botocore exception together with the name of the step that failed.
"""

from typing import List, Optional, Tuple, Any

from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
)

TRANSIENT_ERROR_CODES = {
    "RequestLimitExceeded",
    "Throttling",
    "ThrottlingException",
    "ServiceUnavailable",
    "Unavailable",
    "InternalError",
    "InternalFailure",
}

def get_error_code(exc: BaseException) -> Optional[str]:
    """Return the AWS error code of a ClientError, or None for anything else."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None

def is_transient_error(exc: BaseException) -> bool:
    """
    Decide whether a failed call is worth retrying.

    Throttling and service-side unavailability are transient, as are connection
    errors where the request never reached the endpoint. Read timeouts are not:
    the create call may already have gone through.

    Args:
        exc: The exception raised by the client call

    Returns:
        bool: True if the call can safely be attempted again
    """
    if isinstance(exc, (EndpointConnectionError, ConnectTimeoutError)):
        return True
    return get_error_code(exc) in TRANSIENT_ERROR_CODES

class ProvisioningError(Exception):
    """Base class for every failure reported by the provisioner."""

    def __init__(self, step: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.step = step
        self.message = message
        self.cause = cause

    @property
    def transient(self) -> bool:
        return self.cause is not None and is_transient_error(self.cause)

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"

class AuthenticationFailure(ProvisioningError):
    """The session could not be created or the credentials were rejected."""

class ResourceCreationFailure(ProvisioningError):
    """A create, attach, associate or modify call failed."""

class NoZonesAvailable(ProvisioningError):
    """The region reported no availability zone in the available state."""

class TaggingFailure(ProvisioningError):
    """Tagging a freshly created resource failed."""

class ConcurrentRuleFailure(ProvisioningError):
    """
    One or both ingress authorizations failed.

    The security group itself exists; its ingress rules may be partial.
    `failures` holds a (rule, exception) pair for every rule that failed, in
    completion order.
    """

    def __init__(
        self,
        step: str,
        message: str,
        cause: Optional[BaseException] = None,
        failures: Optional[List[Tuple[Any, BaseException]]] = None,
    ):
        super().__init__(step, message, cause)
        self.failures = failures or []

class ProvisioningCancelled(ProvisioningError):
    """The operator cancelled the run before it finished."""
