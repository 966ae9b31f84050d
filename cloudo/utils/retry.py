import logging
import threading
import time
from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import (
    ProvisioningCancelled,
    ResourceCreationFailure,
    get_error_code,
    is_transient_error,
)

module_logger = logging.getLogger(__name__)

MAX_BACKOFF = 20.0  # seconds

class RetryPolicy:
    """
    Runs client calls with backoff on transient errors and honours cancellation.

    Permanent errors (validation, permissions, missing resources) are raised on
    the first attempt. The cancel event is checked before every attempt and
    interrupts any backoff wait.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 0.5,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.cancel_event = cancel_event

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def backoff(self, attempt: int) -> float:
        """Delay before retry number `attempt` (0-based)."""
        return min(self.base_delay * (2 ** attempt), MAX_BACKOFF)

    def _check_cancelled(self, operation: str) -> None:
        if self.cancelled:
            raise ProvisioningCancelled(operation, "Provisioning cancelled by operator")

    def _wait(self, delay: float) -> None:
        if self.cancel_event is not None:
            self.cancel_event.wait(delay)
        else:
            time.sleep(delay)

    def call(self, fn: Callable[..., Any], **kwargs) -> Any:
        """
        Call `fn(**kwargs)`, retrying transient failures.

        Args:
            fn: A bound boto3 client method
            **kwargs: Request parameters

        Returns:
            Any: The client response

        Raises:
            ProvisioningCancelled: If the cancel event is set
            Exception: The last client error once retries are exhausted
        """
        operation = getattr(fn, "__name__", "call")
        attempt = 0
        while True:
            self._check_cancelled(operation)
            try:
                return fn(**kwargs)
            except Exception as e:
                if not is_transient_error(e) or attempt >= self.max_retries:
                    raise
                delay = self.backoff(attempt)
                attempt += 1
                module_logger.warning(
                    f"{operation} failed with {get_error_code(e) or type(e).__name__}, "
                    f"retrying in {delay:.1f}s ({attempt}/{self.max_retries})"
                )
                self._wait(delay)

def send_request(policy: RetryPolicy, step: str, action: str, fn: Callable[..., Any], **kwargs) -> Any:
    """
    Send one EC2 request, turning client errors into ResourceCreationFailure.

    Args:
        policy: Retry policy used for the call
        step: Name of the pipeline step
        action: Human-readable description used in the error message
        fn: A bound boto3 client method
        **kwargs: Request parameters

    Returns:
        Any: The client response
    """
    try:
        return policy.call(fn, **kwargs)
    except (ClientError, BotoCoreError) as e:
        raise ResourceCreationFailure(step, f"Error {action}: {e}", e) from e
