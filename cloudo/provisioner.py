"""
Network provisioning pipeline

Creates a VPC, subnet, internet gateway, route table and security group in
that order. Each step needs the IDs produced by the steps before it, so the
pipeline stops at the first failure and hands back whatever it managed to
create. Nothing is rolled back unless the request asks for a best-effort
teardown.
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ProvisionRequest
from .ec2.security_groups import create_security_group, get_default_ingress_rules
from .errors import ProvisioningError
from .networking.cleanup import teardown_network
from .networking.vpc import (
    create_internet_gateway,
    create_route_table,
    create_subnet,
    create_vpc,
)
from .state import NetworkState
from .utils.retry import RetryPolicy

module_logger = logging.getLogger(__name__)

class NetworkProvisioner:
    """
    Provisions the cloudo network topology with an EC2 client.
    """

    def __init__(self, ec2_client):
        """
        Initialize the provisioner.

        Args:
            ec2_client: boto3 EC2 client, already bound to the target region
        """
        self.ec2_client = ec2_client

    def provision(
        self,
        request: ProvisionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[NetworkState, Optional[ProvisioningError]]:
        """
        Run the five provisioning steps.

        Args:
            request: Validated provisioning request
            cancel_event: Set it to stop the run at the next API call

        Returns:
            Tuple[NetworkState, Optional[ProvisioningError]]: The populated
                state and None on success; the partial state and the error of
                the failed step otherwise. After a teardown,
                state.remaining_ids() lists what is still in place
        """
        state = NetworkState()
        policy = RetryPolicy(
            max_retries=request.max_retries,
            base_delay=request.retry_base_delay,
            cancel_event=cancel_event,
        )
        client = self.ec2_client

        steps = (
            lambda: create_vpc(client, state, request.vpc_cidr, policy=policy),
            lambda: create_subnet(client, state, request.vpc_cidr, request.region, policy=policy),
            lambda: create_internet_gateway(client, state, policy=policy),
            lambda: create_route_table(client, state, policy=policy),
            lambda: create_security_group(
                client,
                state,
                get_default_ingress_rules(request.vpc_cidr, request.ssh_cidr),
                policy=policy,
            ),
        )

        try:
            for step in steps:
                step()
        except ProvisioningError as e:
            module_logger.error(f"Provisioning failed at {e}")
            if state.created_ids():
                module_logger.warning(f"Resources created before the failure: {', '.join(state.created_ids())}")
                if request.teardown_on_failure:
                    module_logger.info("Tearing down partially created resources")
                    leftovers = teardown_network(client, state)
                    if leftovers:
                        module_logger.error(f"Teardown incomplete, remove manually: {', '.join(leftovers)}")
                else:
                    module_logger.warning("These resources are not removed automatically")
            return state, e

        module_logger.info(f"Network provisioned in {request.region}: {state.vpc_id}")
        return state, None

def provision(
    ec2_client,
    request: ProvisionRequest,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[NetworkState, Optional[ProvisioningError]]:
    """
    Provision the network with a one-off NetworkProvisioner.

    Args:
        ec2_client: boto3 EC2 client
        request: Validated provisioning request
        cancel_event: Optional cancellation token

    Returns:
        Tuple[NetworkState, Optional[ProvisioningError]]: See NetworkProvisioner.provision
    """
    return NetworkProvisioner(ec2_client).provision(request, cancel_event)
