"""
Best-effort teardown of a partially provisioned network.

Resources are removed in reverse dependency order. The route table is
disassociated from the subnet before it is deleted, so a subnet that can't
be deleted doesn't hold the route table back. Every delete is attempted once;
failures are logged and reported, never raised.
"""

import logging
from typing import List

from botocore.exceptions import BotoCoreError, ClientError

from ..state import NetworkState

module_logger = logging.getLogger(__name__)

def _attempt(description: str, resource_id: str, fn, **kwargs) -> bool:
    try:
        fn(**kwargs)
    except (ClientError, BotoCoreError) as e:
        module_logger.warning(f"Could not {description} {resource_id}: {e}")
        return False
    module_logger.info(f"{description.capitalize()} {resource_id}: done")
    return True

def _delete(state: NetworkState, leftovers: List[str], description: str, resource_id: str, fn, **kwargs):
    if _attempt(description, resource_id, fn, **kwargs):
        state.mark_removed(resource_id)
    else:
        leftovers.append(resource_id)

def teardown_network(ec2_client, state: NetworkState) -> List[str]:
    """
    Delete whatever a provisioning run managed to create.

    Removed resources are marked on the state, so state.remaining_ids() tells
    what still exists afterwards.

    Args:
        ec2_client: boto3 EC2 client
        state: The (possibly partial) state returned by the provisioner

    Returns:
        List[str]: IDs of resources that could not be removed and must be
            cleaned up manually
    """
    leftovers = []

    if state.security_group_id:
        _delete(state, leftovers, "delete security group", state.security_group_id,
                ec2_client.delete_security_group, GroupId=state.security_group_id)

    if state.route_table_id:
        if state.route_table_association_id:
            _attempt("disassociate route table", state.route_table_id,
                     ec2_client.disassociate_route_table,
                     AssociationId=state.route_table_association_id)
        _delete(state, leftovers, "delete route table", state.route_table_id,
                ec2_client.delete_route_table, RouteTableId=state.route_table_id)

    if state.internet_gateway_id:
        # A gateway that never got attached fails the detach but can still be deleted
        _attempt("detach internet gateway", state.internet_gateway_id,
                 ec2_client.detach_internet_gateway,
                 InternetGatewayId=state.internet_gateway_id, VpcId=state.vpc_id)
        _delete(state, leftovers, "delete internet gateway", state.internet_gateway_id,
                ec2_client.delete_internet_gateway, InternetGatewayId=state.internet_gateway_id)

    if state.subnet_id:
        _delete(state, leftovers, "delete subnet", state.subnet_id,
                ec2_client.delete_subnet, SubnetId=state.subnet_id)

    if state.vpc_id:
        _delete(state, leftovers, "delete VPC", state.vpc_id, ec2_client.delete_vpc, VpcId=state.vpc_id)

    if not leftovers:
        module_logger.info("Teardown complete")
    return leftovers
