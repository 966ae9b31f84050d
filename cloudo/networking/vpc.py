import logging
from typing import List, Optional

from ..config import ANYWHERE_CIDR, PRODUCT_NAME
from ..errors import NoZonesAvailable
from ..state import NetworkState
from ..utils.retry import RetryPolicy, send_request
from ..utils.tags import tag_resource

module_logger = logging.getLogger(__name__)

ZONE_AVAILABLE = "available"

def create_vpc(
    ec2_client,
    state: NetworkState,
    cidr_block: str,
    enable_dns_support: bool = True,
    enable_dns_hostnames: bool = True,
    policy: Optional[RetryPolicy] = None,
) -> str:
    """
    Create a VPC, tag it and enable its DNS attributes.

    Args:
        ec2_client: boto3 EC2 client
        state: Accumulator receiving the VPC ID
        cidr_block: CIDR block for the VPC
        enable_dns_support: Whether to enable DNS support
        enable_dns_hostnames: Whether to enable DNS hostnames
        policy: Retry policy for the API calls

    Returns:
        str: The VPC ID
    """
    step = "create_vpc"
    policy = policy or RetryPolicy()

    module_logger.info("Creating VPC")
    output = send_request(policy, step, "creating VPC", ec2_client.create_vpc, CidrBlock=cidr_block)
    state.vpc_id = output["Vpc"]["VpcId"]
    module_logger.info(f"VPC (CIDR: {cidr_block}) is created with id: {state.vpc_id}")

    module_logger.info(f"Tagging VPC {state.vpc_id} with creator={PRODUCT_NAME} tag")
    tag_resource(ec2_client, state.vpc_id, policy, step)

    # AWS accepts only one attribute per ModifyVpcAttribute call
    if enable_dns_support:
        module_logger.info("Enabling VPC dns-support")
        send_request(
            policy, step, "enabling VPC dns-support",
            ec2_client.modify_vpc_attribute,
            VpcId=state.vpc_id,
            EnableDnsSupport={"Value": True},
        )
    if enable_dns_hostnames:
        module_logger.info("Enabling VPC dns-hostnames")
        send_request(
            policy, step, "enabling VPC dns-hostnames",
            ec2_client.modify_vpc_attribute,
            VpcId=state.vpc_id,
            EnableDnsHostnames={"Value": True},
        )

    module_logger.info("VPC is successfully configured. DHCP option set is automatically created by AWS")
    return state.vpc_id

def get_availability_zones(
    ec2_client,
    region: str,
    policy: Optional[RetryPolicy] = None,
) -> List[str]:
    """
    Get the availability zones of a region that are in the available state.

    Args:
        ec2_client: boto3 EC2 client
        region: Region name to filter on
        policy: Retry policy for the API call

    Returns:
        List[str]: Zone names, in the order the API returned them
    """
    policy = policy or RetryPolicy()
    output = send_request(
        policy, "create_subnet", "listing availability zones",
        ec2_client.describe_availability_zones,
        Filters=[{"Name": "region-name", "Values": [region]}],
    )
    return [
        zone["ZoneName"]
        for zone in output.get("AvailabilityZones", [])
        if zone.get("State") == ZONE_AVAILABLE
    ]

def create_subnet(
    ec2_client,
    state: NetworkState,
    cidr_block: str,
    region: str,
    policy: Optional[RetryPolicy] = None,
) -> str:
    """
    Create a subnet in the first available zone of the region.

    Args:
        ec2_client: boto3 EC2 client
        state: Accumulator holding the VPC ID and receiving the subnet ID
        cidr_block: CIDR block for the subnet
        region: Region whose zones are considered
        policy: Retry policy for the API calls

    Returns:
        str: The subnet ID

    Raises:
        NoZonesAvailable: If no zone of the region is available
    """
    step = "create_subnet"
    policy = policy or RetryPolicy()

    module_logger.info(f"Creating Subnet for {state.vpc_id}")
    zones = get_availability_zones(ec2_client, region, policy)
    if not zones:
        raise NoZonesAvailable(step, f"No zones are available for subnet creation in {region}")
    zone = zones[0]
    module_logger.info(f"Available zones: {', '.join(zones)}")
    module_logger.info(f"Picking: {zone}")

    output = send_request(
        policy, step, "creating subnet",
        ec2_client.create_subnet,
        AvailabilityZone=zone,
        VpcId=state.vpc_id,
        CidrBlock=cidr_block,
    )
    state.subnet_id = output["Subnet"]["SubnetId"]
    module_logger.info(f"Subnet (CIDR: {cidr_block}) is created with id: {state.subnet_id}")

    module_logger.info(f"Tagging Subnet {state.subnet_id} with creator={PRODUCT_NAME} tag")
    tag_resource(ec2_client, state.subnet_id, policy, step)
    module_logger.info("Subnet is successfully configured")
    return state.subnet_id

def create_internet_gateway(
    ec2_client,
    state: NetworkState,
    policy: Optional[RetryPolicy] = None,
) -> str:
    """
    Create an internet gateway, attach it to the VPC and tag it.

    Returns:
        str: The internet gateway ID
    """
    step = "create_internet_gateway"
    policy = policy or RetryPolicy()

    module_logger.info("Creating Internet Gateway")
    output = send_request(policy, step, "creating internet gateway", ec2_client.create_internet_gateway)
    state.internet_gateway_id = output["InternetGateway"]["InternetGatewayId"]
    module_logger.info(f"IG ({state.internet_gateway_id}) created. Attaching to VPC {state.vpc_id} ...")

    send_request(
        policy, step, "attaching internet gateway",
        ec2_client.attach_internet_gateway,
        InternetGatewayId=state.internet_gateway_id,
        VpcId=state.vpc_id,
    )

    module_logger.info(f"Tagging IG {state.internet_gateway_id} with creator={PRODUCT_NAME} tag")
    tag_resource(ec2_client, state.internet_gateway_id, policy, step)
    module_logger.info("Internet gateway successfully created")
    return state.internet_gateway_id

def create_route_table(
    ec2_client,
    state: NetworkState,
    policy: Optional[RetryPolicy] = None,
) -> str:
    """
    Create a route table for the VPC with a default route to the internet gateway.

    The table is associated with the subnet before the route is added.

    Returns:
        str: The route table ID
    """
    step = "create_route_table"
    policy = policy or RetryPolicy()

    module_logger.info("Creating a route table for the vpc")
    output = send_request(
        policy, step, "creating route table",
        ec2_client.create_route_table,
        VpcId=state.vpc_id,
    )
    state.route_table_id = output["RouteTable"]["RouteTableId"]

    module_logger.info(f"Route table ({state.route_table_id}) is created. Associating to Subnet {state.subnet_id}")
    association = send_request(
        policy, step, "associating route table",
        ec2_client.associate_route_table,
        SubnetId=state.subnet_id,
        RouteTableId=state.route_table_id,
    )
    state.route_table_association_id = association["AssociationId"]

    module_logger.info(f"Tagging Route table {state.route_table_id} with creator={PRODUCT_NAME} tag")
    tag_resource(ec2_client, state.route_table_id, policy, step)
    module_logger.info("Route table successfully created")

    module_logger.info(f"Creating a route to Internet Gateway ({state.internet_gateway_id})")
    send_request(
        policy, step, "creating default route",
        ec2_client.create_route,
        DestinationCidrBlock=ANYWHERE_CIDR,
        GatewayId=state.internet_gateway_id,
        RouteTableId=state.route_table_id,
    )
    module_logger.info("Route table is configured")
    return state.route_table_id
