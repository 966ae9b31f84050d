import pytest
from cloudo.errors import NoZonesAvailable, ResourceCreationFailure, TaggingFailure
from cloudo.networking.vpc import (
    create_vpc,
    create_subnet,
    create_internet_gateway,
    create_route_table,
    get_availability_zones,
)
from cloudo.state import NetworkState

CREATOR_TAG = [{"Key": "creator", "Value": "cloudo"}]

@pytest.fixture
def state_with_vpc():
    state = NetworkState()
    state.vpc_id = "vpc-0001"
    return state

def test_create_vpc(ec2_client, fast_policy):
    """Test VPC creation tags the VPC and enables both DNS attributes in order."""
    state = NetworkState()

    vpc_id = create_vpc(ec2_client, state, "10.0.0.0/24", policy=fast_policy)

    assert vpc_id == state.vpc_id == "vpc-0001"
    assert ec2_client.operations() == [
        "create_vpc",
        "create_tags",
        "modify_vpc_attribute",
        "modify_vpc_attribute",
    ]
    assert ec2_client.calls_to("create_vpc") == [{"CidrBlock": "10.0.0.0/24"}]
    assert ec2_client.calls_to("create_tags") == [{"Resources": ["vpc-0001"], "Tags": CREATOR_TAG}]
    assert ec2_client.calls_to("modify_vpc_attribute") == [
        {"VpcId": "vpc-0001", "EnableDnsSupport": {"Value": True}},
        {"VpcId": "vpc-0001", "EnableDnsHostnames": {"Value": True}},
    ]

def test_create_vpc_without_dns(ec2_client, fast_policy):
    """Test DNS attributes can be left alone."""
    create_vpc(ec2_client, NetworkState(), "10.0.0.0/24",
               enable_dns_support=False, enable_dns_hostnames=False, policy=fast_policy)

    assert ec2_client.calls_to("modify_vpc_attribute") == []

def test_create_vpc_failure(fake_ec2, client_error, fast_policy):
    """Test a failed CreateVpc leaves the state empty."""
    client = fake_ec2(fail={"create_vpc": client_error("VpcLimitExceeded")})
    state = NetworkState()

    with pytest.raises(ResourceCreationFailure) as excinfo:
        create_vpc(client, state, "10.0.0.0/24", policy=fast_policy)

    assert excinfo.value.step == "create_vpc"
    assert state.vpc_id is None
    assert client.operations() == ["create_vpc"]

def test_create_vpc_dns_hostnames_failure(fake_ec2, client_error, fast_policy):
    """Test the second DNS attribute call failing still fails the step."""
    client = fake_ec2(fail={"modify_vpc_attribute": [None, client_error("InvalidParameterValue")]})
    state = NetworkState()

    with pytest.raises(ResourceCreationFailure):
        create_vpc(client, state, "10.0.0.0/24", policy=fast_policy)

    assert state.vpc_id == "vpc-0001"
    assert len(client.calls_to("modify_vpc_attribute")) == 2

def test_create_vpc_tagging_failure(fake_ec2, client_error, fast_policy):
    """Test a tagging failure is reported as such and stops the step."""
    client = fake_ec2(fail={"create_tags": client_error("InvalidVpcID.NotFound")})
    state = NetworkState()

    with pytest.raises(TaggingFailure):
        create_vpc(client, state, "10.0.0.0/24", policy=fast_policy)

    assert state.vpc_id == "vpc-0001"
    assert client.calls_to("modify_vpc_attribute") == []

def test_get_availability_zones_filters_state(fake_ec2, fast_policy):
    """Test only available zones are returned, in response order."""
    client = fake_ec2(zones=[
        {"ZoneName": "eu-central-1b", "State": "impaired"},
        {"ZoneName": "eu-central-1c", "State": "available"},
        {"ZoneName": "eu-central-1a", "State": "available"},
    ])

    zones = get_availability_zones(client, "eu-central-1", fast_policy)

    assert zones == ["eu-central-1c", "eu-central-1a"]
    assert client.calls_to("describe_availability_zones") == [
        {"Filters": [{"Name": "region-name", "Values": ["eu-central-1"]}]}
    ]

def test_create_subnet_picks_first_available_zone(fake_ec2, fast_policy, state_with_vpc):
    """Test the subnet lands in the first available zone with the VPC CIDR."""
    client = fake_ec2(zones=[
        {"ZoneName": "eu-central-1a", "State": "unavailable"},
        {"ZoneName": "eu-central-1b", "State": "available"},
        {"ZoneName": "eu-central-1c", "State": "available"},
    ])

    subnet_id = create_subnet(client, state_with_vpc, "10.0.0.0/24", "eu-central-1", fast_policy)

    assert subnet_id == state_with_vpc.subnet_id == "subnet-0001"
    assert client.calls_to("create_subnet") == [
        {"AvailabilityZone": "eu-central-1b", "VpcId": "vpc-0001", "CidrBlock": "10.0.0.0/24"}
    ]
    assert client.calls_to("create_tags") == [{"Resources": ["subnet-0001"], "Tags": CREATOR_TAG}]

def test_create_subnet_no_zones(fake_ec2, fast_policy, state_with_vpc):
    """Test NoZonesAvailable when nothing is in the available state."""
    client = fake_ec2(zones=[{"ZoneName": "eu-central-1a", "State": "impaired"}])

    with pytest.raises(NoZonesAvailable):
        create_subnet(client, state_with_vpc, "10.0.0.0/24", "eu-central-1", fast_policy)

    assert state_with_vpc.subnet_id is None
    assert client.calls_to("create_subnet") == []

def test_create_internet_gateway(ec2_client, fast_policy, state_with_vpc):
    """Test the gateway is attached to the VPC, then tagged."""
    igw_id = create_internet_gateway(ec2_client, state_with_vpc, fast_policy)

    assert igw_id == state_with_vpc.internet_gateway_id == "igw-0001"
    assert ec2_client.operations() == ["create_internet_gateway", "attach_internet_gateway", "create_tags"]
    assert ec2_client.calls_to("attach_internet_gateway") == [
        {"InternetGatewayId": "igw-0001", "VpcId": "vpc-0001"}
    ]

def test_create_internet_gateway_attach_failure(fake_ec2, client_error, fast_policy, state_with_vpc):
    """Test the gateway ID is kept when the attach fails."""
    client = fake_ec2(fail={"attach_internet_gateway": client_error("Resource.AlreadyAssociated")})

    with pytest.raises(ResourceCreationFailure):
        create_internet_gateway(client, state_with_vpc, fast_policy)

    assert state_with_vpc.internet_gateway_id == "igw-0001"

def test_create_route_table(ec2_client, fast_policy, state_with_vpc):
    """Test route table association, tagging and default route."""
    state_with_vpc.subnet_id = "subnet-0001"
    state_with_vpc.internet_gateway_id = "igw-0001"

    rtb_id = create_route_table(ec2_client, state_with_vpc, fast_policy)

    assert rtb_id == state_with_vpc.route_table_id == "rtb-0001"
    assert state_with_vpc.route_table_association_id == "rtbassoc-0001"
    assert ec2_client.operations() == [
        "create_route_table",
        "associate_route_table",
        "create_tags",
        "create_route",
    ]
    assert ec2_client.calls_to("associate_route_table") == [
        {"SubnetId": "subnet-0001", "RouteTableId": "rtb-0001"}
    ]
    assert ec2_client.calls_to("create_route") == [
        {"DestinationCidrBlock": "0.0.0.0/0", "GatewayId": "igw-0001", "RouteTableId": "rtb-0001"}
    ]

def test_create_route_table_association_failure_is_reported(fake_ec2, client_error, fast_policy, state_with_vpc):
    """Test an association error is raised rather than silently ignored."""
    client = fake_ec2(fail={"associate_route_table": client_error("InvalidSubnetID.NotFound")})
    state_with_vpc.subnet_id = "subnet-0001"
    state_with_vpc.internet_gateway_id = "igw-0001"

    with pytest.raises(ResourceCreationFailure) as excinfo:
        create_route_table(client, state_with_vpc, fast_policy)

    assert excinfo.value.step == "create_route_table"
    assert "associating route table" in str(excinfo.value)
    assert client.calls_to("create_route") == []
