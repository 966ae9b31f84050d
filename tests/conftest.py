"""
Shared test fixtures and configuration.
"""

import itertools
import os
import sys
import threading
from collections import defaultdict

import pytest
from botocore.exceptions import ClientError

# Add the parent directory to the path so we can import the cloudo package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

def make_client_error(code, operation="Operation"):
    """Build a botocore ClientError with the given AWS error code."""
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised by test"}}, operation)

class FakeEC2Client:
    """
    Stand-in for a boto3 EC2 client.

    Records every call and returns fresh IDs. `fail` maps an operation name to
    an exception, a list of exceptions (consumed one per call, then success),
    or a callable taking the request kwargs and returning an exception or None.
    """

    def __init__(self, zones=None, fail=None):
        if zones is None:
            zones = [{"ZoneName": "eu-central-1a", "State": "available", "RegionName": "eu-central-1"}]
        self.zones = zones
        self.fail = dict(fail or {})
        self.calls = []
        self._lock = threading.Lock()
        self._counters = defaultdict(lambda: itertools.count(1))

    def _record(self, operation, kwargs):
        with self._lock:
            self.calls.append((operation, kwargs))
            failure = self.fail.get(operation)
            if isinstance(failure, list):
                failure = failure.pop(0) if failure else None
        if callable(failure):
            failure = failure(kwargs)
        if failure is not None:
            raise failure

    def _new_id(self, prefix):
        with self._lock:
            return f"{prefix}-{next(self._counters[prefix]):04d}"

    def operations(self):
        return [operation for operation, _ in self.calls]

    def calls_to(self, operation):
        return [kwargs for op, kwargs in self.calls if op == operation]

    # Create calls

    def create_vpc(self, **kwargs):
        self._record("create_vpc", kwargs)
        return {"Vpc": {"VpcId": self._new_id("vpc"), "CidrBlock": kwargs["CidrBlock"]}}

    def create_tags(self, **kwargs):
        self._record("create_tags", kwargs)
        return {}

    def modify_vpc_attribute(self, **kwargs):
        self._record("modify_vpc_attribute", kwargs)
        return {}

    def describe_availability_zones(self, **kwargs):
        self._record("describe_availability_zones", kwargs)
        return {"AvailabilityZones": list(self.zones)}

    def create_subnet(self, **kwargs):
        self._record("create_subnet", kwargs)
        return {"Subnet": {"SubnetId": self._new_id("subnet"), **kwargs}}

    def create_internet_gateway(self, **kwargs):
        self._record("create_internet_gateway", kwargs)
        return {"InternetGateway": {"InternetGatewayId": self._new_id("igw")}}

    def attach_internet_gateway(self, **kwargs):
        self._record("attach_internet_gateway", kwargs)
        return {}

    def create_route_table(self, **kwargs):
        self._record("create_route_table", kwargs)
        return {"RouteTable": {"RouteTableId": self._new_id("rtb"), "VpcId": kwargs["VpcId"]}}

    def associate_route_table(self, **kwargs):
        self._record("associate_route_table", kwargs)
        return {"AssociationId": self._new_id("rtbassoc")}

    def create_route(self, **kwargs):
        self._record("create_route", kwargs)
        return {"Return": True}

    def create_security_group(self, **kwargs):
        self._record("create_security_group", kwargs)
        return {"GroupId": self._new_id("sg")}

    def authorize_security_group_ingress(self, **kwargs):
        self._record("authorize_security_group_ingress", kwargs)
        return {"Return": True}

    # Teardown calls

    def delete_security_group(self, **kwargs):
        self._record("delete_security_group", kwargs)
        return {}

    def detach_internet_gateway(self, **kwargs):
        self._record("detach_internet_gateway", kwargs)
        return {}

    def delete_internet_gateway(self, **kwargs):
        self._record("delete_internet_gateway", kwargs)
        return {}

    def disassociate_route_table(self, **kwargs):
        self._record("disassociate_route_table", kwargs)
        return {}

    def delete_subnet(self, **kwargs):
        self._record("delete_subnet", kwargs)
        return {}

    def delete_route_table(self, **kwargs):
        self._record("delete_route_table", kwargs)
        return {}

    def delete_vpc(self, **kwargs):
        self._record("delete_vpc", kwargs)
        return {}

@pytest.fixture
def client_error():
    """Fixture returning the ClientError factory."""
    return make_client_error

@pytest.fixture
def fake_ec2():
    """Fixture building fake EC2 clients: fake_ec2(zones=..., fail=...)."""
    return FakeEC2Client

@pytest.fixture
def ec2_client():
    """A fake EC2 client on which every call succeeds."""
    return FakeEC2Client()

@pytest.fixture
def fast_policy():
    """Retry policy without backoff delay."""
    from cloudo.utils.retry import RetryPolicy
    return RetryPolicy(max_retries=3, base_delay=0)
