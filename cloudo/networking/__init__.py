"""
VPC, subnet, gateway and route table provisioning, plus teardown.
"""

from .vpc import (
    create_vpc,
    create_subnet,
    create_internet_gateway,
    create_route_table,
    get_availability_zones,
)
from .cleanup import teardown_network

__all__ = [
    'create_vpc',
    'create_subnet',
    'create_internet_gateway',
    'create_route_table',
    'get_availability_zones',
    'teardown_network',
]
