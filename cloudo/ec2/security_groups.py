import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from ..config import ANYWHERE_CIDR, PRODUCT_NAME
from ..errors import ConcurrentRuleFailure
from ..state import NetworkState
from ..utils.retry import RetryPolicy, send_request
from ..utils.tags import tag_resource

module_logger = logging.getLogger(__name__)

ALL_PROTOCOLS = "-1"
SSH_PORT = 22

class IngressRule:
    def __init__(
        self,
        protocol: str,
        from_port: int,
        to_port: int,
        cidr: str,
        description: Optional[str] = None
    ):
        self.protocol = protocol
        self.from_port = from_port
        self.to_port = to_port
        self.cidr = cidr
        self.description = description

    def to_request(self, group_id: str) -> Dict[str, Any]:
        """Parameters for AuthorizeSecurityGroupIngress."""
        return {
            "GroupId": group_id,
            "IpProtocol": self.protocol,
            "CidrIp": self.cidr,
            "FromPort": self.from_port,
            "ToPort": self.to_port,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, IngressRule):
            return NotImplemented
        return (self.protocol, self.from_port, self.to_port, self.cidr) == \
            (other.protocol, other.from_port, other.to_port, other.cidr)

    def __repr__(self) -> str:
        return f"IngressRule({self.protocol} {self.cidr} {self.from_port}-{self.to_port})"

def get_default_ingress_rules(vpc_cidr: str, ssh_cidr: str = ANYWHERE_CIDR) -> List[IngressRule]:
    """
    The two rules every cloudo security group gets.

    Args:
        vpc_cidr: CIDR of the VPC; all traffic from it is allowed
        ssh_cidr: Sources allowed to reach port 22 over TCP

    Returns:
        List[IngressRule]: Intra-VPC rule followed by the SSH rule
    """
    return [
        IngressRule(
            protocol=ALL_PROTOCOLS,
            from_port=0,
            to_port=65535,
            cidr=vpc_cidr,
            description="All traffic from inside the VPC",
        ),
        IngressRule(
            protocol="tcp",
            from_port=SSH_PORT,
            to_port=SSH_PORT,
            cidr=ssh_cidr,
            description="SSH access",
        ),
    ]

def authorize_ingress(
    ec2_client,
    group_id: str,
    rules: List[IngressRule],
    policy: Optional[RetryPolicy] = None,
) -> None:
    """
    Authorize ingress rules concurrently, one request per rule.

    Results are collected in completion order, not submission order. The
    first failure observed is the one reported, even if another rule went
    through. All requests have finished by the time this returns.

    Args:
        ec2_client: boto3 EC2 client
        group_id: ID of the security group
        rules: Rules to authorize
        policy: Retry policy for each request

    Raises:
        ConcurrentRuleFailure: If any request failed
    """
    step = "create_security_group"
    policy = policy or RetryPolicy()
    failures: List[Tuple[IngressRule, BaseException]] = []

    with ThreadPoolExecutor(max_workers=max(len(rules), 1)) as executor:
        futures = {
            executor.submit(policy.call, ec2_client.authorize_security_group_ingress, **rule.to_request(group_id)): rule
            for rule in rules
        }
        for future in as_completed(futures):
            rule = futures[future]
            try:
                future.result()
            except (ClientError, BotoCoreError) as e:
                module_logger.error(f"Error authorizing {rule}: {e}")
                failures.append((rule, e))
            else:
                module_logger.debug(f"Authorized {rule}")

    if failures:
        rule, error = failures[0]
        raise ConcurrentRuleFailure(
            step,
            f"Error authorizing {rule}: {error}",
            error,
            failures=failures,
        ) from error

def create_security_group(
    ec2_client,
    state: NetworkState,
    ingress_rules: List[IngressRule],
    name: str = PRODUCT_NAME,
    description: str = f"{PRODUCT_NAME} created security group",
    policy: Optional[RetryPolicy] = None,
) -> str:
    """
    Create a security group in the VPC, tag it and authorize its ingress rules.

    Args:
        ec2_client: boto3 EC2 client
        state: Accumulator holding the VPC ID and receiving the group ID
        ingress_rules: Rules authorized once the group exists
        name: Name of the security group
        description: Description of the security group
        policy: Retry policy for the API calls

    Returns:
        str: The security group ID
    """
    step = "create_security_group"
    policy = policy or RetryPolicy()

    module_logger.info(f"Creating a security group for the vpc ({state.vpc_id})")
    output = send_request(
        policy, step, "creating security group",
        ec2_client.create_security_group,
        VpcId=state.vpc_id,
        GroupName=name,
        Description=description,
    )
    state.security_group_id = output["GroupId"]

    module_logger.info(f"Tagging Security group {state.security_group_id} with creator={PRODUCT_NAME} tag")
    tag_resource(ec2_client, state.security_group_id, policy, step)

    module_logger.info("Adding Ingress rules")
    for rule in ingress_rules:
        module_logger.info(f"Allowing {rule.description or rule}: protocol {rule.protocol} "
                           f"ports {rule.from_port}-{rule.to_port} from {rule.cidr}")
    authorize_ingress(ec2_client, state.security_group_id, ingress_rules, policy)

    module_logger.info("Security group is configured")
    return state.security_group_id
