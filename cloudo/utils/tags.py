from typing import Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..config import PRODUCT_NAME
from ..errors import TaggingFailure
from .retry import RetryPolicy

CREATOR_TAG_KEY = "creator"

def get_default_tags(creator: str = PRODUCT_NAME) -> Dict[str, str]:
    """
    Get the tags every resource created by cloudo carries.

    Args:
        creator: Value of the creator tag

    Returns:
        Dict[str, str]: Dictionary of default tags
    """
    return {CREATOR_TAG_KEY: creator}

def to_aws_tags(tags: Dict[str, str]) -> List[Dict[str, str]]:
    """Convert a plain mapping to the Key/Value list the EC2 API expects."""
    return [{"Key": key, "Value": value} for key, value in tags.items()]

def tag_resource(
    ec2_client,
    resource_id: str,
    policy: Optional[RetryPolicy] = None,
    step: str = "tag",
) -> None:
    """
    Tag a single resource with the creator tag.

    Args:
        ec2_client: boto3 EC2 client
        resource_id: ID of the resource to tag
        policy: Retry policy used for the call
        step: Name of the pipeline step, used in the error

    Raises:
        TaggingFailure: If the CreateTags call fails
    """
    policy = policy or RetryPolicy()
    try:
        policy.call(
            ec2_client.create_tags,
            Resources=[resource_id],
            Tags=to_aws_tags(get_default_tags()),
        )
    except (ClientError, BotoCoreError) as e:
        raise TaggingFailure(step, f"Error tagging {resource_id}: {e}", e) from e
