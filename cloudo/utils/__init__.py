"""
Tagging, retry and IP lookup helpers.
"""

from .tags import get_default_tags, to_aws_tags, tag_resource
from .ip import get_local_public_ip, format_cidr_from_ip
from .retry import RetryPolicy, send_request

__all__ = [
    'get_default_tags',
    'to_aws_tags',
    'tag_resource',
    'get_local_public_ip',
    'format_cidr_from_ip',
    'RetryPolicy',
    'send_request',
]
