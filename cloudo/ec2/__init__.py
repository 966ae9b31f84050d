"""
Security group provisioning for the cloudo network.
"""

from .security_groups import (
    create_security_group,
    authorize_ingress,
    get_default_ingress_rules,
    IngressRule,
)

__all__ = [
    'create_security_group',
    'authorize_ingress',
    'get_default_ingress_rules',
    'IngressRule',
]
