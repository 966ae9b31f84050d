from typing import Dict, List, Optional

class _SetOnce:
    """Attribute that may be assigned a single time."""

    def __set_name__(self, owner, name):
        self.name = name
        self.attr = f"_{name}"

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return getattr(instance, self.attr, None)

    def __set__(self, instance, value):
        if getattr(instance, self.attr, None) is not None:
            raise AttributeError(f"{self.name} is already set to {getattr(instance, self.attr)}")
        setattr(instance, self.attr, value)

class NetworkState:
    """
    Identifiers of the resources created by one provisioning run.

    Each field is populated by the step that creates the resource and can't
    be reassigned afterwards.
    """

    FIELDS = (
        "vpc_id",
        "subnet_id",
        "internet_gateway_id",
        "route_table_id",
        "security_group_id",
    )

    vpc_id = _SetOnce()
    subnet_id = _SetOnce()
    internet_gateway_id = _SetOnce()
    route_table_id = _SetOnce()
    security_group_id = _SetOnce()

    # Needed to detach the route table from the subnet on teardown
    route_table_association_id = _SetOnce()

    def __init__(self):
        self.removed = set()

    def is_complete(self) -> bool:
        return all(getattr(self, name) is not None for name in self.FIELDS)

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in self.FIELDS}

    def created_ids(self) -> List[str]:
        """IDs that have been set, in creation order."""
        return [value for value in self.as_dict().values() if value is not None]

    def mark_removed(self, resource_id: str):
        self.removed.add(resource_id)

    def remaining_ids(self) -> List[str]:
        """IDs that were created and not removed by a teardown."""
        return [value for value in self.created_ids() if value not in self.removed]

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value!r}" for name, value in self.as_dict().items())
        return f"NetworkState({fields})"
