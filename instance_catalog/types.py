"""Type definitions for the instance catalog."""

from dataclasses import dataclass, field, replace
import json
import uuid
from typing_extensions import Self


@dataclass
class InstanceInfo:
    """One entry in the instances index."""

    id: uuid.UUID
    name: str
    order_index: int = 0

    def to_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name, "order_index": self.order_index}

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create from dict. Raises KeyError/ValueError/TypeError on bad input."""
        order_index = data["order_index"]
        if not isinstance(order_index, int) or isinstance(order_index, bool):
            raise TypeError(f"order_index must be an integer, got {order_index!r}")
        name = data["name"]
        if not isinstance(name, str):
            raise TypeError(f"name must be a string, got {name!r}")
        raw_id = data["id"]
        if not isinstance(raw_id, str):
            raise TypeError(f"id must be a string, got {raw_id!r}")
        return cls(id=uuid.UUID(raw_id), name=name, order_index=order_index)


@dataclass
class InstanceIndex:
    """Ordered list of all known instances, persisted as instances.index.json."""

    instances: list[InstanceInfo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"instances": [i.to_dict() for i in self.instances]}

    def to_json(self) -> str:
        """Serialize to a pretty-printed JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, data: str) -> Self:
        return cls.from_dict(json.loads(data))

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        if not isinstance(data, dict) or not isinstance(data.get("instances"), list):
            raise ValueError("index document must be an object with an 'instances' list")
        return cls(instances=[InstanceInfo.from_dict(entry) for entry in data["instances"]])

    def copy(self) -> Self:
        """Copy deep enough that callers can't mutate the original's entries."""
        return type(self)(instances=[replace(i) for i in self.instances])

    def find(self, instance_id: uuid.UUID) -> InstanceInfo | None:
        return next((i for i in self.instances if i.id == instance_id), None)

    def ids(self) -> list[uuid.UUID]:
        return [i.id for i in self.instances]
