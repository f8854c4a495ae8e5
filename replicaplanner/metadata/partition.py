"""Partition metadata as reported by the cluster."""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class PartitionDescription:
    """
    Metadata about a topic partition.

    Attributes:
        topic: Topic name
        partition: Partition number
        leader: Leader broker ID (None if the partition has no leader)
        replicas: Replica broker IDs in reported order
    """
    topic: str
    partition: int
    leader: Optional[int]
    replicas: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "replicas", tuple(self.replicas))
