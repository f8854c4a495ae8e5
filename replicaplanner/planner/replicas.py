"""
Replica set value types.

A replica set is the ordered list of brokers hosting a partition. The first
broker is the leader.
"""

from typing import Iterable, Iterator, NamedTuple, Optional, Tuple


class PartitionKey(NamedTuple):
    """Topic partition identifier."""

    topic: str
    partition: int

    def __str__(self) -> str:
        return f"{self.topic}-{self.partition}"


class ReplicaSet:
    """
    Immutable, duplicate-free, leader-first list of broker IDs.

    Transformations (replace, append, truncate) return new instances.
    The empty set is reserved for the topic-deletion sentinel returned by
    scaling to zero replicas.
    """

    __slots__ = ("_brokers",)

    def __init__(self, brokers: Iterable[int]):
        brokers = tuple(brokers)

        if not brokers:
            raise ValueError("Replica set needs at least one broker")
        if len(set(brokers)) != len(brokers):
            raise ValueError(f"Duplicate broker in replica set {list(brokers)}")
        for broker_id in brokers:
            if isinstance(broker_id, bool) or not isinstance(broker_id, int) or broker_id < 0:
                raise ValueError(f"Invalid broker ID {broker_id!r}")

        self._brokers: Tuple[int, ...] = brokers

    @classmethod
    def deletion(cls) -> "ReplicaSet":
        """Sentinel for 'delete the topic' (no replicas at all)."""
        instance = cls.__new__(cls)
        instance._brokers = ()
        return instance

    @classmethod
    def from_metadata(cls, leader: Optional[int], replicas: Iterable[int]) -> "ReplicaSet":
        """
        Build a replica set from reported metadata, leader first.

        Args:
            leader: Current leader broker ID (None if the partition has none)
            replicas: Replica broker IDs in reported order

        Returns:
            Replica set with the leader moved to position 0 and the other
            replicas in their reported order
        """
        replicas = list(replicas)
        if leader is not None and leader in replicas:
            replicas.remove(leader)
            replicas.insert(0, leader)
        return cls(replicas)

    @property
    def brokers(self) -> Tuple[int, ...]:
        return self._brokers

    @property
    def leader(self) -> Optional[int]:
        return self._brokers[0] if self._brokers else None

    @property
    def followers(self) -> Tuple[int, ...]:
        return self._brokers[1:]

    @property
    def is_deletion(self) -> bool:
        return not self._brokers

    def index(self, broker_id: int) -> int:
        return self._brokers.index(broker_id)

    def replace(self, old: int, new: int) -> "ReplicaSet":
        """
        Replace a broker in place.

        Args:
            old: Broker to remove
            new: Broker taking over the same position

        Returns:
            New replica set
        """
        position = self._brokers.index(old)
        brokers = list(self._brokers)
        brokers[position] = new
        return ReplicaSet(brokers)

    def extend(self, broker_ids: Iterable[int]) -> "ReplicaSet":
        """Append brokers at the tail."""
        return ReplicaSet(self._brokers + tuple(broker_ids))

    def to_list(self) -> list:
        return list(self._brokers)

    def __contains__(self, broker_id: object) -> bool:
        return broker_id in self._brokers

    def __iter__(self) -> Iterator[int]:
        return iter(self._brokers)

    def __len__(self) -> int:
        return len(self._brokers)

    def __getitem__(self, index: int) -> int:
        return self._brokers[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReplicaSet):
            return self._brokers == other._brokers
        if isinstance(other, (list, tuple)):
            return list(self._brokers) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._brokers)

    def __repr__(self) -> str:
        if self.is_deletion:
            return "ReplicaSet.deletion()"
        return f"ReplicaSet({list(self._brokers)})"
