"""
Broker pool: the set of broker IDs replacement replicas may be drawn from.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from replicaplanner.errors import ConfigurationError, EmptyPoolError


@dataclass(frozen=True)
class BrokerPool:
    """
    Immutable pool of selectable brokers.

    Attributes:
        low_id: Lowest broker ID (inclusive)
        high_id: Highest broker ID (inclusive)
        excluded: Brokers that must never be selected
        members: Explicit broker IDs; when set, only these IDs in
            [low_id, high_id] are selectable
    """
    low_id: int
    high_id: int
    excluded: FrozenSet[int] = field(default_factory=frozenset)
    members: Optional[FrozenSet[int]] = None

    def __post_init__(self):
        if self.low_id < 0 or self.high_id < 0:
            raise ConfigurationError(
                f"Broker IDs must be non-negative, got [{self.low_id}, {self.high_id}]"
            )
        if self.low_id > self.high_id:
            raise ConfigurationError(
                f"First broker ID {self.low_id} is greater than last broker ID {self.high_id}"
            )
        object.__setattr__(self, "excluded", frozenset(self.excluded))
        if self.members is not None:
            object.__setattr__(self, "members", frozenset(self.members))

    @classmethod
    def from_ids(cls, ids: Iterable[int], excluded: Iterable[int] = ()) -> "BrokerPool":
        """
        Create a pool from an explicit set of broker IDs.

        Args:
            ids: Selectable broker IDs
            excluded: Brokers that must never be selected

        Returns:
            Broker pool spanning exactly the given IDs
        """
        members = frozenset(ids)
        if not members:
            raise ConfigurationError("Broker pool needs at least one broker ID")
        return cls(
            low_id=min(members),
            high_id=max(members),
            excluded=frozenset(excluded),
            members=members,
        )

    def _all_ids(self) -> Iterable[int]:
        if self.members is not None:
            return self.members
        return range(self.low_id, self.high_id + 1)

    def in_range(self, broker_id: int) -> bool:
        """Check whether a broker ID lies in the pool bounds."""
        if self.members is not None:
            return broker_id in self.members
        return self.low_id <= broker_id <= self.high_id

    def contains(self, broker_id: int) -> bool:
        """Check whether a broker ID is selectable."""
        return self.in_range(broker_id) and broker_id not in self.excluded

    def __contains__(self, broker_id: int) -> bool:
        return self.contains(broker_id)

    @property
    def size(self) -> int:
        """Number of selectable brokers."""
        return sum(1 for broker_id in self._all_ids() if broker_id not in self.excluded)

    def candidates(self, exclude: Iterable[int] = ()) -> FrozenSet[int]:
        """
        Get selectable brokers minus an additional exclusion set.

        Args:
            exclude: Brokers to leave out on top of the permanent exclusions

        Returns:
            Candidate broker IDs

        Raises:
            EmptyPoolError: If no candidate is left
        """
        skip = self.excluded | frozenset(exclude)
        result = frozenset(b for b in self._all_ids() if b not in skip)

        if not result:
            raise EmptyPoolError(
                f"No broker left in [{self.low_id}, {self.high_id}] "
                f"after excluding {sorted(skip)}"
            )

        return result

    def without(self, *broker_ids: int) -> "BrokerPool":
        """Return a copy of the pool with additional permanent exclusions."""
        return BrokerPool(
            low_id=self.low_id,
            high_id=self.high_id,
            excluded=self.excluded | frozenset(broker_ids),
            members=self.members,
        )
