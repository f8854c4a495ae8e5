"""
Reassignment policies.

A policy turns the current replica set of one partition into a new one:
- ScalePolicy: grow or shrink the replication factor
- DecommissionPolicy: move replicas off a single broker
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple, Type

from replicaplanner.errors import (
    ConfigurationError,
    InsufficientBrokersError,
    InvalidExplicitTargetError,
    NoCandidateError,
    NoReplacementFoundError,
    OutOfRangeError,
    PlanningError,
)
from replicaplanner.planner.pool import BrokerPool
from replicaplanner.planner.replicas import ReplicaSet
from replicaplanner.planner.selector import CandidateSelector
from replicaplanner.utils.logging import get_logger

logger = get_logger(__name__)


class ReassignmentPolicy(ABC):
    """Abstract base class for reassignment policies."""

    # Errors that abort the whole plan instead of being recorded per partition
    fatal_errors: Tuple[Type[PlanningError], ...] = ()

    @abstractmethod
    def reassign(self, replicas: ReplicaSet) -> Optional[ReplicaSet]:
        """
        Compute new replicas for one partition.

        Args:
            replicas: Current replicas, leader first

        Returns:
            New replica set, or None if the partition is not affected

        Raises:
            PlanningError: If no valid replica set can be computed
        """
        pass

    def is_fatal(self, error: PlanningError) -> bool:
        return isinstance(error, self.fatal_errors)


class ScalePolicy(ReassignmentPolicy):
    """
    Change the replication factor of a partition.

    Scaling up keeps every current replica and appends randomly picked
    brokers. Scaling down keeps the leader and drops a random subset of the
    followers. Scaling to zero yields the deletion sentinel.
    """

    def __init__(
        self,
        target_replication: int,
        pool: BrokerPool,
        selector: CandidateSelector,
    ):
        """
        Initialize scale policy.

        Args:
            target_replication: Desired number of replicas
            pool: Brokers new replicas may be placed on
            selector: Candidate selector
        """
        self.target_replication = target_replication
        self.pool = pool
        self.selector = selector

    def reassign(self, replicas: ReplicaSet) -> Optional[ReplicaSet]:
        target = self.target_replication

        if target == 0:
            return ReplicaSet.deletion()

        if target < 0:
            raise OutOfRangeError(f"Replication factor {target} is negative")

        if target > self.pool.size:
            raise InsufficientBrokersError(
                f"Replication factor {target} is greater than the "
                f"{self.pool.size} brokers available"
            )

        if target == len(replicas):
            return replicas

        if target > len(replicas):
            return self._scale_up(replicas, target)

        return self._scale_down(replicas, target)

    def _scale_up(self, replicas: ReplicaSet, target: int) -> ReplicaSet:
        added = []

        while len(replicas) + len(added) < target:
            used = set(replicas) | set(added)
            added.append(self.selector.pick(self.pool, used))

        logger.debug(
            "Scaled up replicas",
            old_replicas=replicas.to_list(),
            added=added,
        )

        return replicas.extend(added)

    def _scale_down(self, replicas: ReplicaSet, target: int) -> ReplicaSet:
        followers = self.selector.shuffled(replicas.followers)

        # Stable sort: excluded followers move to the tail and go first
        followers.sort(key=lambda broker_id: broker_id in self.pool.excluded)
        retained = set(followers[:target - 1])

        new_replicas = ReplicaSet(
            [replicas.leader] + [b for b in replicas.followers if b in retained]
        )

        logger.debug(
            "Scaled down replicas",
            old_replicas=replicas.to_list(),
            new_replicas=new_replicas.to_list(),
        )

        return new_replicas


class DecommissionPolicy(ReassignmentPolicy):
    """
    Replace one broker in every replica set it belongs to.

    The replacement takes the position of the decommissioned broker, so a
    decommissioned leader is replaced by the new leader designee.
    """

    fatal_errors = (NoReplacementFoundError, InvalidExplicitTargetError)

    def __init__(
        self,
        subject: int,
        selector: CandidateSelector,
        pool: Optional[BrokerPool] = None,
        explicit_replacement: Optional[int] = None,
        leader_only: bool = False,
        exclude: Iterable[int] = (),
    ):
        """
        Initialize decommission policy.

        Args:
            subject: Broker to move replicas away from
            selector: Candidate selector
            pool: Brokers to draw replacements from (random mode)
            explicit_replacement: Broker taking over every replica (explicit mode)
            leader_only: Only touch partitions led by the subject
            exclude: Operator exclusion list

        Raises:
            ConfigurationError: If both or neither of pool and
                explicit_replacement are given
            InvalidExplicitTargetError: If the explicit replacement can
                never be valid
        """
        if (pool is None) == (explicit_replacement is None):
            raise ConfigurationError(
                "Exactly one of a broker range and an explicit replacement must be given"
            )

        exclude = frozenset(exclude)

        if explicit_replacement is not None:
            if explicit_replacement == subject:
                raise InvalidExplicitTargetError(
                    f"Broker {subject} cannot replace itself"
                )
            if explicit_replacement in exclude:
                raise InvalidExplicitTargetError(
                    f"Replacement broker {explicit_replacement} is in the exclusion list"
                )

        self.subject = subject
        self.selector = selector
        self.pool = pool.without(subject, *exclude) if pool is not None else None
        self.explicit_replacement = explicit_replacement
        self.leader_only = leader_only

    def reassign(self, replicas: ReplicaSet) -> Optional[ReplicaSet]:
        if self.subject not in replicas:
            return None

        if self.leader_only and replicas.leader != self.subject:
            return None

        replacement = self._replacement_for(replicas)

        logger.debug(
            "Replacing broker",
            broker_id=self.subject,
            replacement=replacement,
            position=replicas.index(self.subject),
        )

        return replicas.replace(self.subject, replacement)

    def _replacement_for(self, replicas: ReplicaSet) -> int:
        if self.explicit_replacement is not None:
            return self.selector.pick_explicit(self.explicit_replacement, replicas)

        try:
            return self.selector.pick(self.pool, replicas)
        except NoCandidateError as e:
            raise NoReplacementFoundError(
                f"Cannot find any replacement for broker {self.subject}. "
                "Maybe you have only a single broker in your cluster?"
            ) from e
