"""
Plan builder.

Folds a reassignment policy over the partitions reported by the cluster
metadata source and collects the resulting plan.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from replicaplanner.errors import MetadataSourceError, PlanningError
from replicaplanner.metadata.partition import PartitionDescription
from replicaplanner.planner.policy import ReassignmentPolicy
from replicaplanner.planner.replicas import PartitionKey, ReplicaSet
from replicaplanner.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReassignmentEntry:
    """
    New placement for one partition.

    Attributes:
        key: Topic partition
        old_replicas: Replicas before the reassignment, leader first
        new_replicas: Replicas after the reassignment, leader first
    """
    key: PartitionKey
    old_replicas: ReplicaSet
    new_replicas: ReplicaSet

    @property
    def topic(self) -> str:
        return self.key.topic

    @property
    def partition(self) -> int:
        return self.key.partition

    @property
    def changed(self) -> bool:
        """Check if the entry moves any replica or changes the leader."""
        return self.old_replicas != self.new_replicas


@dataclass
class PlanResult:
    """
    Outcome of one planning run.

    Attributes:
        entries: Per-partition placements in metadata order
        errors: Per-partition errors that did not abort the run
        skipped: Partitions the policy did not touch
        topics_to_delete: Topics scaled to zero replicas
    """
    entries: List[ReassignmentEntry] = field(default_factory=list)
    errors: Dict[PartitionKey, PlanningError] = field(default_factory=dict)
    skipped: List[PartitionKey] = field(default_factory=list)
    topics_to_delete: List[str] = field(default_factory=list)

    def changed_entries(self) -> List[ReassignmentEntry]:
        return [entry for entry in self.entries if entry.changed]

    def summary(self) -> dict:
        """Get counters for diagnostics."""
        return {
            "partitions": len(self.entries),
            "changed": len(self.changed_entries()),
            "errors": len(self.errors),
            "skipped": len(self.skipped),
            "topics_to_delete": len(self.topics_to_delete),
        }


class PlanBuilder:
    """
    Applies a policy to every partition.

    Per-partition errors are recorded and the partition keeps its current
    replicas. Errors the policy declares fatal abort the run and no partial
    plan is returned.
    """

    def __init__(self, policy: ReassignmentPolicy):
        """
        Initialize plan builder.

        Args:
            policy: Reassignment policy to apply
        """
        self.policy = policy

    def build(self, partitions: Iterable[PartitionDescription]) -> PlanResult:
        """
        Build a reassignment plan.

        Args:
            partitions: Partition metadata in listing order

        Returns:
            Plan result

        Raises:
            MetadataSourceError: If a partition has an invalid replica list
            PlanningError: If the policy hits a fatal error
        """
        result = PlanResult()

        for description in partitions:
            key = PartitionKey(description.topic, description.partition)

            try:
                replicas = ReplicaSet.from_metadata(description.leader, description.replicas)
            except ValueError as e:
                raise MetadataSourceError(f"Invalid replicas for {key}: {e}") from e

            try:
                new_replicas = self.policy.reassign(replicas)
            except PlanningError as e:
                e.partition_key = key

                if self.policy.is_fatal(e):
                    logger.error(
                        "Aborting plan",
                        topic=key.topic,
                        partition=key.partition,
                        replicas=replicas.to_list(),
                        error_kind=e.kind,
                        error=str(e),
                    )
                    raise

                logger.warning(
                    "Cannot find any reassignment for partition",
                    topic=key.topic,
                    partition=key.partition,
                    replicas=replicas.to_list(),
                    error_kind=e.kind,
                    error=str(e),
                )
                result.errors[key] = e
                result.entries.append(ReassignmentEntry(key, replicas, replicas))
                continue

            if new_replicas is None:
                result.skipped.append(key)
                continue

            if new_replicas.is_deletion:
                if key.topic not in result.topics_to_delete:
                    result.topics_to_delete.append(key.topic)
                continue

            result.entries.append(ReassignmentEntry(key, replicas, new_replicas))

        logger.info("Built reassignment plan", **result.summary())

        return result
