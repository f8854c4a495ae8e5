"""Checks run on a plan before it is handed to the reassignment executor."""

from collections import Counter
from typing import Optional

from replicaplanner.planner.builder import PlanResult
from replicaplanner.planner.pool import BrokerPool
from replicaplanner.utils.logging import get_logger

logger = get_logger(__name__)


def validate_plan(result: PlanResult, pool: Optional[BrokerPool] = None) -> bool:
    """
    Verify that a plan is valid for execution.

    Rules:
    - Every partition appears at most once
    - No duplicate broker IDs within a replica list
    - Broker IDs are non-negative integers
    - Brokers added from a pool are selectable in that pool

    Args:
        result: Plan to check
        pool: Pool new brokers were drawn from, if any

    Returns:
        True if the plan passes every check
    """
    key_counts = Counter(entry.key for entry in result.entries)
    duplicates = [str(key) for key, count in key_counts.items() if count > 1]
    if duplicates:
        logger.error("Duplicate partitions in plan", partitions=duplicates)
        return False

    for entry in result.entries:
        replicas = entry.new_replicas.to_list()

        if not replicas:
            logger.error("Empty replica list", topic=entry.topic, partition=entry.partition)
            return False

        if len(set(replicas)) != len(replicas):
            logger.error(
                "Duplicate brokers in replica list",
                topic=entry.topic,
                partition=entry.partition,
                replicas=replicas,
            )
            return False

        if any(isinstance(b, bool) or not isinstance(b, int) or b < 0 for b in replicas):
            logger.error(
                "Invalid broker ID in replica list",
                topic=entry.topic,
                partition=entry.partition,
                replicas=replicas,
            )
            return False

        if pool is not None:
            added = [b for b in replicas if b not in entry.old_replicas]
            invalid = [b for b in added if not pool.contains(b)]
            if invalid:
                logger.error(
                    "Brokers outside the pool were added",
                    topic=entry.topic,
                    partition=entry.partition,
                    brokers=invalid,
                )
                return False

    return True
