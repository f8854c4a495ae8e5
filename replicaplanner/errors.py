"""
Error taxonomy for replica planning.

Fatal errors (configuration, metadata source, failed decommission) stop the
run before any plan is written. Per-partition errors are recorded by the plan
builder and reported next to the plan.
"""

from typing import Optional, Tuple


class PlannerError(Exception):
    """Base class for all planner errors."""


class ConfigurationError(PlannerError):
    """Operator intent is missing, malformed or contradictory."""


class MetadataSourceError(PlannerError):
    """Cluster metadata could not be fetched or parsed."""


class PlanningError(PlannerError):
    """
    Failure to compute new replicas for a partition.

    Attributes:
        partition_key: (topic, partition) the error belongs to, once known
    """

    def __init__(self, message: str, partition_key: Optional[Tuple[str, int]] = None):
        super().__init__(message)
        self.partition_key = partition_key

    @property
    def kind(self) -> str:
        """Error class name, used in diagnostics."""
        return type(self).__name__


class EmptyPoolError(PlanningError):
    """Broker pool has no candidate left after exclusions."""


class OutOfRangeError(PlanningError):
    """Target replication factor is outside the valid bounds."""


class NoCandidateError(PlanningError):
    """No distinct broker is left to add to a replica set."""


class InsufficientBrokersError(OutOfRangeError, NoCandidateError):
    """Target replication factor exceeds the number of brokers in the pool."""


class NoReplacementFoundError(PlanningError):
    """Decommission found no broker to take over from the subject."""


class InvalidExplicitTargetError(PlanningError):
    """Explicit replacement broker is already a replica of the partition."""
