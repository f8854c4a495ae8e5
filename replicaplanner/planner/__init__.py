"""
Replica reassignment planning.

Computes new replica lists per partition from the current layout.
"""

from replicaplanner.errors import (
    ConfigurationError,
    EmptyPoolError,
    InsufficientBrokersError,
    InvalidExplicitTargetError,
    MetadataSourceError,
    NoCandidateError,
    NoReplacementFoundError,
    OutOfRangeError,
    PlannerError,
    PlanningError,
)
from replicaplanner.planner.builder import PlanBuilder, PlanResult, ReassignmentEntry
from replicaplanner.planner.policy import (
    DecommissionPolicy,
    ReassignmentPolicy,
    ScalePolicy,
)
from replicaplanner.planner.pool import BrokerPool
from replicaplanner.planner.replicas import PartitionKey, ReplicaSet
from replicaplanner.planner.selector import CandidateSelector
from replicaplanner.planner.serializer import PlanSerializer
from replicaplanner.planner.validation import validate_plan

__all__ = [
    # Model
    "BrokerPool",
    "PartitionKey",
    "ReplicaSet",
    # Selection and policies
    "CandidateSelector",
    "ReassignmentPolicy",
    "ScalePolicy",
    "DecommissionPolicy",
    # Plans
    "PlanBuilder",
    "PlanResult",
    "ReassignmentEntry",
    "PlanSerializer",
    "validate_plan",
    # Errors
    "PlannerError",
    "ConfigurationError",
    "MetadataSourceError",
    "PlanningError",
    "EmptyPoolError",
    "OutOfRangeError",
    "NoCandidateError",
    "InsufficientBrokersError",
    "NoReplacementFoundError",
    "InvalidExplicitTargetError",
]
