"""
Cluster metadata sources.

Supply the current partition layout to the planner.
"""

from replicaplanner.metadata.describe import parse_describe_output
from replicaplanner.metadata.partition import PartitionDescription
from replicaplanner.metadata.source import (
    DescribeFileSource,
    KafkaTopicsSource,
    MetadataSource,
    StaticMetadataSource,
)

__all__ = [
    "PartitionDescription",
    "parse_describe_output",
    # Sources
    "MetadataSource",
    "KafkaTopicsSource",
    "DescribeFileSource",
    "StaticMetadataSource",
]
