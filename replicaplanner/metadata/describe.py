"""
Parser for `kafka-topics --describe` output.

Handles both layouts:
- Kafka 0.8-2.x:  "\tTopic: t\tPartition: 0\tLeader: 1\tReplicas: 1,2\tIsr: 1,2"
- Kafka 3.x:      same partition line, plus TopicId/Elr columns on headers

Topic header lines (PartitionCount, ReplicationFactor, Configs) are ignored.
"""

import re
from typing import Iterable, List

from replicaplanner.errors import MetadataSourceError
from replicaplanner.metadata.partition import PartitionDescription
from replicaplanner.utils.logging import get_logger

logger = get_logger(__name__)

_PARTITION_LINE = re.compile(r"\bPartition:")

_PARTITION_FIELDS = re.compile(
    r"Topic:\s*(?P<topic>\S+)\s+"
    r"Partition:\s*(?P<partition>\d+)\s+"
    r"Leader:\s*(?P<leader>-?\d+|none)\s+"
    r"Replicas:\s*(?P<replicas>\d+(?:,\d+)*)"
)


def parse_partition_line(line: str) -> PartitionDescription:
    """
    Parse a single partition line.

    Args:
        line: One line of describe output

    Returns:
        Partition description

    Raises:
        MetadataSourceError: If the line cannot be parsed
    """
    match = _PARTITION_FIELDS.search(line)
    if match is None:
        raise MetadataSourceError(f"Cannot parse partition line: {line.strip()!r}")

    leader_text = match.group("leader")
    leader = None if leader_text in ("none", "-1") else int(leader_text)

    return PartitionDescription(
        topic=match.group("topic"),
        partition=int(match.group("partition")),
        leader=leader,
        replicas=tuple(int(b) for b in match.group("replicas").split(",")),
    )


def parse_describe_output(lines: Iterable[str]) -> List[PartitionDescription]:
    """
    Parse describe output into partition descriptions, in listing order.

    Args:
        lines: Output lines

    Returns:
        List of partition descriptions
    """
    partitions = []

    for line in lines:
        if not _PARTITION_LINE.search(line):
            continue
        partitions.append(parse_partition_line(line))

    logger.debug("Parsed describe output", partitions=len(partitions))

    return partitions
