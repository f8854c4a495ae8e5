"""
Reassignment plan serialization.

Produces the JSON document read by kafka-reassign-partitions:

    {"partitions": [{"topic": "t", "partition": 0, "replicas": [1, 2]}], "version": 1}
"""

import json
from typing import IO, List

from replicaplanner.errors import PlannerError
from replicaplanner.planner.builder import PlanResult, ReassignmentEntry
from replicaplanner.planner.replicas import PartitionKey, ReplicaSet

PLAN_VERSION = 1


class PlanSerializer:
    """Renders plan results in the reassignment wire format."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def to_dict(self, result: PlanResult) -> dict:
        """Convert a plan result to the wire format dictionary."""
        return {
            "partitions": [
                {
                    "topic": entry.topic,
                    "partition": entry.partition,
                    "replicas": entry.new_replicas.to_list(),
                }
                for entry in result.entries
            ],
            "version": PLAN_VERSION,
        }

    def dumps(self, result: PlanResult) -> str:
        return json.dumps(self.to_dict(result), indent=self.indent)

    def write(self, result: PlanResult, stream: IO[str]) -> None:
        """Write a plan result followed by a newline."""
        stream.write(self.dumps(result))
        stream.write("\n")

    @staticmethod
    def loads(text: str) -> List[ReassignmentEntry]:
        """
        Parse a plan document.

        Old replicas are unknown when reading a plan back, so they are set
        to the new replicas.

        Args:
            text: JSON plan

        Returns:
            Plan entries in document order

        Raises:
            PlannerError: If the document is not a valid plan
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PlannerError(f"Plan is not valid JSON: {e}") from e

        if not isinstance(data, dict) or data.get("version") != PLAN_VERSION:
            raise PlannerError(f"Unsupported plan, expected version {PLAN_VERSION}")

        entries = []
        for item in data.get("partitions", []):
            try:
                key = PartitionKey(str(item["topic"]), int(item["partition"]))
                replicas = ReplicaSet(item["replicas"])
            except (KeyError, TypeError, ValueError) as e:
                raise PlannerError(f"Invalid plan entry {item!r}: {e}") from e
            entries.append(ReassignmentEntry(key, replicas, replicas))

        return entries
